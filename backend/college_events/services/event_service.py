import logging
import uuid
from datetime import datetime, timezone

from fastapi import UploadFile
from sqlalchemy import or_
from sqlalchemy.orm import Session

from college_events.exceptions import ForbiddenError, NotFoundError, ValidationError
from college_events.models.event import Event
from college_events.models.user import User
from college_events.schemas.event import EventFields
from college_events.services.attachment_service import (
    discard_attachment,
    has_upload,
    store_attachment,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "type", "description", "date")
EDITABLE_FIELDS = ("title", "type", "description", "date", "location")


def _utcnow() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def normalize_date(value: str) -> str:
    """Parse an ISO-8601 date or datetime and render it as a UTC timestamp string.

    Naive values are taken to be UTC. The fixed-width output keeps string
    ordering in the database identical to chronological ordering.
    """
    try:
        parsed = datetime.fromisoformat(value.strip())
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        d = parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        raise ValidationError("Invalid date") from None
    # strftime("%Y") does not zero-pad years below 1000 on every platform
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}T{d.hour:02d}:{d.minute:02d}:{d.second:02d}Z"


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _owned_event(db: Session, event_id: str, caller: User, action: str) -> Event:
    event = get_event(db, event_id)
    if event.created_by != caller.id:
        logger.warning("User %s tried to %s event %s owned by %s", caller.id, action, event_id, event.created_by)
        raise ForbiddenError(f"Not authorized to {action} this event")
    return event


def list_events(db: Session, search: str | None = None) -> list[Event]:
    query = db.query(Event)
    if search:
        pattern = _like_pattern(search)
        query = query.filter(or_(
            Event.title.ilike(pattern, escape="\\"),
            Event.type.ilike(pattern, escape="\\"),
        ))
    return query.order_by(Event.date.asc(), Event.created_at.asc()).all()


def get_event(db: Session, event_id: str) -> Event:
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise NotFoundError("Event not found")
    return event


async def create_event(db: Session, fields: EventFields, image: UploadFile | None, caller: User) -> Event:
    if any(not getattr(fields, name) for name in REQUIRED_FIELDS):
        raise ValidationError("Missing required fields")
    date = normalize_date(fields.date)

    image_url = await store_attachment(image) if has_upload(image) else None

    now = _utcnow()
    event = Event(
        id=str(uuid.uuid4()),
        title=fields.title,
        type=fields.type,
        description=fields.description,
        date=date,
        location=fields.location or None,
        image_url=image_url,
        created_by=caller.id,
        created_at=now,
        updated_at=now,
    )
    db.add(event)
    try:
        db.commit()
    except Exception:
        db.rollback()
        discard_attachment(image_url)
        raise
    db.refresh(event)
    logger.info("Event %s created by %s", event.id, caller.id)
    return event


async def update_event(
    db: Session,
    event_id: str,
    fields: EventFields,
    image: UploadFile | None,
    caller: User,
) -> tuple[Event, str | None]:
    """Apply the non-empty fields to an owned event.

    Returns the event and the image path it no longer references, if any, so
    the caller can schedule the old file for removal.
    """
    event = _owned_event(db, event_id, caller, "edit")

    # Empty values count as "not provided"; a field cannot be cleared this way
    changes = {name: getattr(fields, name) for name in EDITABLE_FIELDS if getattr(fields, name)}
    if "date" in changes:
        changes["date"] = normalize_date(changes["date"])

    replaced_url = None
    new_url = None
    if has_upload(image):
        new_url = await store_attachment(image)
        replaced_url = event.image_url
        changes["image_url"] = new_url

    for name, value in changes.items():
        setattr(event, name, value)
    event.updated_at = _utcnow()
    try:
        db.commit()
    except Exception:
        db.rollback()
        discard_attachment(new_url)
        raise
    db.refresh(event)
    logger.info("Event %s updated by %s (%s)", event.id, caller.id, ", ".join(sorted(changes)) or "no changes")
    return event, replaced_url


def remove_event(db: Session, event_id: str, caller: User) -> str | None:
    """Delete an owned event and return the image path left to clean up."""
    event = _owned_event(db, event_id, caller, "delete")
    image_url = event.image_url
    db.delete(event)
    db.commit()
    logger.info("Event %s deleted by %s", event_id, caller.id)
    return image_url
