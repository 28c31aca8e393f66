from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from college_events.database import get_db
from college_events.dependencies import get_current_user
from college_events.models.event import Event
from college_events.models.user import User
from college_events.schemas.event import EventFields, EventResponse, MessageResponse
from college_events.services import event_service
from college_events.services.attachment_service import discard_attachment

router = APIRouter(
    prefix="/events",
    tags=["events"],
    dependencies=[Depends(get_current_user)],
)


def _event_to_response(ev: Event) -> EventResponse:
    return EventResponse(
        id=ev.id,
        title=ev.title,
        type=ev.type,
        description=ev.description,
        date=ev.date,
        location=ev.location,
        image_url=ev.image_url,
        created_by=ev.created_by,
        created_at=ev.created_at,
        updated_at=ev.updated_at,
    )


def _event_fields(
    title: str | None = Form(None),
    event_type: str | None = Form(None, alias="type"),
    description: str | None = Form(None),
    date: str | None = Form(None),
    location: str | None = Form(None),
) -> EventFields:
    return EventFields(title=title, type=event_type, description=description, date=date, location=location)


@router.get("", response_model=list[EventResponse])
@router.get("/", response_model=list[EventResponse], include_in_schema=False)
async def list_events(search: str | None = None, db: Session = Depends(get_db)):
    events = event_service.list_events(db, search)
    return [_event_to_response(e) for e in events]


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(event_id: str, db: Session = Depends(get_db)):
    return _event_to_response(event_service.get_event(db, event_id))


@router.post("", response_model=EventResponse)
@router.post("/", response_model=EventResponse, include_in_schema=False)
async def create_event(
    fields: EventFields = Depends(_event_fields),
    image: UploadFile | None = File(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    event = await event_service.create_event(db, fields, image, current_user)
    return _event_to_response(event)


@router.put("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: str,
    background_tasks: BackgroundTasks,
    fields: EventFields = Depends(_event_fields),
    image: UploadFile | None = File(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    event, replaced_url = await event_service.update_event(db, event_id, fields, image, current_user)
    if replaced_url:
        background_tasks.add_task(discard_attachment, replaced_url)
    return _event_to_response(event)


@router.delete("/{event_id}", response_model=MessageResponse)
async def delete_event(
    event_id: str,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    image_url = event_service.remove_event(db, event_id, current_user)
    if image_url:
        background_tasks.add_task(discard_attachment, image_url)
    return MessageResponse(message="Event deleted")
