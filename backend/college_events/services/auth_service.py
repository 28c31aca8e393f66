import logging
import time
import uuid
from datetime import datetime, timezone

from sqlalchemy import text
from sqlalchemy.orm import Session

from college_events.config import settings
from college_events.exceptions import (
    AuthenticationError,
    ConflictError,
    ThrottledError,
    ValidationError,
)
from college_events.models.user import User
from college_events.utils.security import generate_token, hash_password, verify_password

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self):
        self._active_tokens: dict[str, tuple[str, float]] = {}  # token -> (user_id, expires_at)

    def _cleanup_expired(self):
        now = time.time()
        self._active_tokens = {
            t: entry for t, entry in self._active_tokens.items() if entry[1] > now
        }

    def register(self, db: Session, name: str, email: str, password: str) -> User:
        name = (name or "").strip()
        email = (email or "").strip().lower()
        if not name or not email or not password:
            raise ValidationError("Missing required fields")
        if len(password) < settings.min_password_length:
            raise ValidationError(
                f"Password must be at least {settings.min_password_length} characters"
            )
        if db.query(User).filter(User.email == email).first():
            raise ConflictError("User already exists")

        user = User(
            id=str(uuid.uuid4()),
            name=name,
            email=email,
            password_hash=hash_password(password),
            created_at=datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info("Registered user %s", user.id)
        return user

    def login(self, db: Session, email: str, password: str, throttle_key: str = "login") -> dict:
        delay = self._get_throttle_delay(db, throttle_key)
        if delay > 0:
            raise ThrottledError("Too many failed attempts", retry_after_seconds=delay)

        email = (email or "").strip().lower()
        user = db.query(User).filter(User.email == email).first()
        if not user or not verify_password(user.password_hash, password):
            self._record_failed_attempt(db, throttle_key)
            logger.warning("Failed login for %s (%s)", email, throttle_key)
            raise AuthenticationError("Invalid credentials")

        self._reset_failed_attempts(db, throttle_key)
        token = generate_token()
        self._active_tokens[token] = (user.id, time.time() + settings.session_ttl_seconds)
        return {"token": token, "expires_in_seconds": settings.session_ttl_seconds}

    def authenticate(self, db: Session, token: str) -> User:
        """Resolve a bearer token to its user and push its expiry forward."""
        self._cleanup_expired()
        entry = self._active_tokens.get(token)
        if entry is None:
            raise AuthenticationError("Token is invalid or expired")
        user = db.query(User).filter(User.id == entry[0]).first()
        if user is None:
            self._active_tokens.pop(token, None)
            raise AuthenticationError("Token is invalid or expired")
        self._active_tokens[token] = (user.id, time.time() + settings.session_ttl_seconds)
        return user

    def logout(self, token: str):
        self._active_tokens.pop(token, None)

    def revoke_all(self):
        self._active_tokens.clear()

    def _get_throttle_delay(self, db: Session, key: str) -> float:
        row = db.execute(
            text("SELECT failed_attempts, last_failed_at FROM auth_throttle WHERE key = :key"),
            {"key": key},
        ).fetchone()
        if not row:
            return 0
        failed_attempts = int(row[0])
        last_failed_at = float(row[1])

        if failed_attempts < 3:
            return 0
        if failed_attempts < 5:
            delay = 5.0
        elif failed_attempts < 10:
            delay = 30.0
        else:
            delay = 300.0
        remaining = delay - (time.time() - last_failed_at)
        return max(0, remaining)

    def _record_failed_attempt(self, db: Session, key: str):
        now = time.time()
        db.execute(
            text(
                """
                INSERT INTO auth_throttle (key, failed_attempts, last_failed_at)
                VALUES (:key, 1, :now)
                ON CONFLICT(key) DO UPDATE SET
                    failed_attempts = failed_attempts + 1,
                    last_failed_at = :now
                """
            ),
            {"key": key, "now": now},
        )
        db.commit()

    def _reset_failed_attempts(self, db: Session, key: str):
        db.execute(
            text(
                """
                INSERT INTO auth_throttle (key, failed_attempts, last_failed_at)
                VALUES (:key, 0, :now)
                ON CONFLICT(key) DO UPDATE SET
                    failed_attempts = 0,
                    last_failed_at = :now
                """
            ),
            {"key": key, "now": time.time()},
        )
        db.commit()


auth_service = AuthService()
