from fastapi import Depends, Header
from sqlalchemy.orm import Session

from college_events.database import get_db
from college_events.exceptions import AuthenticationError
from college_events.models.user import User
from college_events.services.auth_service import auth_service


async def require_token(authorization: str | None = Header(None)) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthenticationError("Missing bearer token")
    return authorization[7:]


async def get_current_user(
    token: str = Depends(require_token),
    db: Session = Depends(get_db),
) -> User:
    return auth_service.authenticate(db, token)
