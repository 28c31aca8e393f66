from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from college_events.database import get_db
from college_events.dependencies import get_current_user, require_token
from college_events.models.user import User
from college_events.schemas.auth import LoginRequest, LoginResponse, RegisterRequest, UserResponse
from college_events.schemas.event import MessageResponse
from college_events.services.auth_service import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


def _user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        created_at=user.created_at,
    )


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(req: RegisterRequest, db: Session = Depends(get_db)):
    user = auth_service.register(db, req.name, req.email, req.password)
    return _user_to_response(user)


@router.post("/login", response_model=LoginResponse)
async def login(req: LoginRequest, request: Request, db: Session = Depends(get_db)):
    client_host = request.client.host if request.client else "unknown"
    result = auth_service.login(db, req.email, req.password, throttle_key=f"login:{client_host}")
    return LoginResponse(**result)


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)):
    return _user_to_response(current_user)


@router.post("/logout", response_model=MessageResponse)
async def logout(token: str = Depends(require_token), _user: User = Depends(get_current_user)):
    auth_service.logout(token)
    return MessageResponse(message="Logged out")
