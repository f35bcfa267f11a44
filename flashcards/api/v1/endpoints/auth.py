from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from flashcards.core.database import get_session
from flashcards.models import User
from flashcards.schemas.auth import LoginRequest, RegisterRequest, AuthResponse, UserResponse
from flashcards.schemas.common import MessageResponse
from flashcards.services.user_service import authenticate_user, register_user

router = APIRouter(prefix="/auth", tags=["auth"])


def _user_response(user: User) -> UserResponse:
    return UserResponse(id=user.id, email=user.email, created_at=user.created_at.isoformat())


@router.post("/login", response_model=AuthResponse)
async def login(
    login_data: LoginRequest,
    session: Session = Depends(get_session)
):
    """Login with email and password."""
    user = authenticate_user(session, login_data.email, login_data.password)
    return AuthResponse(user=_user_response(user), message="Login successful")


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    register_data: RegisterRequest,
    session: Session = Depends(get_session)
):
    """Register a new user."""
    user = register_user(session, register_data.email, register_data.password)
    return AuthResponse(user=_user_response(user), message="Registration successful")


@router.post("/logout", response_model=MessageResponse)
async def logout():
    # Sessions are held by the client; nothing to revoke server-side
    return MessageResponse(message="Logout successful")
