"""Registration, login, and current-user endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user_id, get_settings
from core.auth import create_access_token
from core.config import Settings
from schemas.user import (
    AuthResponse,
    CurrentUserResponse,
    LoginRequest,
    RegisterRequest,
    UserResponse,
)
from services import user_service
from services.exceptions import EmailAlreadyExistsError

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    data: RegisterRequest,
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    """Register a new user and return a session token."""
    try:
        user = await user_service.create_user(
            db, data.email, data.password, bcrypt_rounds=settings.bcrypt_rounds,
        )
    except EmailAlreadyExistsError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already in use")
    return AuthResponse(
        message="User registered successfully",
        token=create_access_token(user.id, settings),
        user=UserResponse.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    """Check credentials and return a session token."""
    user = await user_service.authenticate_user(db, data.email, data.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return AuthResponse(
        message="Login successful",
        token=create_access_token(user.id, settings),
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=CurrentUserResponse)
async def get_me(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_async_session),
) -> CurrentUserResponse:
    """Get the current authenticated user's info."""
    user = await user_service.get_user_by_id(db, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return CurrentUserResponse(user=UserResponse.model_validate(user))
