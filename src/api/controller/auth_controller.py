"""Session login for the listings API."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field

from src.api.dependencies import SESSION_USER_KEY, current_user_id, get_user_service
from src.services import AuthenticationError, UserRegistrationError, UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=8)


class LoginRequest(BaseModel):
    username: str
    password: str


class UserResponse(BaseModel):
    id: int
    username: str
    email: str


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    request: Request,
    users: UserService = Depends(get_user_service),
) -> UserResponse:
    """Register an account and sign it in."""
    try:
        user = users.register_user(payload.username, payload.email, payload.password)
    except UserRegistrationError as e:
        logger.info(f"Registration rejected for {payload.username}: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="El usuario o el correo ya están registrados.",
        ) from e

    request.session[SESSION_USER_KEY] = user.id
    return UserResponse(id=user.id, username=user.username, email=user.email)


@router.post("/login", response_model=UserResponse)
def login(
    payload: LoginRequest,
    request: Request,
    users: UserService = Depends(get_user_service),
) -> UserResponse:
    try:
        user = users.authenticate(payload.username, payload.password)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Credenciales incorrectas.",
        ) from e

    request.session[SESSION_USER_KEY] = user.id
    logger.info(f"User {user.id} logged in")
    return UserResponse(id=user.id, username=user.username, email=user.email)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(request: Request, user_id: int = Depends(current_user_id)) -> None:
    request.session.clear()
    logger.info(f"User {user_id} logged out")
