# Authentication API routes: registration, token issuance, refresh and logout

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from todo_app.db_handlers.user import UserDBHandler
from todo_app.dependencies.auth import SessionContext, get_current_session, get_current_user
from todo_app.dependencies.services import get_token_service
from todo_app.models import User
from todo_app.schemas import (
    LogoutRequest,
    MessageResponse,
    RefreshTokenRequest,
    TokenResponse,
    UserInfo,
    UserLogin,
    UserRegister,
)
from todo_app.services.token_service import TokenService
from todo_app.utils.logger import setup_logger

logger = setup_logger("api.auth")

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post(
    "/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED
)
async def register_user(
    user_data: UserRegister,
    user_db_handler: UserDBHandler = Depends(),
):
    """Register a new user with username and password."""
    existing_user = await user_db_handler.get_user_by_username(user_data.username)
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already registered",
        )

    try:
        await user_db_handler.create_user(
            user_data.username,
            user_data.password,
            first_name=user_data.first_name,
            last_name=user_data.last_name,
            email=user_data.email,
        )
    except IntegrityError as e:
        # Registered concurrently under the same name
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already registered",
        ) from e

    return MessageResponse(message="User registered successfully")


@router.post("/login", response_model=TokenResponse)
async def login_user(
    user_data: UserLogin,
    token_service: TokenService = Depends(get_token_service),
):
    """Authenticate with username and password and return an access/refresh token pair."""
    if not user_data.username.strip() or not user_data.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username and password are required.",
        )

    try:
        tokens = await token_service.login(user_data)
    except SQLAlchemyError as e:
        logger.error(f"Unexpected error during login: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred. Please try again later.",
        ) from e

    if tokens is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid username or password.",
        )
    return tokens


@router.post("/refresh-token", response_model=TokenResponse)
async def refresh_token(
    request: RefreshTokenRequest,
    token_service: TokenService = Depends(get_token_service),
):
    """Exchange a refresh token for a new token pair. The presented refresh token is consumed."""
    if not request.user_id.strip() or not request.refresh_token.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User id and refresh token are required.",
        )

    try:
        tokens = await token_service.refresh_tokens(request)
    except SQLAlchemyError as e:
        logger.error(f"Unexpected error during token refresh: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred. Please try again later.",
        ) from e

    if tokens is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token.",
        )
    return tokens


@router.post("/logout", response_model=MessageResponse)
async def logout_user(
    request: LogoutRequest,
    session: SessionContext = Depends(get_current_session),
    token_service: TokenService = Depends(get_token_service),
):
    """Discard the caller's stored access token."""
    if request.user_id.strip() != str(session.user_id):
        logger.warning(
            f"User {session.user_id} tried to log out user id '{request.user_id}'"
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Logout failed."
        )

    try:
        logged_out = await token_service.logout(request)
    except SQLAlchemyError as e:
        logger.error(f"Unexpected error during logout: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred. Please try again later.",
        ) from e

    if not logged_out:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Logout failed."
        )
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserInfo)
async def get_current_user_info(
    current_user: User = Depends(get_current_user),
):
    """Retrieve current authenticated user's profile information."""
    return UserInfo.model_validate(current_user)
