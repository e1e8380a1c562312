"""Registration, login and current-user endpoints."""

import logging

from fastapi import APIRouter, Request, status
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError

from photoshelf.api.deps import CurrentUser, DBSession
from photoshelf.core.config import settings
from photoshelf.core.exceptions import ConflictException, UnauthorizedException
from photoshelf.core.security import create_access_token, hash_password, verify_password
from photoshelf.middleware.rate_limit import limiter
from photoshelf.models import User
from photoshelf.schemas.common import ApiResponse
from photoshelf.schemas.user import LoginRequest, RegisterRequest, TokenData, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def _token_payload(user: User) -> TokenData:
    return TokenData(
        user=UserResponse.model_validate(user),
        token=create_access_token(user.id),
    )


@router.post(
    "/register",
    response_model=ApiResponse[TokenData],
    status_code=status.HTTP_201_CREATED,
    summary="Register",
)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def register(
    request: Request,
    payload: RegisterRequest,
    db: DBSession,
) -> ApiResponse[TokenData]:
    """Create an account and log it in.

    Raises:
        ConflictException: Username or email already registered.
    """
    result = await db.execute(
        select(User).where(
            or_(User.username == payload.username, User.email == payload.email)
        )
    )
    existing = result.scalars().first()
    if existing is not None:
        field = "email" if existing.email == payload.email else "username"
        raise ConflictException(
            f"This {field} is already registered",
            details={"field": field},
        )

    user = User(
        username=payload.username,
        email=payload.email,
        password_hash=hash_password(payload.password),
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as e:
        # Lost a race with a concurrent registration
        raise ConflictException("This username or email is already registered") from e
    await db.refresh(user)

    logger.info(f"Registered user {user.id} ({user.username})")
    return ApiResponse(message="Registration successful", data=_token_payload(user))


@router.post(
    "/login",
    response_model=ApiResponse[TokenData],
    summary="Log in",
)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def login(
    request: Request,
    payload: LoginRequest,
    db: DBSession,
) -> ApiResponse[TokenData]:
    """Exchange email and password for an access token.

    Raises:
        UnauthorizedException: Unknown email or wrong password (same message
            for both, so accounts cannot be enumerated).
    """
    result = await db.execute(select(User).where(User.email == payload.email))
    user = result.scalars().first()

    if user is None or not verify_password(payload.password, user.password_hash):
        logger.warning(f"Failed login for {payload.email}")
        raise UnauthorizedException("Invalid email or password")

    logger.info(f"User {user.id} logged in")
    return ApiResponse(message="Login successful", data=_token_payload(user))


@router.get(
    "/me",
    response_model=ApiResponse[UserResponse],
    summary="Current user",
)
async def me(current_user: CurrentUser) -> ApiResponse[UserResponse]:
    return ApiResponse(data=UserResponse.model_validate(current_user))
