"""Authentication endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from redis.exceptions import RedisError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_email_service, get_otp_rate_limiter, get_otp_store
from app.config import settings
from app.core.cache import OtpStore, RateLimiter
from app.core.security import (
    create_access_token,
    get_current_user,
    get_password_hash,
    verify_password,
)
from app.db.session import get_db
from app.models.user import User
from app.schemas.auth import (
    LoginRequest,
    MessageResponse,
    OtpRequest,
    OtpVerifyRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from app.services.email_service import EmailService
from app.utils.validators import validate_password_strength

logger = logging.getLogger(__name__)

router = APIRouter()

OTP_SENT_MESSAGE = "If the account exists, a login code has been sent to your email."


def _token_response(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token({"sub": str(user.id), "role": user.role}),
        user=UserResponse.model_validate(user),
    )


async def _find_user(db: AsyncSession, email: str):
    result = await db.execute(select(User).where(User.email == email.strip().lower()))
    return result.scalar_one_or_none()


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Register a new job seeker or employer."""
    valid, errors = validate_password_strength(request.password)
    if not valid:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="; ".join(errors))

    if await _find_user(db, request.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    new_user = User(
        email=request.email.strip().lower(),
        name=request.name.strip(),
        password_hash=get_password_hash(request.password),
        role=request.role,
    )

    db.add(new_user)
    await db.commit()
    await db.refresh(new_user)
    logger.info(f"Registered user {new_user.id} ({new_user.role})")

    return _token_response(new_user)


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Login with email and password."""
    user = await _find_user(db, request.email)

    if not user or not verify_password(request.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive",
        )

    return _token_response(user)


@router.post("/otp/request", response_model=MessageResponse)
async def request_login_otp(
    request: OtpRequest,
    db: AsyncSession = Depends(get_db),
    otp_store: OtpStore = Depends(get_otp_store),
    limiter: RateLimiter = Depends(get_otp_rate_limiter),
    email_service: EmailService = Depends(get_email_service),
):
    """Email a one-time login code. The response does not reveal whether the account exists."""
    email = request.email.strip().lower()
    try:
        if not await limiter.hit(f"otp:{email}"):
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many code requests. Please try again later.",
            )

        user = await _find_user(db, email)
        if user is None or not user.is_active:
            logger.info("Login code requested for unknown or inactive account")
            return MessageResponse(message=OTP_SENT_MESSAGE)

        code = await otp_store.issue(email)
    except RedisError as e:
        logger.error(f"OTP store unavailable: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Login codes are temporarily unavailable",
        )

    sent, error = await email_service.send_otp_email(email, code, settings.OTP_TTL_SECONDS)
    if not sent:
        logger.warning(f"Login code for user {user.id} not delivered: {error}")

    return MessageResponse(message=OTP_SENT_MESSAGE)


@router.post("/otp/verify", response_model=TokenResponse)
async def verify_login_otp(
    request: OtpVerifyRequest,
    db: AsyncSession = Depends(get_db),
    otp_store: OtpStore = Depends(get_otp_store),
):
    """Exchange a valid login code for an access token."""
    email = request.email.strip().lower()
    try:
        valid = await otp_store.verify(email, request.otp)
    except RedisError as e:
        logger.error(f"OTP store unavailable: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Login codes are temporarily unavailable",
        )

    user = await _find_user(db, email) if valid else None
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="OTP not found or invalid",
        )

    if not user.is_verified:
        user.is_verified = True
        await db.commit()

    return _token_response(user)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    return UserResponse.model_validate(current_user)
