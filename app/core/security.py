"""Security utilities: JWT, password hashing, RBAC."""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

import bcrypt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.db.session import get_db
from app.models.user import User

# Swagger shows a single "paste your access token" box
security = HTTPBearer()

_CREDENTIALS_ERROR = "Could not validate credentials"


class Role(str, Enum):
    """User roles."""

    ADMIN = "admin"
    EMPLOYER = "employer"
    JOB_SEEKER = "job_seeker"


# Roles a user may act as (admins act as anyone)
ROLE_HIERARCHY = {
    Role.ADMIN: {Role.ADMIN, Role.EMPLOYER, Role.JOB_SEEKER},
    Role.EMPLOYER: {Role.EMPLOYER},
    Role.JOB_SEEKER: {Role.JOB_SEEKER},
}


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=12)).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """Check a plain password against its bcrypt hash; False for users without a password."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Signed access token carrying ``data`` (``sub`` is the user id as a string)."""
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {**data, "exp": datetime.utcnow() + lifetime, "type": "access"}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def _unauthorized(detail: str = _CREDENTIALS_ERROR) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_token(token: str) -> dict:
    """Verify signature and expiry. Raises 401 on any problem."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise _unauthorized()
    if payload.get("type", "access") != "access":
        raise _unauthorized()
    return payload


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the bearer token to an active user."""
    payload = decode_token(credentials.credentials)

    subject = str(payload.get("sub") or "")
    if not subject.isdigit():
        raise _unauthorized()

    user = await db.get(User, int(subject))
    if user is None:
        raise _unauthorized("User not found")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")

    return user


def has_role(user: User, role: Role) -> bool:
    try:
        user_role = Role(user.role)
    except ValueError:
        return False
    return role in ROLE_HIERARCHY[user_role]


def require_role(*allowed_roles: Role):
    """Dependency factory: current user must be able to act as one of ``allowed_roles``."""

    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if any(has_role(current_user, role) for role in allowed_roles):
            return current_user

        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Insufficient permissions. Required: {[r.value for r in allowed_roles]}",
        )

    return role_checker
