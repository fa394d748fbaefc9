"""
API Dependencies
Common dependencies for API endpoints (database, authentication, services)
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.cache import CacheManager, OtpStore, RateLimiter
from app.core.security import Role, get_current_user, require_role
from app.db.session import get_db
from app.services.application_service import ApplicationService
from app.services.ats_scorer import AtsScorer
from app.services.email_service import EmailService
from app.services.file_storage_service import FileStorageGateway, get_file_storage
from app.services.notification_service import NotificationService

__all__ = [
    "Role",
    "get_application_service",
    "get_cache_manager",
    "get_current_user",
    "get_db",
    "get_email_service",
    "get_notification_service",
    "get_otp_rate_limiter",
    "get_otp_store",
    "require_role",
]


@lru_cache
def get_cache_manager() -> CacheManager:
    """Process-wide Redis connection owner"""
    return CacheManager(settings)


def get_otp_store(cache: CacheManager = Depends(get_cache_manager)) -> OtpStore:
    return OtpStore(cache, ttl=settings.OTP_TTL_SECONDS)


def get_otp_rate_limiter(cache: CacheManager = Depends(get_cache_manager)) -> RateLimiter:
    return RateLimiter(cache, limit=settings.OTP_MAX_REQUESTS, window=settings.OTP_RATE_WINDOW_SECONDS)


@lru_cache
def get_email_service() -> EmailService:
    return EmailService(settings)


def get_storage() -> FileStorageGateway:
    return get_file_storage()


@lru_cache
def get_ats_scorer() -> AtsScorer:
    return AtsScorer()


def get_application_service(
    db: AsyncSession = Depends(get_db),
    storage: FileStorageGateway = Depends(get_storage),
    scorer: AtsScorer = Depends(get_ats_scorer),
) -> ApplicationService:
    return ApplicationService(db, storage=storage, scorer=scorer)


def get_notification_service(db: AsyncSession = Depends(get_db)) -> NotificationService:
    return NotificationService(db)
