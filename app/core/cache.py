"""Redis-backed expiring stores for OTP codes and request rate limits."""

import logging
import secrets
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import ConnectionError, TimeoutError
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from app.config import Settings

logger = logging.getLogger(__name__)

_redis_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
    retry=retry_if_exception_type((ConnectionError, TimeoutError)),
    reraise=True,
)


class CacheManager:
    """
    Owns the Redis connection used by the keyed stores.

    State lives in Redis rather than process memory, so codes and counters
    survive restarts and are shared by every worker.
    """

    def __init__(self, settings: Settings, client: Optional[redis.Redis] = None):
        self.settings = settings
        self._client = client

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.from_url(
                self.settings.REDIS_URL,
                decode_responses=True,
                socket_timeout=self.settings.REDIS_SOCKET_TIMEOUT,
            )
            logger.info("Redis client created for %s", self.settings.REDIS_URL)
        return self._client

    async def is_healthy(self) -> bool:
        """Check if Redis connection is healthy."""
        try:
            return bool(await self.client.ping())
        except Exception:
            return False

    async def disconnect(self) -> None:
        """Close Redis connection and cleanup resources."""
        if self._client is not None:
            try:
                await self._client.aclose()
                logger.info("Redis connection closed")
            except Exception as e:
                logger.error(f"Error closing Redis connection: {e}")
            self._client = None


class OtpStore:
    """One-time codes keyed by email, expiring after ``ttl`` seconds."""

    key_prefix = "otp:"

    def __init__(self, cache: CacheManager, ttl: int):
        self.cache = cache
        self.ttl = ttl

    def _key(self, email: str) -> str:
        return f"{self.key_prefix}{email.strip().lower()}"

    @staticmethod
    def generate_code() -> str:
        """Random 6-digit code."""
        return str(secrets.randbelow(900000) + 100000)

    @_redis_retry
    async def issue(self, email: str) -> str:
        """Create (or replace) the code for ``email`` and return it."""
        code = self.generate_code()
        await self.cache.client.set(self._key(email), code, ex=self.ttl)
        return code

    @_redis_retry
    async def verify(self, email: str, code: str) -> bool:
        """
        Check ``code`` for ``email``.

        A matching code is consumed; only the caller that deletes the key
        succeeds, so a code can never be redeemed twice.
        """
        key = self._key(email)
        stored = await self.cache.client.get(key)
        if stored is None or not secrets.compare_digest(str(stored), str(code)):
            return False
        return await self.cache.client.delete(key) == 1


class RateLimiter:
    """Fixed-window request counter per key."""

    key_prefix = "ratelimit:"

    def __init__(self, cache: CacheManager, limit: int, window: int):
        self.cache = cache
        self.limit = limit
        self.window = window

    @_redis_retry
    async def hit(self, key: str) -> bool:
        """Count one request; False once ``limit`` is exceeded within the window."""
        redis_key = f"{self.key_prefix}{key}"
        count = await self.cache.client.incr(redis_key)
        if count == 1:
            await self.cache.client.expire(redis_key, self.window)
        return count <= self.limit
