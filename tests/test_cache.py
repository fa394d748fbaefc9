import unittest

from app.config import settings
from app.core.cache import CacheManager, OtpStore, RateLimiter
from tests.support import FakeRedis


class OtpStoreTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.redis = FakeRedis()
        self.store = OtpStore(CacheManager(settings, client=self.redis), ttl=600)

    async def test_issue_and_verify_once(self):
        code = await self.store.issue("Jane@Example.com")

        self.assertRegex(code, r"^\d{6}$")
        self.assertTrue(await self.store.verify("jane@example.com", code))
        self.assertFalse(await self.store.verify("jane@example.com", code))

    async def test_wrong_code_keeps_the_valid_one(self):
        code = await self.store.issue("jane@example.com")
        wrong = "000000" if code != "000000" else "111111"

        self.assertFalse(await self.store.verify("jane@example.com", wrong))
        self.assertTrue(await self.store.verify("jane@example.com", code))

    async def test_codes_expire(self):
        code = await self.store.issue("jane@example.com")
        self.redis.advance(601)
        self.assertFalse(await self.store.verify("jane@example.com", code))

    async def test_reissue_replaces_previous_code(self):
        first = await self.store.issue("jane@example.com")
        second = await self.store.issue("jane@example.com")
        if first != second:
            self.assertFalse(await self.store.verify("jane@example.com", first))
        self.assertTrue(await self.store.verify("jane@example.com", second))


class RateLimiterTests(unittest.IsolatedAsyncioTestCase):
    async def test_fixed_window(self):
        redis = FakeRedis()
        limiter = RateLimiter(CacheManager(settings, client=redis), limit=3, window=60)

        results = [await limiter.hit("otp:jane@example.com") for _ in range(4)]
        self.assertEqual(results, [True, True, True, False])

        # Other keys are counted separately
        self.assertTrue(await limiter.hit("otp:john@example.com"))

        redis.advance(61)
        self.assertTrue(await limiter.hit("otp:jane@example.com"))


class CacheManagerTests(unittest.IsolatedAsyncioTestCase):
    async def test_health_and_disconnect(self):
        manager = CacheManager(settings, client=FakeRedis())
        self.assertTrue(await manager.is_healthy())
        await manager.disconnect()
        self.assertIsNone(manager._client)


if __name__ == "__main__":
    unittest.main()
