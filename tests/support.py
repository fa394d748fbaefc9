"""Shared fixtures: temporary databases, fake Redis, scripted AI provider."""
import asyncio
import os
import shutil
import tempfile
import time
import unittest
from typing import List, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.security import get_password_hash
from app.db.base import Base
from app.models import Job, User, UserEducation
from app.services.ai.base import AIProvider


class TempDatabase:
    """SQLite file database; NullPool so connections never outlive an event loop."""

    def __init__(self):
        self.directory = tempfile.mkdtemp(prefix="job-portal-db-")
        self.url = "sqlite+aiosqlite:///" + os.path.join(self.directory, "test.db")
        self.engine = create_async_engine(self.url, poolclass=NullPool)
        self.sessionmaker = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )

    async def create_all(self):
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self):
        await self.engine.dispose()
        shutil.rmtree(self.directory, ignore_errors=True)

    async def add(self, *objects):
        async with self.sessionmaker() as session:
            session.add_all(objects)
            await session.commit()
        return objects[0] if len(objects) == 1 else objects

    async def create_user(self, email: str, role: str = "job_seeker", password: str = "secret123", **kwargs) -> User:
        return await self.add(
            User(email=email, name=email.split("@")[0], role=role, password_hash=get_password_hash(password), **kwargs)
        )

    async def create_job(self, company: User, **kwargs) -> Job:
        values = {
            "title": "Backend Engineer",
            "description": "Build APIs with Python and FastAPI",
            "location": "Pune",
            "type": "full_time",
            "status": "open",
            "skills": ["Python", "FastAPI", "PostgreSQL"],
            "tags": ["backend"],
            "category": "Engineering",
            "experience_min": 2,
        }
        values.update(kwargs)
        return await self.add(Job(company_id=company.id, **values))

    async def add_education(self, user: User, *degrees: str):
        for degree in degrees:
            await self.add(UserEducation(user_id=user.id, school="Some University", degree=degree))


class DatabaseTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.database = TempDatabase()
        await self.database.create_all()

    async def asyncTearDown(self):
        await self.database.dispose()


class FakeRedis:
    """In-memory subset of the redis.asyncio client used by the cache stores."""

    def __init__(self):
        self.values = {}
        self.expiry = {}
        self.offset = 0.0

    def advance(self, seconds: float):
        self.offset += seconds

    def _now(self):
        return time.monotonic() + self.offset

    def _purge(self, key):
        deadline = self.expiry.get(key)
        if deadline is not None and deadline <= self._now():
            self.values.pop(key, None)
            self.expiry.pop(key, None)

    async def set(self, key, value, ex=None):
        self.values[key] = str(value)
        if ex is not None:
            self.expiry[key] = self._now() + ex
        else:
            self.expiry.pop(key, None)
        return True

    async def get(self, key):
        self._purge(key)
        return self.values.get(key)

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            self._purge(key)
            if key in self.values:
                del self.values[key]
                self.expiry.pop(key, None)
                removed += 1
        return removed

    async def incr(self, key):
        self._purge(key)
        value = int(self.values.get(key, 0)) + 1
        self.values[key] = str(value)
        return value

    async def expire(self, key, seconds):
        if key in self.values:
            self.expiry[key] = self._now() + seconds
            return True
        return False

    async def ping(self):
        return True

    async def aclose(self):
        return None


class ScriptedProvider(AIProvider):
    """Returns canned answers (or raises) and records the prompts it was sent."""

    def __init__(self, *answers: Union[str, BaseException], delay: float = 0.0):
        self.answers: List[Union[str, BaseException]] = list(answers)
        self.prompts: List[str] = []
        self.delay = delay

    async def complete(self, prompt: str, *, max_tokens: int, temperature: float) -> str:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        answer = self.answers.pop(0) if len(self.answers) > 1 else self.answers[0]
        if isinstance(answer, BaseException):
            raise answer
        return answer

    @property
    def name(self) -> str:
        return "scripted"

    @property
    def model(self) -> str:
        return "scripted-model"


def last_prompt(provider: ScriptedProvider) -> Optional[str]:
    return provider.prompts[-1] if provider.prompts else None
