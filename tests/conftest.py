import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("REDIS_URL", "redis://localhost:6399/0")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from datetime import datetime, timezone
from typing import AsyncGenerator, List, Optional
from httpx import AsyncClient, ASGITransport

from shortlink.errors import KeyGenerationError
from shortlink.repository.memory import ShortLinkMemory, UserShortLinkMemory
from shortlink.schemas import ShortLink, User
from shortlink.services.creator import ShortLinkCreator
from shortlink.services.validator import CustomAliasValidator, LongLinkValidator

FIXED_NOW = datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc)


class SequenceKeyGenerator:
    def __init__(self, keys: List[str]):
        self.keys = list(keys)
        self.calls = 0

    async def new_key(self) -> str:
        self.calls += 1
        if not self.keys:
            raise KeyGenerationError("no keys left")
        return self.keys.pop(0)


class StubRiskDetector:
    def __init__(self, malicious: Optional[List[str]] = None):
        self.malicious = set(malicious or [])
        self.checked: List[str] = []

    async def is_url_malicious(self, url: str) -> bool:
        self.checked.append(url)
        return url in self.malicious


class FixedClock:
    def __init__(self, instant: datetime = FIXED_NOW):
        self.instant = instant

    def now(self) -> datetime:
        return self.instant


class RecordingShortLinkRepo(ShortLinkMemory):
    def __init__(self, calls: List[str], existing: Optional[List[str]] = None):
        super().__init__()
        self.calls = calls
        for alias in existing or []:
            self.short_links[alias] = ShortLink(long_link="https://existing.example.com", alias=alias, created_at=FIXED_NOW)

    async def is_alias_exist(self, alias: str) -> bool:
        self.calls.append("is_alias_exist")
        return await super().is_alias_exist(alias)

    async def create_short_link(self, short_link: ShortLink) -> None:
        self.calls.append("create_short_link")
        await super().create_short_link(short_link)


class RecordingUserShortLinkRepo(UserShortLinkMemory):
    def __init__(self, calls: List[str], error: Optional[Exception] = None):
        super().__init__()
        self.calls = calls
        self.error = error

    async def create_relation(self, user: User, short_link: ShortLink) -> None:
        self.calls.append("create_relation")
        if self.error is not None:
            raise self.error
        await super().create_relation(user, short_link)


@pytest.fixture
def calls() -> List[str]:
    return []

@pytest.fixture
def short_link_repo(calls):
    return RecordingShortLinkRepo(calls, existing=["promo"])

@pytest.fixture
def user_short_link_repo(calls):
    return RecordingUserShortLinkRepo(calls)

@pytest.fixture
def key_gen():
    return SequenceKeyGenerator(["abc123", "def456"])

@pytest.fixture
def risk_detector():
    return StubRiskDetector(malicious=["https://malware.example.com/payload"])

@pytest.fixture
def user():
    return User(id="alpha", email="alpha@example.com")

@pytest.fixture
def creator(short_link_repo, user_short_link_repo, key_gen, risk_detector) -> ShortLinkCreator:
    return ShortLinkCreator(
        short_link_repo=short_link_repo,
        user_short_link_repo=user_short_link_repo,
        key_gen=key_gen,
        long_link_validator=LongLinkValidator(),
        alias_validator=CustomAliasValidator(),
        clock=FixedClock(),
        risk_detector=risk_detector,
    )

@pytest.fixture
async def client(creator) -> AsyncGenerator[AsyncClient, None]:
    from shortlink.dependencies import get_creator
    from shortlink.main import app

    # Lifespan is not run, so Redis stays disconnected and rate limiting is open
    app.dependency_overrides[get_creator] = lambda: creator
    async with AsyncClient(transport=ASGITransport(app=app, raise_app_exceptions=False), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
