from functools import lru_cache
from typing import List, Optional

import httpx
from fastapi import Header, HTTPException

from .config import settings
from .database import AsyncSessionLocal
from .repository.sql import ShortLinkSQL, UserShortLinkSQL
from .schemas import User
from .services.creator import ShortLinkCreator
from .services.keygen import build_key_generator
from .services.risk import BlocklistDetector, CompositeDetector, RiskDetector, SafeBrowsingDetector
from .services.timer import SystemClock
from .services.validator import CustomAliasValidator, LongLinkValidator


def build_risk_detector() -> RiskDetector:
    detectors: List[RiskDetector] = [BlocklistDetector(settings.RISK_BLOCKLIST)]
    if settings.SAFE_BROWSING_API_KEY:
        client = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)
        detectors.append(SafeBrowsingDetector(client, settings.SAFE_BROWSING_API_KEY, settings.SAFE_BROWSING_URL))
    return CompositeDetector(detectors)


@lru_cache
def get_creator() -> ShortLinkCreator:
    return ShortLinkCreator(
        short_link_repo=ShortLinkSQL(AsyncSessionLocal),
        user_short_link_repo=UserShortLinkSQL(AsyncSessionLocal),
        key_gen=build_key_generator(
            settings.KEYGEN_URL,
            key_length=settings.KEYGEN_KEY_LENGTH,
            buffer_size=settings.KEYGEN_BUFFER_SIZE,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        ),
        long_link_validator=LongLinkValidator(settings.LONG_LINK_MAX_LENGTH),
        alias_validator=CustomAliasValidator(settings.ALIAS_MAX_LENGTH),
        clock=SystemClock(),
        risk_detector=build_risk_detector(),
    )


async def get_current_user(x_user_id: Optional[str] = Header(None, alias="X-User-Id")) -> User:
    # Identity is resolved upstream; the gateway forwards it in X-User-Id
    if not x_user_id:
        raise HTTPException(status_code=401, detail="User identity is required")
    return User(id=x_user_id)
