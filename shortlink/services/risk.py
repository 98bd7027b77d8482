import logging
from typing import Iterable, List, Protocol
from urllib.parse import urlparse

import httpx

from ..errors import RiskDetectionError

logger = logging.getLogger(__name__)

THREAT_TYPES = [
    "MALWARE",
    "SOCIAL_ENGINEERING",
    "UNWANTED_SOFTWARE",
    "POTENTIALLY_HARMFUL_APPLICATION",
]


class RiskDetector(Protocol):
    async def is_url_malicious(self, url: str) -> bool: ...


class BlocklistDetector:
    """Flags URLs whose host is a blocked domain or one of its subdomains."""

    def __init__(self, hosts: Iterable[str]):
        self.hosts = {h.strip().lower().rstrip(".") for h in hosts if h.strip()}

    async def is_url_malicious(self, url: str) -> bool:
        host = (urlparse(url).hostname or "").rstrip(".")
        return any(host == blocked or host.endswith("." + blocked) for blocked in self.hosts)


class SafeBrowsingDetector:
    """Google Safe Browsing v4 lookup.

    Provider failures raise RiskDetectionError rather than reporting the URL
    as safe, so an outage never lets a malicious link through.
    """

    def __init__(self, client: httpx.AsyncClient, api_key: str, endpoint: str, client_id: str = "shortlink"):
        self.client = client
        self.api_key = api_key
        self.endpoint = endpoint
        self.client_id = client_id

    async def is_url_malicious(self, url: str) -> bool:
        payload = {
            "client": {"clientId": self.client_id, "clientVersion": "1.0.0"},
            "threatInfo": {
                "threatTypes": THREAT_TYPES,
                "platformTypes": ["ANY_PLATFORM"],
                "threatEntryTypes": ["URL"],
                "threatEntries": [{"url": url}],
            },
        }
        try:
            response = await self.client.post(self.endpoint, params={"key": self.api_key}, json=payload)
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Safe Browsing lookup failed: {e}")
            raise RiskDetectionError(f"risk detection unavailable: {e}") from e

        return bool(body.get("matches"))


class CompositeDetector:
    def __init__(self, detectors: List[RiskDetector]):
        self.detectors = detectors

    async def is_url_malicious(self, url: str) -> bool:
        for detector in self.detectors:
            if await detector.is_url_malicious(url):
                return True
        return False
