import re
from enum import Enum
from typing import FrozenSet, Tuple
from urllib.parse import urlparse


class Violation(str, Enum):
    VALID = "valid"
    EMPTY_LONG_LINK = "empty_long_link"
    LONG_LINK_TOO_LONG = "long_link_too_long"
    LONG_LINK_NOT_URL = "long_link_not_url"
    ALIAS_TOO_LONG = "alias_too_long"
    HAS_FRAGMENT_CHARACTER = "has_fragment_character"
    ALIAS_INVALID_CHARACTER = "alias_invalid_character"
    ALIAS_RESERVED = "alias_reserved"


ALIAS_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")

# Top level routes served by the app itself
RESERVED_ALIASES = frozenset({"v1", "health", "metrics", "docs", "redoc", "openapi.json"})


class LongLinkValidator:
    """Checks that a long link is present, bounded and an absolute http(s) URL."""

    def __init__(self, max_length: int = 200):
        self.max_length = max_length

    def is_valid(self, long_link: str) -> Tuple[bool, Violation]:
        if not long_link:
            return False, Violation.EMPTY_LONG_LINK

        if len(long_link) > self.max_length:
            return False, Violation.LONG_LINK_TOO_LONG

        try:
            parsed = urlparse(long_link)
        except ValueError:
            return False, Violation.LONG_LINK_NOT_URL

        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            return False, Violation.LONG_LINK_NOT_URL

        return True, Violation.VALID


class CustomAliasValidator:
    """Checks a caller chosen alias. The empty string means no preference and is valid."""

    def __init__(self, max_length: int = 50, reserved: FrozenSet[str] = RESERVED_ALIASES):
        self.max_length = max_length
        self.reserved = reserved

    def is_valid(self, alias: str) -> Tuple[bool, Violation]:
        if alias == "":
            return True, Violation.VALID

        if len(alias) > self.max_length:
            return False, Violation.ALIAS_TOO_LONG

        if "#" in alias:
            return False, Violation.HAS_FRAGMENT_CHARACTER

        if not ALIAS_PATTERN.match(alias):
            return False, Violation.ALIAS_INVALID_CHARACTER

        if alias.lower() in self.reserved:
            return False, Violation.ALIAS_RESERVED

        return True, Violation.VALID
