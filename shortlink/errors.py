"""Error types raised while allocating short link aliases.

Every error carries the context it was raised with, so callers can branch on
the type and still recover the offending value (and validator violation).
"""

from typing import Any, Dict

from .services.validator import Violation


class ShortLinkError(Exception):
    """Base class for all allocation failures."""

    code = "SHORT_LINK_ERROR"
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def context(self) -> Dict[str, Any]:
        return {}

    def to_response(self) -> Dict[str, Any]:
        return {"error": {"code": self.code, "message": self.message, **self.context()}}


class InvalidLongLinkError(ShortLinkError):
    code = "INVALID_LONG_LINK"
    http_status = 400

    def __init__(self, long_link: str, violation: Violation):
        super().__init__(f"invalid long link: {violation.value}")
        self.long_link = long_link
        self.violation = violation

    def context(self) -> Dict[str, Any]:
        return {"long_link": self.long_link, "violation": self.violation.value}


class InvalidCustomAliasError(ShortLinkError):
    code = "INVALID_CUSTOM_ALIAS"
    http_status = 400

    def __init__(self, alias: str, violation: Violation):
        super().__init__(f"invalid custom alias: {violation.value}")
        self.alias = alias
        self.violation = violation

    def context(self) -> Dict[str, Any]:
        return {"alias": self.alias, "violation": self.violation.value}


class MaliciousLongLinkError(ShortLinkError):
    code = "MALICIOUS_LONG_LINK"
    http_status = 400

    def __init__(self, long_link: str):
        super().__init__("long link is flagged as malicious")
        self.long_link = long_link

    def context(self) -> Dict[str, Any]:
        return {"long_link": self.long_link}


class AliasExistError(ShortLinkError):
    code = "ALIAS_EXIST"
    http_status = 409

    def __init__(self, alias: str):
        super().__init__("short link alias already exist")
        self.alias = alias

    def context(self) -> Dict[str, Any]:
        return {"alias": self.alias}


class KeyGenerationError(ShortLinkError):
    code = "KEY_GENERATION_FAILED"
    http_status = 500


class RiskDetectionError(ShortLinkError):
    code = "RISK_DETECTION_FAILED"
    http_status = 502
