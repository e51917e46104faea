# core/exceptions.py

"""
Error taxonomy shared by the backends, services and routers
"""

from enum import Enum
from typing import Any, Dict, Optional


class RewriteError(Exception):
    """Base class for every error the service reports to callers."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class ValidationError(RewriteError):
    """Rejected user input. Never reaches the core services."""

    status_code = 400


class ConfigurationError(RewriteError):
    """A backend was selected whose credential is not configured."""

    status_code = 503


class UpstreamErrorKind(str, Enum):
    NETWORK = "network"
    AUTH = "auth"
    RATE_LIMIT = "rateLimit"
    SERVER_ERROR = "serverError"
    OTHER = "other"


class UpstreamError(RewriteError):
    """A provider call failed. `kind` classifies the provider's failure signal."""

    status_code = 502

    def __init__(self, kind: UpstreamErrorKind, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.provider = provider
        if kind == UpstreamErrorKind.RATE_LIMIT:
            self.status_code = 429

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "kind": self.kind.value}
