"""Exception taxonomy shared by the pipeline and the HTTP layer.

Each error knows the HTTP status and ErrorResponse code it maps to, so the
FastAPI exception handler in ``tunebridge.main`` can render any of them
without a lookup table. Per-query search failures are not exceptions: they
are captured as ``MatchRecord(ok=False)`` values inside the batch.
"""

from __future__ import annotations

from typing import Any


class TunebridgeError(Exception):
    """Base class for errors that abort an operation and reach the caller."""

    status_code: int = 500
    error_code: str = "internal_error"
    retryable: bool = False

    def __init__(self, message: str, *, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class UpstreamError(TunebridgeError):
    """A YouTube API call returned a non-success status or never completed.

    ``status_code`` is the upstream status (502/504 for transport failures
    and timeouts); ``details`` is the raw error payload as returned.
    """

    error_code = "upstream_error"

    def __init__(self, status_code: int, message: str, *, details: Any = None) -> None:
        super().__init__(message, details=details)
        self.status_code = status_code
        # 429 and 5xx may succeed on a later call; other 4xx will not
        self.retryable = status_code == 429 or status_code >= 500


class InvalidInputError(TunebridgeError):
    """Caller-supplied input failed a precondition."""

    status_code = 400
    error_code = "invalid_input"


class AuthenticationError(TunebridgeError):
    status_code = 401
    error_code = "not_authenticated"


class ConfigurationError(TunebridgeError):
    status_code = 500
    error_code = "configuration_error"


class RecommendationParseError(TunebridgeError):
    """The model answered, but not with JSON matching the recommendation schema."""

    status_code = 502
    error_code = "invalid_model_output"
    retryable = True
