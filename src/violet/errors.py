from __future__ import annotations


class VioletError(Exception):
    """Base class for every error raised by the capture-and-routing core."""


class NetworkError(VioletError):
    """Transport-level failure: DNS, connect, read or timeout."""


class ProtocolError(VioletError):
    """The oracle answered, but not with something we can use.

    Covers non-200 statuses, empty bodies and malformed response envelopes.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(VioletError):
    """Extraction payload could not be turned into a draft.

    Always recovered locally by the extraction fallback.
    """


class ConfigurationError(VioletError, RuntimeError):
    """Missing or invalid startup configuration (e.g. no API key)."""


class ValidationError(VioletError, ValueError):
    """Rejected input, raised before any oracle call is made."""


class RoutingError(VioletError):
    """Illegal lifecycle transition for a captured thought."""

    def __init__(self, message: str, thought_id: str | None = None, missing: bool = False):
        super().__init__(message)
        self.thought_id = thought_id
        # True when the thought is unknown, as opposed to being in the wrong state
        self.missing = missing
