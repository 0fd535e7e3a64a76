"""Custom exception hierarchy for landhunter."""

from __future__ import annotations


class LandHunterError(Exception):
    """Base exception for all landhunter errors."""


class LandConfigError(LandHunterError):
    """Invalid or missing configuration."""


class LandTransportError(LandHunterError):
    """HTTP-level failure (network, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class LandMalformedResponseError(LandHunterError):
    """Response decoded as JSON but does not have the expected top-level shape."""

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


class LandApiError(LandHunterError):
    """API reported a non-success status message despite a successful transport.

    ``message`` is the raw status text so callers can surface it verbatim.
    """

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.message = message
        self.endpoint = endpoint
        super().__init__(f"{endpoint} failed: {message}" if endpoint else message)
