"""Shared helpers for endpoint modules.

It is internal to landhunter and may change at any time.
"""

from __future__ import annotations

from typing import Any

from landhunter._constants import SUCCESS_MESSAGE
from landhunter.exceptions import LandApiError, LandMalformedResponseError


def require_list(decoded: Any, *, endpoint: str) -> list[Any]:
    """Return *decoded* if it is a JSON array, else raise."""
    if not isinstance(decoded, list):
        raise LandMalformedResponseError(
            f"{endpoint} returned {type(decoded).__name__}, expected a list",
            endpoint=endpoint,
        )
    return decoded


def require_dict(decoded: Any, *, endpoint: str) -> dict[str, Any]:
    """Return *decoded* if it is a JSON object, else raise."""
    if not isinstance(decoded, dict):
        raise LandMalformedResponseError(
            f"{endpoint} returned {type(decoded).__name__}, expected an object",
            endpoint=endpoint,
        )
    return decoded


def raise_for_message(message: str | None, *, endpoint: str) -> None:
    """Raise :class:`LandApiError` for any status message other than the success token."""
    if message is None or message == SUCCESS_MESSAGE:
        return
    raise LandApiError(message, endpoint=endpoint)
