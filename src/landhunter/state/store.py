"""Deterministic in-memory state store.

This is the only component allowed to mutate the land view.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Any

from landhunter.models.land import LandRecord
from landhunter.state.events import ChangeKind, StateChange
from landhunter.state.policy import should_accept_merge, validate_patch

_logger = logging.getLogger(__name__)

StateListener = Callable[[StateChange], None]


class StateStore:
    """Generation-tagged mapping of land records plus the last API message.

    All mutation goes through :meth:`replace_all`, :meth:`merge_update` and
    :meth:`set_error`. The store is meant to be driven from a single asyncio
    event loop and is not thread-safe.
    """

    def __init__(self) -> None:
        self._generation = 0
        self._lands: dict[int, LandRecord] = {}
        self._last_error: str | None = None
        self._listeners: list[StateListener] = []

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def lands(self) -> Mapping[int, LandRecord]:
        """Read-only live view of the current lands."""
        return MappingProxyType(self._lands)

    @property
    def last_error(self) -> str | None:
        return self._last_error

    def get(self, tile_id: int) -> LandRecord | None:
        return self._lands.get(tile_id)

    def __len__(self) -> int:
        return len(self._lands)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def replace_all(self, records: Iterable[LandRecord]) -> int:
        """Swap in a new set of lands and bump the generation.

        The new mapping is fully built before it is installed, so a failure
        (e.g. a duplicate id) leaves the previous state untouched.

        Returns
        -------
        int
            The new generation.
        """
        lands: dict[int, LandRecord] = {}
        for record in records:
            if record.tile_id in lands:
                raise ValueError(f"duplicate tile_id {record.tile_id}")
            lands[record.tile_id] = record

        self._lands = lands
        self._generation += 1
        _logger.debug("Replaced lands: generation=%d count=%d", self._generation, len(lands))
        self._notify(StateChange(kind=ChangeKind.REPLACED, generation=self._generation))
        return self._generation

    def merge_update(self, tile_id: int, fields: Mapping[str, Any], generation: int) -> bool:
        """Merge refined fields into one land.

        No-op when *generation* is not the current one or the land is absent.
        Only the supplied keys are changed, and they must be mutable fields.

        Returns
        -------
        bool
            ``True`` if the record was updated.
        """
        patch = validate_patch(fields)
        if not should_accept_merge(current_generation=self._generation, incoming_generation=generation):
            _logger.debug(
                "Discarding stale merge for %s (generation %d, current %d)",
                tile_id,
                generation,
                self._generation,
            )
            return False

        existing = self._lands.get(tile_id)
        if existing is None:
            return False
        if not patch:
            return True

        self._lands[tile_id] = existing.model_copy(update=patch)
        self._notify(StateChange(kind=ChangeKind.MERGED, generation=self._generation, tile_id=tile_id))
        return True

    def set_error(self, message: str | None) -> None:
        """Record the most recent API status message (unconditional overwrite)."""
        self._last_error = message
        self._notify(StateChange(kind=ChangeKind.ERROR, generation=self._generation))

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        """Register *listener* for applied changes. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def _notify(self, change: StateChange) -> None:
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                _logger.warning("State listener failed for %s change", change.kind, exc_info=True)
