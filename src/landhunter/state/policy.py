"""Deterministic merge policy.

This module contains *no* payload parsing; the ingestion/enrichment layers
hand the store already-normalized field patches.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from landhunter.models.land import LandRecord


def should_accept_merge(*, current_generation: int, incoming_generation: int) -> bool:
    """A merge is only valid for the generation that was active when it was submitted."""
    return incoming_generation == current_generation


def validate_patch(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Return *fields* as a dict, rejecting keys that are not mutable after ingestion."""
    illegal = set(fields) - LandRecord.MUTABLE_FIELDS
    if illegal:
        raise ValueError(f"fields {sorted(illegal)} cannot be changed after ingestion")
    return dict(fields)
