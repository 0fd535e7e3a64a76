"""Data models for Liquid Lands API payloads and normalized state."""

from landhunter.models._base import LandBaseModel
from landhunter.models.detail import DetailDefense, DetailGuard, DetailLand, LandDetail
from landhunter.models.land import LISTING_FIELDS, LandRecord, ListingEntry
from landhunter.models.requests import DetailRequest

__all__ = [
    "DetailDefense",
    "DetailGuard",
    "DetailLand",
    "DetailRequest",
    "LISTING_FIELDS",
    "LandBaseModel",
    "LandDetail",
    "LandRecord",
    "ListingEntry",
]
