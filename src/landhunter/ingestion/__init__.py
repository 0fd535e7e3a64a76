"""Ingestion layer.

This package contains adapters that fetch land listings from the API and
emit normalized :class:`~landhunter.models.land.LandRecord` objects for the
state store.
"""

__all__: list[str] = []
