"""State/store layer.

This package is the single source of truth for the live land view: bulk
ingestion replaces it wholesale and per-land enrichment merges refined
fields into it.
"""
