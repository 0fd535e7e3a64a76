"""Endpoint modules for the Liquid Lands API."""
