"""Packaged reference data."""
