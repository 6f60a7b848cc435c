"""Compatibility data store."""

from .store import CompatDataStore

__all__ = ["CompatDataStore"]
