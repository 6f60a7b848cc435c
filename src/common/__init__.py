"""Shared helpers: logging, data files, schemas."""
