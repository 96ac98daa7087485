"""Module for database models."""

from . import note, user  # noqa: F401

__all__ = [
    "note",
    "user",
]
