"""Shared utility helpers for the mediaview project."""

from .files import discard_partial, publish, staged_file

__all__ = [
    "discard_partial",
    "publish",
    "staged_file",
]
