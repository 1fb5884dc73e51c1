"""Utility helpers for mixcast."""

from .logging import configure_logging
from .paths import resolve_media_path

__all__ = ["configure_logging", "resolve_media_path"]
