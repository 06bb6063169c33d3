"""Core configuration package."""

from .clock import ensure_utc, utc_now
from .config import settings

__all__ = ["ensure_utc", "settings", "utc_now"]
