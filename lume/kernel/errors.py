"""Error classification for the grading engine.

Only decode failures surface to callers. Stage failures inside the pipeline
are recovered locally and never raised.
"""
from typing import Optional


class LumeError(Exception):
    """Base exception for all Lume errors."""

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source


class ImageDecodeError(LumeError):
    """Source image could not be read or decoded."""
    pass


class PresetDecodeError(LumeError):
    """Preset JSON is unreadable or does not describe a valid preset."""
    pass
