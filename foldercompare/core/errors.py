"""
Exceptions raised by the comparison engine.

All of them are caught at the session boundary
(see foldercompare.core.folder.session), logged and reported.
"""

from __future__ import annotations


class ConfigurationError(Exception):
    """Raised when the comparison options are invalid."""
    pass


class FilterSyntaxError(ConfigurationError):
    """Raised when an include/exclude pattern cannot be compiled."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Invalid filter pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class CompareCancelled(Exception):
    """Raised when a running comparison is cancelled."""
    pass
