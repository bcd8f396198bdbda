"""Exception types for tagref."""

from __future__ import annotations


class TagrefError(RuntimeError):
    """Base class for fatal tagref errors."""


class InvalidConfiguration(TagrefError):
    """Raised before any scanning when the run configuration is unusable.

    Covers malformed or conflicting sigils, scan roots that do not exist and
    configuration file values of the wrong shape.
    """

    def __init__(self, message: str, *, field: str = "") -> None:
        super().__init__(message)
        self.field = field


class UnreadableFile(TagrefError):
    """A single file could not be read or decoded as text.

    The scanner turns this into a warning and moves on to the next file.
    """

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason
