"""Tagref package root."""

from tagref.exceptions import InvalidConfiguration, TagrefError, UnreadableFile

__all__ = ["__version__", "InvalidConfiguration", "TagrefError", "UnreadableFile"]

__version__ = "0.1.0"
