"""Value types shared by the scanner, validator and views."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import posixpath


class AnnotationKind(str, Enum):
    TAG = "tag"
    REF = "ref"
    FILE = "file"
    DIR = "dir"


class DiagnosticKind(str, Enum):
    DUPLICATE_TAG = "duplicate-tag"
    UNRESOLVED_REFERENCE = "unresolved-reference"
    MISSING_FILE_REFERENCE = "missing-file-reference"
    MISSING_DIRECTORY_REFERENCE = "missing-directory-reference"


@dataclass(frozen=True, order=True)
class SourceLocation:
    """Position of an annotation's opening bracket.

    `path` is relative to `root` with posix separators. `line` and `column` are
    1-indexed and the column counts code points, not bytes.
    """

    root: str
    path: str
    line: int
    column: int

    @property
    def display_path(self) -> str:
        if self.root in ("", "."):
            return self.path
        return posixpath.join(self.root, self.path)

    def render(self) -> str:
        return f"{self.display_path}:{self.line}:{self.column}"


@dataclass(frozen=True)
class Annotation:
    kind: AnnotationKind
    label: str
    location: SourceLocation


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    locations: tuple[SourceLocation, ...]

    def render(self) -> str:
        if len(self.locations) == 1:
            return f"{self.locations[0].render()}: {self.message}"
        lines = [self.message]
        lines.extend(f"  {location.render()}" for location in self.locations)
        return "\n".join(lines)


@dataclass(frozen=True)
class ScanWarning:
    """Non-fatal problem with one file; the scan carries on without it."""

    path: str
    message: str

    def render(self) -> str:
        return f"{self.path}: {self.message}"
