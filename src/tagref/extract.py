"""Locate `[sigil:label]` annotations in raw text.

The extractor knows nothing about programming languages: an annotation inside
a string literal or a disabled block counts exactly like one in a comment.
Bracketed text that does not match the exact shape is not an annotation and is
silently skipped.
"""

from __future__ import annotations

from dataclasses import dataclass
import re

from tagref.config import SigilSet
from tagref.model import Annotation, AnnotationKind, SourceLocation


@dataclass(frozen=True)
class DirectivePatterns:
    """Compiled patterns for one run, shared read-only by every extraction task."""

    sigils: SigilSet
    patterns: tuple[tuple[AnnotationKind, re.Pattern[str]], ...]


def compile_directive_pattern(sigil: str) -> re.Pattern[str]:
    return re.compile(r"\[" + re.escape(sigil) + r":([^\]\r\n]*)\]")


def compile_patterns(sigils: SigilSet) -> DirectivePatterns:
    return DirectivePatterns(
        sigils=sigils,
        patterns=(
            (AnnotationKind.TAG, compile_directive_pattern(sigils.tag)),
            (AnnotationKind.REF, compile_directive_pattern(sigils.ref)),
            (AnnotationKind.FILE, compile_directive_pattern(sigils.file)),
            (AnnotationKind.DIR, compile_directive_pattern(sigils.dir)),
        ),
    )


@dataclass(frozen=True)
class FileAnnotations:
    tags: tuple[Annotation, ...] = ()
    refs: tuple[Annotation, ...] = ()
    files: tuple[Annotation, ...] = ()
    dirs: tuple[Annotation, ...] = ()


def extract_annotations(
    text: str,
    *,
    path: str,
    patterns: DirectivePatterns,
    root: str = ".",
) -> FileAnnotations:
    found: dict[AnnotationKind, list[Annotation]] = {kind: [] for kind, _ in patterns.patterns}
    # Only "\n" ends a line; form feeds and Unicode separators stay inside it.
    for line_number, line in enumerate(text.split("\n"), start=1):
        if "[" not in line:
            continue
        for kind, pattern in patterns.patterns:
            for match in pattern.finditer(line):
                found[kind].append(
                    Annotation(
                        kind=kind,
                        label=match.group(1).strip(),
                        location=SourceLocation(
                            root=root,
                            path=path,
                            line=line_number,
                            column=match.start() + 1,
                        ),
                    )
                )
    return FileAnnotations(
        tags=tuple(found[AnnotationKind.TAG]),
        refs=tuple(found[AnnotationKind.REF]),
        files=tuple(found[AnnotationKind.FILE]),
        dirs=tuple(found[AnnotationKind.DIR]),
    )
