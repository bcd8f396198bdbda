from __future__ import annotations

from pathlib import Path
from typing import Mapping, Sequence

from tagref.aggregate import ScanIndex
from tagref.model import Annotation, Diagnostic, DiagnosticKind


def partition_tags(
    tags: Mapping[str, Sequence[Annotation]],
) -> tuple[dict[str, Annotation], dict[str, list[Annotation]]]:
    """Split the tag index into uniquely defined labels and duplicated ones."""
    unique: dict[str, Annotation] = {}
    duplicates: dict[str, list[Annotation]] = {}
    for label, locations in tags.items():
        if len(locations) == 1:
            unique[label] = locations[0]
        elif locations:
            duplicates[label] = list(locations)
    return unique, duplicates


def check_duplicates(duplicates: Mapping[str, Sequence[Annotation]]) -> list[Diagnostic]:
    return [
        Diagnostic(
            kind=DiagnosticKind.DUPLICATE_TAG,
            message=f"Duplicate tags found for label `{label}`:",
            locations=tuple(tag.location for tag in tags),
        )
        for label, tags in duplicates.items()
    ]


def check_references(
    refs: Sequence[Annotation],
    *,
    unique: Mapping[str, Annotation],
    duplicates: Mapping[str, Sequence[Annotation]],
) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    for ref in refs:
        if ref.label in unique:
            continue
        if ref.label in duplicates:
            message = (
                f"No unique tag found for [{ref.kind.value}:{ref.label}]; "
                f"the label is defined {len(duplicates[ref.label])} times."
            )
        else:
            message = f"No tag found for [{ref.kind.value}:{ref.label}]."
        diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.UNRESOLVED_REFERENCE,
                message=message,
                locations=(ref.location,),
            )
        )
    return diagnostics


def resolve_reference_path(annotation: Annotation) -> Path:
    """Resolve a file/dir reference against the scan root it was found under."""
    return Path(annotation.location.root) / annotation.label


def _check_paths(
    refs: Sequence[Annotation],
    *,
    kind: DiagnosticKind,
    noun: str,
    want_dir: bool,
) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    for ref in refs:
        target = resolve_reference_path(ref)
        rendered = f"[{ref.kind.value}:{ref.label}]"
        if not target.exists():
            message = f"{rendered} points to `{target.as_posix()}`, which does not exist."
        elif want_dir and not target.is_dir():
            message = f"{rendered} does not point to a {noun}."
        elif not want_dir and not target.is_file():
            message = f"{rendered} does not point to a {noun}."
        else:
            continue
        diagnostics.append(Diagnostic(kind=kind, message=message, locations=(ref.location,)))
    return diagnostics


def check_file_references(refs: Sequence[Annotation]) -> list[Diagnostic]:
    return _check_paths(
        refs,
        kind=DiagnosticKind.MISSING_FILE_REFERENCE,
        noun="file",
        want_dir=False,
    )


def check_directory_references(refs: Sequence[Annotation]) -> list[Diagnostic]:
    return _check_paths(
        refs,
        kind=DiagnosticKind.MISSING_DIRECTORY_REFERENCE,
        noun="directory",
        want_dir=True,
    )


def validate(index: ScanIndex) -> list[Diagnostic]:
    """Run every check over the finished index and return all diagnostics.

    Order: duplicates (by first occurrence), unresolved references, missing
    files, missing directories, each in discovery order.
    """
    unique, duplicates = partition_tags(index.tags)
    diagnostics: list[Diagnostic] = []
    diagnostics.extend(check_duplicates(duplicates))
    diagnostics.extend(check_references(index.refs, unique=unique, duplicates=duplicates))
    diagnostics.extend(check_file_references(index.files))
    diagnostics.extend(check_directory_references(index.dirs))
    return diagnostics
