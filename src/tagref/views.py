"""Read-only projections over a finished ScanIndex."""

from __future__ import annotations

from typing import Iterable

from tagref.aggregate import ScanIndex
from tagref.model import Annotation
from tagref.order_contract import sort_once
from tagref.validate import partition_tags


def _listing(annotations: Iterable[Annotation], *, source: str) -> list[Annotation]:
    return sort_once(
        annotations,
        source=source,
        key=lambda item: (
            item.label,
            item.location.display_path,
            item.location.line,
            item.location.column,
        ),
    )


def list_tags(index: ScanIndex) -> list[Annotation]:
    return _listing(
        (tag for tags in index.tags.values() for tag in tags),
        source="views.list_tags",
    )


def list_refs(index: ScanIndex) -> list[Annotation]:
    return _listing(index.refs, source="views.list_refs")


def list_files(index: ScanIndex) -> list[Annotation]:
    return _listing(index.files, source="views.list_files")


def list_dirs(index: ScanIndex) -> list[Annotation]:
    return _listing(index.dirs, source="views.list_dirs")


def unused_tags(index: ScanIndex) -> list[Annotation]:
    """Uniquely defined tags that no reference points at."""
    unique, _ = partition_tags(index.tags)
    referenced = {ref.label for ref in index.refs}
    return _listing(
        (tag for label, tag in unique.items() if label not in referenced),
        source="views.unused_tags",
    )


def count(n: int, noun: str) -> str:
    if n == 1:
        return f"1 {noun}"
    if noun.endswith("y"):
        return f"{n} {noun[:-1]}ies"
    return f"{n} {noun}s"


def summarize(index: ScanIndex) -> str:
    parts = [
        count(index.tag_count(), "tag"),
        count(len(index.refs), "reference"),
        count(len(index.files), "file reference"),
        count(len(index.dirs), "directory reference"),
    ]
    return (
        f"{', '.join(parts[:-1])} and {parts[-1]} "
        f"validated in {count(index.files_scanned, 'file')}."
    )
