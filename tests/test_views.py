from __future__ import annotations

from pathlib import Path

from tagref.aggregate import ScanIndex, scan
from tagref.model import Annotation, AnnotationKind, SourceLocation
from tagref.views import count, list_dirs, list_files, list_refs, list_tags, summarize, unused_tags
from tests.tree_helpers import annotation


def _ann(kind: AnnotationKind, label: str, path: str, line: int = 1) -> Annotation:
    return Annotation(
        kind=kind,
        label=label,
        location=SourceLocation(root=".", path=path, line=line, column=1),
    )


def test_listings_keep_duplicates_and_sort_by_label_then_location() -> None:
    index = ScanIndex(
        tags={
            "b": [_ann(AnnotationKind.TAG, "b", "z.py"), _ann(AnnotationKind.TAG, "b", "a.py")],
            "a": [_ann(AnnotationKind.TAG, "a", "m.py")],
        },
        refs=[_ann(AnnotationKind.REF, "b", "r.py", 3), _ann(AnnotationKind.REF, "b", "r.py", 1)],
    )
    assert [(item.label, item.location.path) for item in list_tags(index)] == [
        ("a", "m.py"),
        ("b", "a.py"),
        ("b", "z.py"),
    ]
    assert [item.location.line for item in list_refs(index)] == [1, 3]


def test_file_and_dir_listings(tmp_path: Path, write_tree, single_worker_config) -> None:
    write_tree(
        tmp_path,
        {
            "a.md": annotation("file", "z.txt") + annotation("file", "a.txt") + annotation("dir", "src"),
        },
    )
    index = scan(single_worker_config(tmp_path))
    assert [item.label for item in list_files(index)] == ["a.txt", "z.txt"]
    assert [item.label for item in list_dirs(index)] == ["src"]


def test_unused_tags_excludes_referenced_and_duplicated_labels() -> None:
    index = ScanIndex(
        tags={
            "used": [_ann(AnnotationKind.TAG, "used", "a.py")],
            "lonely": [_ann(AnnotationKind.TAG, "lonely", "a.py", 2)],
            "twice": [_ann(AnnotationKind.TAG, "twice", "a.py", 3), _ann(AnnotationKind.TAG, "twice", "b.py")],
        },
        refs=[_ann(AnnotationKind.REF, "used", "c.py")],
    )
    assert [item.label for item in unused_tags(index)] == ["lonely"]


def test_count_pluralizes() -> None:
    assert count(0, "tag") == "0 tags"
    assert count(1, "tag") == "1 tag"
    assert count(2, "directory") == "2 directories"


def test_summarize_mentions_every_collection() -> None:
    index = ScanIndex(
        tags={"a": [_ann(AnnotationKind.TAG, "a", "x.py")]},
        refs=[_ann(AnnotationKind.REF, "a", "y.py"), _ann(AnnotationKind.REF, "a", "z.py")],
        files_scanned=3,
    )
    assert summarize(index) == (
        "1 tag, 2 references, 0 file references and 0 directory references validated in 3 files."
    )
