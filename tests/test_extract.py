from __future__ import annotations

import re

from tagref.config import SigilSet
from tagref.extract import FileAnnotations, compile_directive_pattern, compile_patterns, extract_annotations
from tagref.model import AnnotationKind, SourceLocation
from tests.tree_helpers import annotation


def test_extract_empty_text_finds_nothing(patterns) -> None:
    found = extract_annotations("", path="file.rs", patterns=patterns)
    assert found == FileAnnotations()


def test_extract_tag_basic(patterns) -> None:
    text = "// " + annotation("tag", "label") + "\n"
    found = extract_annotations(text, path="file.rs", patterns=patterns)
    assert len(found.tags) == 1
    tag = found.tags[0]
    assert tag.kind is AnnotationKind.TAG
    assert tag.label == "label"
    assert tag.location == SourceLocation(root=".", path="file.rs", line=1, column=4)
    assert found.refs == () and found.files == () and found.dirs == ()


def test_extract_each_kind(patterns) -> None:
    text = "\n".join(
        [
            annotation("tag", "t"),
            annotation("ref", "r"),
            annotation("file", "a/b.txt"),
            annotation("dir", "a"),
        ]
    )
    found = extract_annotations(text, path="x", patterns=patterns)
    assert [item.label for item in found.tags] == ["t"]
    assert [item.label for item in found.refs] == ["r"]
    assert [item.label for item in found.files] == ["a/b.txt"]
    assert [item.label for item in found.dirs] == ["a"]


def test_extract_strips_surrounding_whitespace_but_keeps_inner(patterns) -> None:
    text = "x " + annotation("tag", "  two words\t") + " y"
    found = extract_annotations(text, path="x", patterns=patterns)
    assert found.tags[0].label == "two words"
    assert found.tags[0].location.column == 3


def test_extract_multiple_per_line_are_independent(patterns) -> None:
    text = annotation("ref", "a") + " and " + annotation("ref", "b") + annotation("tag", "c")
    found = extract_annotations(text, path="x", patterns=patterns)
    assert [(item.label, item.location.column) for item in found.refs] == [("a", 1), ("b", 13)]
    assert [(item.label, item.location.column) for item in found.tags] == [("c", 20)]


def test_extract_columns_count_code_points_not_bytes(patterns) -> None:
    text = "é日本 " + annotation("tag", "ünï") + "\n😀" + annotation("ref", "ünï")
    found = extract_annotations(text, path="x", patterns=patterns)
    assert found.tags[0].location.line == 1
    assert found.tags[0].location.column == 5
    assert found.tags[0].label == "ünï"
    assert found.refs[0].location.line == 2
    assert found.refs[0].location.column == 2


def test_extract_sigil_is_case_sensitive_and_must_follow_bracket(patterns) -> None:
    text = "\n".join(
        [
            "[TAG:upper]",
            "[ tag:spaced]",
            "[tag :spaced]",
            "[tags:plural]",
        ]
    )
    found = extract_annotations(text, path="x", patterns=patterns)
    assert found == FileAnnotations()


def test_extract_ignores_unterminated_and_multiline_brackets(patterns) -> None:
    text = "[" + "tag:never closed\n]\n" + annotation("ref", "ok")
    found = extract_annotations(text, path="x", patterns=patterns)
    assert found.tags == ()
    assert [item.label for item in found.refs] == ["ok"]
    assert found.refs[0].location.line == 3


def test_extract_label_stops_at_first_closing_bracket(patterns) -> None:
    found = extract_annotations(annotation("tag", "a") + "b]", path="x", patterns=patterns)
    assert [item.label for item in found.tags] == ["a"]


def test_extract_matches_inside_string_literals(patterns) -> None:
    text = 'message = "see ' + annotation("ref", "in_string") + '"\n'
    found = extract_annotations(text, path="x.py", patterns=patterns)
    assert [item.label for item in found.refs] == ["in_string"]


def test_extract_crlf_line_endings(patterns) -> None:
    text = "a\r\n" + annotation("tag", "crlf") + "\r\n"
    found = extract_annotations(text, path="x", patterns=patterns)
    assert found.tags[0].label == "crlf"
    assert found.tags[0].location.line == 2


def test_extract_custom_sigils() -> None:
    custom = compile_patterns(SigilSet(tag="anchor", ref="see", file="path", dir="folder"))
    text = annotation("anchor", "a") + annotation("see", "a") + annotation("tag", "a")
    found = extract_annotations(text, path="x", patterns=custom)
    assert [item.label for item in found.tags] == ["a"]
    assert [item.label for item in found.refs] == ["a"]
    assert found.tags[0].location.column == 1


def test_compile_directive_pattern_escapes_sigil() -> None:
    pattern = compile_directive_pattern("a.b")
    assert pattern.search("[a.b:x]") is not None
    assert pattern.search("[axb:x]") is None
    assert isinstance(pattern, re.Pattern)


def test_extract_records_root(patterns) -> None:
    found = extract_annotations(annotation("tag", "x"), path="sub/f.py", patterns=patterns, root="src")
    assert found.tags[0].location.render() == "src/sub/f.py:1:1"
