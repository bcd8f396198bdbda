from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import logging
import os
from typing import Iterable, Iterator

from tagref.exceptions import UnreadableFile
from tagref.ignore_rules import IgnoreRuleSet, is_ignored, load_rule_sets
from tagref.order_contract import sort_once

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanFile:
    """A file selected for scanning.

    `root` is the scan root as given by the caller, `rel_path` is the posix
    path below it and `path` is what gets opened.
    """

    root: Path
    rel_path: str
    path: Path

    @property
    def root_label(self) -> str:
        return self.root.as_posix()


def iter_scan_files(roots: Iterable[Path]) -> Iterator[ScanFile]:
    """Yield every eligible regular file below `roots` in lexicographic order.

    Each real file is yielded at most once even when it is reachable through
    several symbolic links or roots.
    """
    seen: set[str] = set()
    for root in roots:
        if root.is_file():
            real = os.path.realpath(root)
            if real in seen:
                continue
            seen.add(real)
            parent = root.parent
            yield ScanFile(root=parent, rel_path=root.name, path=root)
            continue
        if not root.is_dir():
            logger.warning("skipping %s: not a file or directory", root)
            continue
        yield from _walk_directory(
            root=root,
            directory=root,
            rel_dir="",
            rule_sets=(),
            ancestors=frozenset({os.path.realpath(root)}),
            seen=seen,
        )


def _walk_directory(
    *,
    root: Path,
    directory: Path,
    rel_dir: str,
    rule_sets: tuple[IgnoreRuleSet, ...],
    ancestors: frozenset[str],
    seen: set[str],
) -> Iterator[ScanFile]:
    rule_sets = (*rule_sets, *load_rule_sets(directory, base=rel_dir))
    try:
        with os.scandir(directory) as iterator:
            entries = sort_once(
                iterator,
                source="walk._walk_directory.entries",
                key=lambda entry: entry.name,
            )
    except OSError as exc:
        logger.warning("skipping unreadable directory %s: %s", directory, exc)
        return
    for entry in entries:
        rel_path = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
        try:
            entry_is_dir = entry.is_dir()
            entry_is_file = not entry_is_dir and entry.is_file()
        except OSError as exc:
            logger.warning("skipping %s: %s", entry.path, exc)
            continue
        if entry_is_dir:
            if is_ignored(rel_path, is_dir=True, rule_sets=rule_sets):
                continue
            real = os.path.realpath(entry.path)
            if real in ancestors:
                logger.debug("not following %s: link back to an ancestor", entry.path)
                continue
            yield from _walk_directory(
                root=root,
                directory=Path(entry.path),
                rel_dir=rel_path,
                rule_sets=rule_sets,
                ancestors=ancestors | {real},
                seen=seen,
            )
        elif entry_is_file:
            if is_ignored(rel_path, is_dir=False, rule_sets=rule_sets):
                continue
            real = os.path.realpath(entry.path)
            if real in seen:
                continue
            seen.add(real)
            yield ScanFile(root=root, rel_path=rel_path, path=Path(entry.path))


def read_scan_file(scan_file: ScanFile) -> str:
    """Return the file's text, raising UnreadableFile for I/O or decode errors."""
    try:
        raw = scan_file.path.read_bytes()
    except OSError as exc:
        raise UnreadableFile(str(scan_file.path), exc.strerror or str(exc)) from exc
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise UnreadableFile(str(scan_file.path), "not valid UTF-8 text, skipped as binary") from exc
