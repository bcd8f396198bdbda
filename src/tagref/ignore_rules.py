"""Nested ignore-file rules.

A scan keeps one `IgnoreRuleSet` per ignore file it has seen on the way from
the scan root down to the current directory. `is_ignored` evaluates those sets
from the leaf back to the root: the closest set with a matching pattern
decides. Inside a set, pathspec's gitignore matcher applies git's precedence,
so `!pattern` re-includes whatever an earlier pattern excluded.

A directory is only pruned while no negated pattern is in scope. Once one is,
`foo/**` followed by `!foo/keep.txt` or an allowlist such as `*`, `!*/`,
`!*.py` could re-include something below it, so the walk descends and every
file is decided on its own.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import logging
import posixpath
from typing import Iterable, Sequence

import pathspec

logger = logging.getLogger(__name__)

IGNORE_FILE_NAMES: tuple[str, ...] = (".gitignore", ".ignore")
ALWAYS_EXCLUDED_DIRS: frozenset[str] = frozenset({".git", ".hg"})


@dataclass(frozen=True)
class IgnoreRuleSet:
    base: str
    spec: pathspec.GitIgnoreSpec

    @classmethod
    def from_lines(cls, base: str, lines: Iterable[str]) -> IgnoreRuleSet:
        return cls(
            base=_normalize_base(base),
            spec=pathspec.GitIgnoreSpec.from_lines(lines),
        )

    @property
    def has_negations(self) -> bool:
        return any(pattern.include is False for pattern in self.spec.patterns)

    def match(self, rel_path: str, *, is_dir: bool) -> bool | None:
        """Return True (ignore), False (re-include) or None (no opinion)."""
        local = _relative_to_base(rel_path, self.base)
        if local is None:
            return None
        result = self.spec.check_file(local + "/" if is_dir else local)
        return result.include


def _normalize_base(base: str) -> str:
    normalized = posixpath.normpath(base.replace("\\", "/")) if base else "."
    return "" if normalized == "." else normalized.strip("/")


def _relative_to_base(rel_path: str, base: str) -> str | None:
    if not base:
        return rel_path
    prefix = base + "/"
    if rel_path.startswith(prefix):
        return rel_path[len(prefix):]
    return None


def is_ignored(rel_path: str, *, is_dir: bool, rule_sets: Sequence[IgnoreRuleSet]) -> bool:
    """Decide whether `rel_path` (posix, relative to the scan root) is excluded.

    `rule_sets` is ordered from the scan root towards the leaf. For a
    directory, True means the walk may skip it entirely.
    """
    name = rel_path.rsplit("/", 1)[-1]
    if is_dir and name in ALWAYS_EXCLUDED_DIRS:
        return True
    if is_dir and any(rule_set.has_negations for rule_set in rule_sets):
        return False
    for rule_set in reversed(rule_sets):
        decision = rule_set.match(rel_path, is_dir=is_dir)
        if decision is not None:
            return decision
    return False


def load_rule_sets(directory: Path, *, base: str) -> list[IgnoreRuleSet]:
    """Read the ignore files that live directly in `directory`.

    `.ignore` is returned after `.gitignore` so that it takes precedence.
    Unreadable ignore files contribute no rules and are logged.
    """
    rule_sets: list[IgnoreRuleSet] = []
    for file_name in IGNORE_FILE_NAMES:
        candidate = directory / file_name
        if not candidate.is_file():
            continue
        try:
            text = candidate.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            logger.warning("skipping unreadable ignore file %s: %s", candidate, exc)
            continue
        logger.debug("loaded ignore rules from %s", candidate)
        rule_sets.append(IgnoreRuleSet.from_lines(base, text.splitlines()))
    return rule_sets
