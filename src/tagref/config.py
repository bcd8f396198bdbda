from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from pathlib import Path
from typing import TypeAlias
import tomllib

from tagref.exceptions import InvalidConfiguration

DEFAULT_CONFIG_NAME = "tagref.toml"
CONFIG_SECTION = "tagref"

DEFAULT_TAG_SIGIL = "tag"
DEFAULT_REF_SIGIL = "ref"
DEFAULT_FILE_SIGIL = "file"
DEFAULT_DIR_SIGIL = "dir"

_FORBIDDEN_SIGIL_CHARS = frozenset("[]:")

TomlScalar: TypeAlias = str | int | float | bool | None | date | datetime | time
TomlValue: TypeAlias = TomlScalar | list["TomlValue"] | dict[str, "TomlValue"]
TomlTable: TypeAlias = dict[str, TomlValue]


@dataclass(frozen=True)
class SigilSet:
    tag: str = DEFAULT_TAG_SIGIL
    ref: str = DEFAULT_REF_SIGIL
    file: str = DEFAULT_FILE_SIGIL
    dir: str = DEFAULT_DIR_SIGIL

    def __post_init__(self) -> None:
        for name, value in self.items():
            _validate_sigil(name, value)
        values = [value for _, value in self.items()]
        if len(set(values)) != len(values):
            raise InvalidConfiguration(
                f"sigils must be distinct, got {', '.join(values)}",
                field="sigils",
            )

    def items(self) -> tuple[tuple[str, str], ...]:
        return (
            ("tag", self.tag),
            ("ref", self.ref),
            ("file", self.file),
            ("dir", self.dir),
        )


def _validate_sigil(name: str, value: object) -> None:
    if not isinstance(value, str) or not value:
        raise InvalidConfiguration(f"{name} sigil must be a non-empty string", field=name)
    bad = sorted({char for char in value if char in _FORBIDDEN_SIGIL_CHARS or char.isspace()})
    if bad:
        raise InvalidConfiguration(
            f"{name} sigil {value!r} contains forbidden characters: {''.join(bad)!r}",
            field=name,
        )


@dataclass(frozen=True)
class ScanConfiguration:
    """Everything one run needs; built once and never mutated."""

    roots: tuple[Path, ...] = (Path("."),)
    sigils: SigilSet = field(default_factory=SigilSet)
    jobs: int | None = None

    def __post_init__(self) -> None:
        if not self.roots:
            raise InvalidConfiguration("at least one path to scan is required", field="paths")
        if self.jobs is not None and self.jobs < 1:
            raise InvalidConfiguration(f"jobs must be positive, got {self.jobs}", field="jobs")

    def check_roots(self) -> None:
        for root in self.roots:
            if not root.exists():
                raise InvalidConfiguration(f"path does not exist: {root}", field="paths")


def _load_toml(path: Path) -> TomlTable:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError:
        return {}
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def load_config(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    if config_path is None:
        base = root if root is not None else Path.cwd()
        config_path = base / DEFAULT_CONFIG_NAME
    return _load_toml(config_path)


def tagref_defaults(
    root: Path | None = None, config_path: Path | None = None
) -> TomlTable:
    data = load_config(root=root, config_path=config_path)
    section = data.get(CONFIG_SECTION, {})
    return section if isinstance(section, dict) else {}


def merge_payload(payload: TomlTable, defaults: TomlTable) -> TomlTable:
    merged = dict(defaults)
    for key, value in payload.items():
        if value is None:
            continue
        merged[key] = value
    return merged


def _normalize_path_list(value: TomlValue) -> list[Path]:
    if value is None:
        return []
    if isinstance(value, str):
        return [Path(value)]
    if isinstance(value, list):
        paths: list[Path] = []
        for item in value:
            if not isinstance(item, str):
                raise InvalidConfiguration(f"paths entries must be strings, got {item!r}", field="paths")
            paths.append(Path(item))
        return paths
    raise InvalidConfiguration(f"paths must be a string or list, got {value!r}", field="paths")


def _optional_str(section: TomlTable, key: str, default: str) -> str:
    value = section.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise InvalidConfiguration(f"{key} must be a string, got {value!r}", field=key)
    return value


def _optional_jobs(value: TomlValue) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfiguration(f"jobs must be an integer, got {value!r}", field="jobs")
    return value


def scan_configuration_from_payload(section: TomlTable) -> ScanConfiguration:
    """Build a ScanConfiguration from merged CLI/config-file values."""
    roots = _normalize_path_list(section.get("paths")) or [Path(".")]
    sigils = SigilSet(
        tag=_optional_str(section, "tag_sigil", DEFAULT_TAG_SIGIL),
        ref=_optional_str(section, "ref_sigil", DEFAULT_REF_SIGIL),
        file=_optional_str(section, "file_sigil", DEFAULT_FILE_SIGIL),
        dir=_optional_str(section, "dir_sigil", DEFAULT_DIR_SIGIL),
    )
    return ScanConfiguration(
        roots=tuple(roots),
        sigils=sigils,
        jobs=_optional_jobs(section.get("jobs")),
    )
