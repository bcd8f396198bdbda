from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
for entry in (ROOT, ROOT / "src"):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))


import pytest

from tagref.config import ScanConfiguration, SigilSet
from tagref.extract import DirectivePatterns, compile_patterns
from tests.tree_helpers import write_tree as _write_tree


@pytest.fixture
def patterns() -> DirectivePatterns:
    return compile_patterns(SigilSet())


@pytest.fixture
def write_tree():
    return _write_tree


@pytest.fixture
def single_worker_config():
    def _make(*roots: Path, sigils: SigilSet | None = None) -> ScanConfiguration:
        return ScanConfiguration(
            roots=tuple(roots),
            sigils=sigils if sigils is not None else SigilSet(),
            jobs=1,
        )

    return _make
