from __future__ import annotations

import concurrent.futures
from dataclasses import dataclass, field
import logging
import os
from pathlib import Path
from typing import Callable, Iterable, Iterator

from tagref.config import ScanConfiguration
from tagref.exceptions import UnreadableFile
from tagref.extract import DirectivePatterns, FileAnnotations, compile_patterns, extract_annotations
from tagref.model import Annotation, ScanWarning
from tagref.walk import ScanFile, iter_scan_files, read_scan_file

logger = logging.getLogger(__name__)

FileSource = Callable[[Iterable[Path]], Iterator[ScanFile]]
TextReader = Callable[[ScanFile], str]


@dataclass(frozen=True)
class FileResult:
    scan_file: ScanFile
    annotations: FileAnnotations | None
    warning: ScanWarning | None = None


@dataclass
class ScanIndex:
    """Everything one scan found, in traversal order.

    `tags` keeps every location of a label so that duplicates can cite all of
    them; dict insertion order follows the first occurrence of each label.
    """

    tags: dict[str, list[Annotation]] = field(default_factory=dict)
    refs: list[Annotation] = field(default_factory=list)
    files: list[Annotation] = field(default_factory=list)
    dirs: list[Annotation] = field(default_factory=list)
    files_scanned: int = 0
    warnings: list[ScanWarning] = field(default_factory=list)

    def tag_count(self) -> int:
        return sum(len(locations) for locations in self.tags.values())


def extract_file(
    scan_file: ScanFile,
    patterns: DirectivePatterns,
    *,
    reader: TextReader = read_scan_file,
) -> FileResult:
    try:
        text = reader(scan_file)
    except UnreadableFile as exc:
        return FileResult(
            scan_file=scan_file,
            annotations=None,
            warning=ScanWarning(path=exc.path, message=exc.reason),
        )
    annotations = extract_annotations(
        text,
        path=scan_file.rel_path,
        patterns=patterns,
        root=scan_file.root_label,
    )
    return FileResult(scan_file=scan_file, annotations=annotations)


def merge_annotations(results: Iterable[FileResult]) -> ScanIndex:
    index = ScanIndex()
    for result in results:
        if result.warning is not None:
            logger.warning("skipping %s", result.warning.render())
            index.warnings.append(result.warning)
            continue
        if result.annotations is None:
            continue
        index.files_scanned += 1
        annotations = result.annotations
        for tag in annotations.tags:
            index.tags.setdefault(tag.label, []).append(tag)
        index.refs.extend(annotations.refs)
        index.files.extend(annotations.files)
        index.dirs.extend(annotations.dirs)
    return index


def _worker_count(jobs: int | None) -> int:
    if jobs is not None:
        return jobs
    return max(1, os.cpu_count() or 1)


def scan(
    config: ScanConfiguration,
    *,
    file_source: FileSource = iter_scan_files,
    reader: TextReader = read_scan_file,
) -> ScanIndex:
    """Walk, extract in parallel, then reduce into one index.

    `executor.map` yields results in submission order, so the index only
    depends on the traversal order and never on which worker finished first.
    """
    config.check_roots()
    patterns = compile_patterns(config.sigils)
    scan_files = list(file_source(config.roots))
    workers = _worker_count(config.jobs)
    logger.info("scanning %d files with %d workers", len(scan_files), workers)
    if workers == 1:
        results = [extract_file(item, patterns, reader=reader) for item in scan_files]
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(
                executor.map(lambda item: extract_file(item, patterns, reader=reader), scan_files)
            )
    index = merge_annotations(results)
    logger.debug(
        "found %d tags, %d refs, %d file refs, %d dir refs",
        index.tag_count(),
        len(index.refs),
        len(index.files),
        len(index.dirs),
    )
    return index
