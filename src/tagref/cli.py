from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional
import json
import logging

import typer

from tagref import __version__
from tagref.aggregate import ScanIndex, scan
from tagref.config import (
    ScanConfiguration,
    TomlTable,
    merge_payload,
    scan_configuration_from_payload,
    tagref_defaults,
)
from tagref.exceptions import InvalidConfiguration
from tagref.model import Annotation
from tagref.schema import (
    AnnotationDTO,
    CheckResponseDTO,
    DiagnosticDTO,
    ListingResponseDTO,
    WarningDTO,
)
from tagref.validate import validate
from tagref.views import count, list_dirs, list_files, list_refs, list_tags, summarize, unused_tags

app = typer.Typer(
    add_completion=False,
    help=(
        "Tagref helps you maintain cross-references in your code. It checks that "
        "references point to tags, that tags are unique, and that file and "
        "directory references point to existing paths."
    ),
)

_PARAM_HINTS = {
    "paths": "'--path'",
    "tag": "'--tag-sigil'",
    "ref": "'--ref-sigil'",
    "file": "'--file-sigil'",
    "dir": "'--dir-sigil'",
    "sigils": "'--tag-sigil' / '--ref-sigil' / '--file-sigil' / '--dir-sigil'",
    "jobs": "'--jobs'",
}
_LOG_FORMAT = "%(levelname)s: %(message)s"


def _configure_logging(verbose: int) -> None:
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format=_LOG_FORMAT, force=True)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


def _build_configuration(payload: TomlTable, defaults: TomlTable) -> ScanConfiguration:
    try:
        config = scan_configuration_from_payload(merge_payload(payload, defaults))
        config.check_roots()
    except InvalidConfiguration as exc:
        raise typer.BadParameter(str(exc), param_hint=_PARAM_HINTS.get(exc.field)) from exc
    return config


def _context_config(ctx: typer.Context) -> ScanConfiguration:
    obj = ctx.obj
    if not isinstance(obj, ScanConfiguration):
        raise typer.BadParameter("scan configuration was not initialized")
    return obj


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    paths: Optional[List[Path]] = typer.Option(
        None, "--path", "-p", help="Adds the path of a directory (or file) to scan."
    ),
    tag_sigil: Optional[str] = typer.Option(
        None, "--tag-sigil", "-t", help="Sets the sigil used for tags [default: tag]."
    ),
    ref_sigil: Optional[str] = typer.Option(
        None, "--ref-sigil", "-r", help="Sets the sigil used for references [default: ref]."
    ),
    file_sigil: Optional[str] = typer.Option(
        None, "--file-sigil", "-f", help="Sets the sigil used for file references [default: file]."
    ),
    dir_sigil: Optional[str] = typer.Option(
        None, "--dir-sigil", "-d", help="Sets the sigil used for directory references [default: dir]."
    ),
    jobs: Optional[int] = typer.Option(
        None, "--jobs", "-j", help="Number of files to scan in parallel [default: CPU count]."
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", help="Path to a tagref.toml [default: ./tagref.toml]."
    ),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True
    ),
) -> None:
    _configure_logging(verbose)
    payload: TomlTable = {
        "paths": [str(path) for path in paths] if paths else None,
        "tag_sigil": tag_sigil,
        "ref_sigil": ref_sigil,
        "file_sigil": file_sigil,
        "dir_sigil": dir_sigil,
        "jobs": jobs,
    }
    ctx.obj = _build_configuration(payload, tagref_defaults(config_path=config))
    if ctx.invoked_subcommand is None:
        _run_check(ctx.obj, as_json=False)


def _run_check(config: ScanConfiguration, *, as_json: bool) -> None:
    index = scan(config)
    diagnostics = validate(index)
    if as_json:
        response = CheckResponseDTO(
            ok=not diagnostics,
            files_scanned=index.files_scanned,
            tags=index.tag_count(),
            refs=len(index.refs),
            file_refs=len(index.files),
            dir_refs=len(index.dirs),
            diagnostics=[DiagnosticDTO.from_diagnostic(item) for item in diagnostics],
            warnings=[WarningDTO.from_warning(item) for item in index.warnings],
        )
        typer.echo(json.dumps(response.model_dump(), indent=2, sort_keys=True))
    elif diagnostics:
        for diagnostic in diagnostics:
            typer.echo(diagnostic.render(), err=True)
        typer.echo(f"{count(len(diagnostics), 'error')} found.", err=True)
    else:
        typer.echo(summarize(index))
    if diagnostics:
        raise typer.Exit(code=1)


def _emit_listing(
    index: ScanIndex,
    annotations: List[Annotation],
    *,
    as_json: bool,
) -> None:
    if as_json:
        response = ListingResponseDTO(
            annotations=[AnnotationDTO.from_annotation(item) for item in annotations],
            warnings=[WarningDTO.from_warning(item) for item in index.warnings],
        )
        typer.echo(json.dumps(response.model_dump(), indent=2, sort_keys=True))
        return
    for annotation in annotations:
        typer.echo(f"{annotation.label}\t{annotation.location.render()}")


def _run_listing(
    ctx: typer.Context,
    view: Callable[[ScanIndex], List[Annotation]],
    *,
    as_json: bool,
) -> List[Annotation]:
    index = scan(_context_config(ctx))
    annotations = view(index)
    _emit_listing(index, annotations, as_json=as_json)
    return annotations


_JSON_OPTION_HELP = "Emit machine-readable JSON instead of text."


@app.command("check")
def check(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help=_JSON_OPTION_HELP),
) -> None:
    """Checks all the tags and references (default)."""
    _run_check(_context_config(ctx), as_json=as_json)


@app.command("list-tags")
def list_tags_command(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help=_JSON_OPTION_HELP),
) -> None:
    """Lists all the tags."""
    _run_listing(ctx, list_tags, as_json=as_json)


@app.command("list-refs")
def list_refs_command(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help=_JSON_OPTION_HELP),
) -> None:
    """Lists all the references."""
    _run_listing(ctx, list_refs, as_json=as_json)


@app.command("list-files")
def list_files_command(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help=_JSON_OPTION_HELP),
) -> None:
    """Lists all the file references."""
    _run_listing(ctx, list_files, as_json=as_json)


@app.command("list-dirs")
def list_dirs_command(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help=_JSON_OPTION_HELP),
) -> None:
    """Lists all the directory references."""
    _run_listing(ctx, list_dirs, as_json=as_json)


@app.command("list-unused")
def list_unused_command(
    ctx: typer.Context,
    fail_if_any: bool = typer.Option(
        False, "--fail-if-any", help="Exit with an error if any unused tags are found."
    ),
    as_json: bool = typer.Option(False, "--json", help=_JSON_OPTION_HELP),
) -> None:
    """Lists the unreferenced tags."""
    unused = _run_listing(ctx, unused_tags, as_json=as_json)
    if fail_if_any and unused:
        if not as_json:
            typer.echo(f"{count(len(unused), 'unused tag')} found.", err=True)
        raise typer.Exit(code=1)
