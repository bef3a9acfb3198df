import json
import sys
from enum import StrEnum
from pathlib import Path

import typer

from patchalign.errors import ChangedFilesError
from patchalign.logging import setup_logging
from patchalign.patch.align import parse_patch
from patchalign.patch.diff_model import get_diff_hunk_for_line
from patchalign.patch.files import (
    align_changed_files,
    load_changed_files,
    split_file_patches,
)
from patchalign.patch.models import AlignedPatch, ParseWarning, Side
from patchalign.util.jsonl import append_jsonl

app = typer.Typer(no_args_is_help=True)


class OutputSide(StrEnum):
    ORIGINAL = "original"
    MODIFIED = "modified"
    BOTH = "both"


def _read_patch(patch_file: Path) -> str:
    if str(patch_file) == "-":
        return sys.stdin.read()
    if not patch_file.is_file():
        raise typer.BadParameter(f"{patch_file} does not exist")
    # Patches of non-UTF-8 sources still align; undecodable bytes become U+FFFD.
    try:
        return patch_file.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise typer.BadParameter(f"could not read {patch_file}: {exc}")


def _check_strict(strict: bool, warnings: list[ParseWarning]) -> None:
    if strict and warnings:
        messages = "; ".join(f"{w.code}:{w.message}" for w in warnings)
        raise typer.BadParameter(f"Strict mode: warnings present: {messages}")


def _aligned_record(aligned: AlignedPatch, path: str | None = None) -> dict:
    record = {
        "original_text": aligned.original_text,
        "modified_text": aligned.modified_text,
        "hunks": len(aligned.hunks),
        "rows": len(aligned.rows),
        "warnings": [w.model_dump(mode="json") for w in aligned.warnings],
    }
    if path is not None:
        record = {"path": path, **record}
    return record


def _echo_aligned(aligned: AlignedPatch, side: OutputSide) -> None:
    if side == OutputSide.ORIGINAL:
        typer.echo(aligned.original_text)
    elif side == OutputSide.MODIFIED:
        typer.echo(aligned.modified_text)
    else:
        typer.echo("--- original")
        typer.echo(aligned.original_text)
        typer.echo("+++ modified")
        typer.echo(aligned.modified_text)


@app.command("align")
def align_cmd(
    patch_file: Path = typer.Argument(..., help="Patch file, or '-' to read stdin"),
    side: OutputSide = typer.Option(OutputSide.BOTH, "--side", help="Which side to print"),
    as_json: bool = typer.Option(False, "--json", help="Print a JSON document"),
    split: bool = typer.Option(
        False, "--split", help="Align each file of a multi-file diff separately"
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        envvar="PATCHALIGN_STRICT",
        help="Fail on malformed hunk headers",
    ),
):
    """Align a unified-diff patch into original and modified text blocks."""
    text = _read_patch(patch_file)

    if split:
        entries = [(fp.path, parse_patch(fp.patch)) for fp in split_file_patches(text)]
    else:
        entries = [(None, parse_patch(text))]

    _check_strict(strict, [w for _, aligned in entries for w in aligned.warnings])

    if as_json:
        records = [_aligned_record(aligned, path) for path, aligned in entries]
        payload = records if split else records[0]
        typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    for path, aligned in entries:
        if split:
            typer.echo(f"== {path or '(unknown)'}")
        _echo_aligned(aligned, side)


@app.command("files")
def files_cmd(
    listing: Path = typer.Argument(..., help="JSON array of changed files"),
    out: Path | None = typer.Option(None, "--out", help="Append one JSONL record per file"),
    strict: bool = typer.Option(
        False,
        "--strict",
        envvar="PATCHALIGN_STRICT",
        help="Fail on malformed hunk headers",
    ),
):
    """Align every changed file of a pull-request files listing."""
    try:
        changed = load_changed_files(listing)
    except ChangedFilesError as exc:
        raise typer.BadParameter(str(exc))

    alignments = align_changed_files(changed)
    _check_strict(strict, [w for a in alignments for w in a.aligned.warnings])

    for alignment in alignments:
        aligned = alignment.aligned
        typer.echo(
            f"{alignment.filename} [{alignment.status}] "
            f"hunks={len(aligned.hunks)} rows={len(aligned.rows)} "
            f"warnings={len(aligned.warnings)}"
        )

    if out is not None:
        if not append_jsonl(out, [a.to_record() for a in alignments]):
            raise typer.BadParameter(f"could not write {out}")
        typer.echo(f"Wrote {len(alignments)} records to {out}")

    typer.echo(f"Total files: {len(alignments)}")


@app.command("hunk")
def hunk_cmd(
    patch_file: Path = typer.Argument(..., help="Patch file, or '-' to read stdin"),
    line: int = typer.Option(..., "--line", help="File line number"),
    side: Side = typer.Option(
        Side.RIGHT, "--side", case_sensitive=False, help="LEFT (original) or RIGHT (modified)"
    ),
):
    """Print the hunk that contains a file line."""
    hunk = get_diff_hunk_for_line(_read_patch(patch_file), line, side)
    if hunk is None:
        typer.echo(f"No hunk contains {side.value} line {line}", err=True)
        raise typer.Exit(code=1)
    typer.echo(hunk)


@app.callback()
def main(
    log_level: str | None = typer.Option(
        None, "--log-level", envvar="PATCHALIGN_LOG_LEVEL", help="Logging level"
    ),
):
    """
    patchalign CLI
    """
    if log_level:
        setup_logging(log_level)
