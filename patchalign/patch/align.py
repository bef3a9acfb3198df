"""Align hunk lines into two position-synchronized sides.

Each emitted row carries one entry per side; a side with nothing to show at
that row gets `""`. Replacement blocks (a deletion run followed directly by
an addition run) are paired by index, not by content.
"""

import logging
from collections.abc import Iterable

from patchalign.patch.hunks import extract_hunks
from patchalign.patch.models import (
    AlignedPatch,
    AlignedRow,
    Hunk,
    LineKind,
    ParseWarning,
    PatchLine,
)

logger = logging.getLogger(__name__)


def _take_run(lines: tuple[PatchLine, ...], start: int, kind: LineKind) -> list[PatchLine]:
    run: list[PatchLine] = []
    idx = start
    while idx < len(lines) and lines[idx].kind == kind:
        run.append(lines[idx])
        idx += 1
    return run


def align_hunk(hunk: Hunk) -> list[AlignedRow]:
    rows: list[AlignedRow] = []
    old_line = hunk.old_start
    new_line = hunk.new_start
    lines = hunk.lines

    i = 0
    while i < len(lines):
        line = lines[i]

        if line.kind == LineKind.CONTEXT:
            rows.append(
                AlignedRow(
                    original_text=line.text,
                    modified_text=line.text,
                    original_line_number=old_line,
                    modified_line_number=new_line,
                    original_diff_position=line.position,
                    modified_diff_position=line.position,
                )
            )
            old_line += 1
            new_line += 1
            i += 1
            continue

        if line.kind == LineKind.DELETION:
            deletions = _take_run(lines, i, LineKind.DELETION)
            i += len(deletions)
            additions = _take_run(lines, i, LineKind.ADDITION)
            i += len(additions)

            for j in range(max(len(deletions), len(additions))):
                row = AlignedRow()
                if j < len(deletions):
                    row.original_text = deletions[j].text
                    row.original_line_number = old_line
                    row.original_diff_position = deletions[j].position
                    old_line += 1
                if j < len(additions):
                    row.modified_text = additions[j].text
                    row.modified_line_number = new_line
                    row.modified_diff_position = additions[j].position
                    new_line += 1
                rows.append(row)
            continue

        rows.append(
            AlignedRow(
                modified_text=line.text,
                modified_line_number=new_line,
                modified_diff_position=line.position,
            )
        )
        new_line += 1
        i += 1

    return rows


def align_hunks(
    hunks: Iterable[Hunk], warnings: Iterable[ParseWarning] = ()
) -> AlignedPatch:
    """Concatenate the aligned rows of every hunk in document order."""

    hunks = list(hunks)
    rows: list[AlignedRow] = []
    for hunk in hunks:
        rows.extend(align_hunk(hunk))

    return AlignedPatch(rows=rows, hunks=hunks, warnings=list(warnings))


def parse_patch(patch: str | None) -> AlignedPatch:
    """
    Parse the unified-diff patch of one file into two aligned sides.

    `None` and empty input give an empty result whose `original_text` and
    `modified_text` are both `""`. Never raises.
    """

    hunks, warnings = extract_hunks(patch)
    aligned = align_hunks(hunks, warnings)
    logger.debug(
        "Aligned %d hunks into %d rows (%d warnings)",
        len(hunks),
        len(aligned.rows),
        len(aligned.warnings),
    )
    return aligned
