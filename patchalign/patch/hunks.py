import logging
import re

from patchalign.patch.models import Hunk, LineKind, ParseWarning, PatchLine

logger = logging.getLogger(__name__)

HUNK_HEADER_RE = re.compile(r"@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")

_DIRECTIVES = {
    "-": LineKind.DELETION,
    "+": LineKind.ADDITION,
    " ": LineKind.CONTEXT,
}


def parse_hunk_header(line: str) -> tuple[int, int, int, int] | None:
    """Return `(old_start, old_lines, new_start, new_lines)` or None."""

    match = HUNK_HEADER_RE.search(line)
    if match is None:
        return None
    old_start, old_lines, new_start, new_lines = match.groups()
    return (
        int(old_start),
        int(old_lines or "1"),
        int(new_start),
        int(new_lines or "1"),
    )


def classify_body_line(line: str) -> tuple[LineKind, str] | None:
    """
    Classify one line found below a hunk header.

    Returns None for lines that carry no content: `\\`-prefixed markers
    (`\\ No newline at end of file` and friends), `index ` headers and empty
    lines. A `---`/`+++` line is a deletion/addition whose content starts
    with `--`/`++`, which is what git emits for such source lines.
    """

    if not line:
        return None

    kind = _DIRECTIVES.get(line[0])
    if kind is not None:
        return kind, line[1:]

    if line.startswith("\\") or line.startswith("index "):
        return None

    # Unprefixed content; keep it rather than lose it.
    return LineKind.CONTEXT, line


def _read_hunk_body(
    lines: list[str], start: int, first_header: int
) -> tuple[list[PatchLine], int]:
    body: list[PatchLine] = []
    idx = start
    while idx < len(lines):
        line = lines[idx]
        if line.startswith("@@") or line.startswith("diff --git"):
            break

        classified = classify_body_line(line)
        if classified is not None:
            kind, text = classified
            body.append(PatchLine(kind=kind, text=text, position=idx - first_header))
        idx += 1

    return body, idx


def extract_hunks(patch: str | None) -> tuple[list[Hunk], list[ParseWarning]]:
    """
    Tokenize the patch text of one file into hunks.

    Total over all inputs: a header that does not parse is dropped together
    with the lines below it, and reported as a `malformed_hunk_header`
    warning instead of an exception.

    Returns:
      (hunks, warnings)
    """

    text = "" if patch is None else str(patch)
    hunks: list[Hunk] = []
    warnings: list[ParseWarning] = []

    if not text.strip():
        return hunks, warnings

    lines = text.split("\n")
    first_header: int | None = None

    idx = 0
    while idx < len(lines):
        line = lines[idx]
        if not line.startswith("@@"):
            idx += 1
            continue

        if first_header is None:
            first_header = idx

        counts = parse_hunk_header(line)
        if counts is None:
            logger.warning(
                "Dropping malformed hunk header at line %d: %r",
                idx + 1,
                line,
            )
            warnings.append(
                ParseWarning(
                    code="malformed_hunk_header",
                    message=f"could not parse hunk header: {line}",
                    line_number=idx + 1,
                )
            )
            idx += 1
            continue

        body, idx = _read_hunk_body(lines, idx + 1, first_header)
        old_start, old_lines, new_start, new_lines = counts
        hunks.append(
            Hunk(
                old_start=old_start,
                old_lines=old_lines,
                new_start=new_start,
                new_lines=new_lines,
                header=line,
                lines=tuple(body),
            )
        )

    logger.debug("Extracted %d hunks from patch", len(hunks))
    return hunks, warnings
