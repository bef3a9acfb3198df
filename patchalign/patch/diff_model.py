"""
Map between file lines, diff positions and rows of the aligned view.

An "editor line" is the 1-based index of a row in an `AlignedPatch`, which
is what a diff widget shows when fed `original_text`/`modified_text`. In
full-file mode the widget shows whole files instead, so editor lines and
file lines are the same thing.

Diff positions follow the hosting API's review-comment convention: the line
just below the first hunk header is position 1 and every later line of the
patch, hunk headers included, adds one.
"""

from pydantic import BaseModel, Field

from patchalign.patch.align import parse_patch
from patchalign.patch.hunks import HUNK_HEADER_RE
from patchalign.patch.models import AlignedPatch, AlignedRow, Side


class LineMappings(BaseModel):
    original_line_to_editor_line: dict[int, int] = Field(default_factory=dict)
    modified_line_to_editor_line: dict[int, int] = Field(default_factory=dict)
    diff_position_to_editor_line: dict[Side, dict[int, int]] = Field(
        default_factory=lambda: {Side.LEFT: {}, Side.RIGHT: {}}
    )

    def line_map(self, side: Side) -> dict[int, int]:
        if side == Side.LEFT:
            return self.original_line_to_editor_line
        return self.modified_line_to_editor_line


def build_line_mappings(aligned: AlignedPatch) -> LineMappings:
    mappings = LineMappings()
    for editor_line, row in enumerate(aligned.rows, start=1):
        if row.original_line_number is not None:
            mappings.original_line_to_editor_line[row.original_line_number] = editor_line
        if row.modified_line_number is not None:
            mappings.modified_line_to_editor_line[row.modified_line_number] = editor_line
        if row.original_diff_position is not None:
            mappings.diff_position_to_editor_line[Side.LEFT][
                row.original_diff_position
            ] = editor_line
        if row.modified_diff_position is not None:
            mappings.diff_position_to_editor_line[Side.RIGHT][
                row.modified_diff_position
            ] = editor_line
    return mappings


def _row_line_number(row: AlignedRow, side: Side) -> int | None:
    return row.original_line_number if side == Side.LEFT else row.modified_line_number


def _row_diff_position(row: AlignedRow, side: Side) -> int | None:
    return row.original_diff_position if side == Side.LEFT else row.modified_diff_position


class DiffModel:
    """Aligned view of one file's patch plus the lookups comment overlays need."""

    def __init__(self, patch: str | None, show_full_file: bool = False):
        self.patch = patch or ""
        self.show_full_file = show_full_file
        self.aligned = parse_patch(self.patch)
        self.mappings = build_line_mappings(self.aligned) if self.patch else None

    @property
    def original_text(self) -> str:
        return self.aligned.original_text

    @property
    def modified_text(self) -> str:
        return self.aligned.modified_text

    def map_line_for_side(self, line: int | None, side: Side) -> int | None:
        if not line or line <= 0:
            return None
        if self.show_full_file or self.mappings is None:
            return line
        return self.mappings.line_map(side).get(line, line)

    def map_position_for_side(self, position: int | None, side: Side) -> int | None:
        if not position or position <= 0 or self.show_full_file or self.mappings is None:
            return None
        return self.mappings.diff_position_to_editor_line[side].get(position)

    def map_editor_line_to_file_line(
        self, editor_line: int | None, side: Side
    ) -> int | None:
        if not editor_line or editor_line <= 0:
            return None
        if self.show_full_file or self.mappings is None:
            return editor_line
        if editor_line > len(self.aligned.rows):
            return None
        return _row_line_number(self.aligned.rows[editor_line - 1], side)

    def get_diff_position_for_editor_line(
        self, editor_line: int, side: Side
    ) -> int | None:
        if not self.patch or self.mappings is None:
            return None

        if self.show_full_file:
            for row in self.aligned.rows:
                if _row_line_number(row, side) == editor_line:
                    return _row_diff_position(row, side)
            return None

        if editor_line <= 0 or editor_line > len(self.aligned.rows):
            return None
        return _row_diff_position(self.aligned.rows[editor_line - 1], side)

    def get_diff_hunk_for_line(self, target_line: int, side: Side) -> str | None:
        return get_diff_hunk_for_line(self.patch, target_line, side)


def get_diff_hunk_for_line(patch: str | None, target_line: int, side: Side) -> str | None:
    """
    Return the header and body of the hunk that holds `target_line`.

    `target_line` is a file line on `side`. Deletions only advance the left
    counter, additions only the right one; every other body line apart from
    `\\` markers advances both.
    """

    if not patch:
        return None

    header = ""
    body: list[str] = []
    left_line = 0
    right_line = 0
    found = False

    for line in patch.split("\n"):
        if line.startswith("@@"):
            if found and header:
                break
            header = line
            body = []
            match = HUNK_HEADER_RE.search(line)
            if match:
                left_line = int(match.group(1))
                right_line = int(match.group(3))
            continue

        if not header:
            continue

        if (
            line.startswith("diff --git")
            or line.startswith("index ")
            or line.startswith("---")
            or line.startswith("+++")
        ):
            continue

        body.append(line)

        if line.startswith("\\"):
            continue

        current = left_line if side == Side.LEFT else right_line
        if current == target_line:
            found = True

        if line.startswith("-"):
            left_line += 1
        elif line.startswith("+"):
            right_line += 1
        else:
            left_line += 1
            right_line += 1

    if found and header:
        return "\n".join([header, *body])
    return None
