from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class LineKind(StrEnum):
    CONTEXT = "context"
    DELETION = "deletion"
    ADDITION = "addition"


class Side(StrEnum):
    LEFT = "LEFT"
    RIGHT = "RIGHT"


class PatchLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: LineKind
    text: str
    position: int


class Hunk(BaseModel):
    """
    One `@@ -a,b +c,d @@` region of a patch.

    `old_start`/`new_start` are kept for line-number mappings only; the
    aligned text blocks never look at them.
    """

    model_config = ConfigDict(frozen=True)

    old_start: int
    old_lines: int = 1
    new_start: int
    new_lines: int = 1
    header: str = ""
    lines: tuple[PatchLine, ...] = ()


class ParseWarning(BaseModel):
    code: str
    message: str
    line_number: int | None = None


class AlignedRow(BaseModel):
    original_text: str = ""
    modified_text: str = ""
    original_line_number: int | None = None
    modified_line_number: int | None = None
    original_diff_position: int | None = None
    modified_diff_position: int | None = None


class AlignedPatch(BaseModel):
    rows: list[AlignedRow] = Field(default_factory=list)
    hunks: list[Hunk] = Field(default_factory=list)
    warnings: list[ParseWarning] = Field(default_factory=list)

    @property
    def original_lines(self) -> list[str]:
        return [row.original_text for row in self.rows]

    @property
    def modified_lines(self) -> list[str]:
        return [row.modified_text for row in self.rows]

    @property
    def original_text(self) -> str:
        return "\n".join(self.original_lines) if self.rows else ""

    @property
    def modified_text(self) -> str:
        return "\n".join(self.modified_lines) if self.rows else ""
