from patchalign.patch.align import align_hunk, align_hunks, parse_patch
from patchalign.patch.diff_model import (
    DiffModel,
    LineMappings,
    build_line_mappings,
    get_diff_hunk_for_line,
)
from patchalign.patch.files import (
    ChangedFile,
    FileAlignment,
    FilePatch,
    align_changed_files,
    load_changed_files,
    split_file_patches,
)
from patchalign.patch.hunks import extract_hunks, parse_hunk_header
from patchalign.patch.models import (
    AlignedPatch,
    AlignedRow,
    Hunk,
    LineKind,
    ParseWarning,
    PatchLine,
    Side,
)

__all__ = [
    "parse_patch",
    "align_hunk",
    "align_hunks",
    "extract_hunks",
    "parse_hunk_header",
    "DiffModel",
    "LineMappings",
    "build_line_mappings",
    "get_diff_hunk_for_line",
    "ChangedFile",
    "FileAlignment",
    "FilePatch",
    "align_changed_files",
    "load_changed_files",
    "split_file_patches",
    "AlignedPatch",
    "AlignedRow",
    "Hunk",
    "LineKind",
    "ParseWarning",
    "PatchLine",
    "Side",
]
