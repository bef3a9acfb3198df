import json
import logging
import shlex
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import BaseModel, TypeAdapter, ValidationError

from patchalign.errors import ChangedFilesError
from patchalign.patch.align import parse_patch
from patchalign.patch.models import AlignedPatch

logger = logging.getLogger(__name__)

DEV_NULL = "/dev/null"


class ChangedFile(BaseModel):
    """One entry of a hosting API's pull-request files listing."""

    filename: str
    status: str = "modified"
    patch: str | None = None
    additions: int = 0
    deletions: int = 0
    previous_filename: str | None = None


class FilePatch(BaseModel):
    old_path: str | None
    new_path: str | None
    patch: str

    @property
    def path(self) -> str | None:
        if self.new_path and self.new_path != DEV_NULL:
            return self.new_path
        return self.old_path


class FileAlignment(BaseModel):
    filename: str
    status: str
    previous_filename: str | None = None
    aligned: AlignedPatch

    def to_record(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "status": self.status,
            "previous_filename": self.previous_filename,
            "original_text": self.aligned.original_text,
            "modified_text": self.aligned.modified_text,
            "hunks": len(self.aligned.hunks),
            "rows": len(self.aligned.rows),
            "warnings": [w.model_dump(mode="json") for w in self.aligned.warnings],
        }


_CHANGED_FILES = TypeAdapter(list[ChangedFile])


def load_changed_files(path: Path) -> list[ChangedFile]:
    """
    Read a JSON array of changed files, as served by the hosting API.

    Raises:
        ChangedFilesError: If the file cannot be read or is not a valid listing.
    """

    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except OSError as exc:
        raise ChangedFilesError(str(path), str(exc)) from exc
    except json.JSONDecodeError as exc:
        raise ChangedFilesError(str(path), f"invalid JSON: {exc}") from exc

    try:
        files = _CHANGED_FILES.validate_python(raw)
    except ValidationError as exc:
        raise ChangedFilesError(str(path), str(exc)) from exc

    logger.debug("Loaded %d changed files from %s", len(files), path)
    return files


def align_changed_files(files: Iterable[ChangedFile]) -> list[FileAlignment]:
    out: list[FileAlignment] = []
    for changed in files:
        # Binary and oversized files come without a patch.
        aligned = parse_patch(changed.patch or "")
        out.append(
            FileAlignment(
                filename=changed.filename,
                status=changed.status,
                previous_filename=changed.previous_filename,
                aligned=aligned,
            )
        )
    return out


def _parse_diff_git_paths(line: str) -> tuple[str, str] | None:
    """Parse `diff --git <a> <b>`; quoted paths are supported."""

    rest = line[len("diff --git ") :]
    try:
        parts = shlex.split(rest, posix=True)
    except ValueError:
        return None

    if len(parts) != 2:
        return None

    a_tok, b_tok = parts
    if not (a_tok.startswith("a/") and b_tok.startswith("b/")):
        return None
    return a_tok[2:], b_tok[2:]


def _parse_header_path(raw: str, side_prefix: str) -> str | None:
    # Non-git diffs append a tab and a timestamp.
    token = raw.split("\t")[0].strip()
    if token.startswith('"'):
        try:
            parts = shlex.split(token, posix=True)
        except ValueError:
            return None
        if len(parts) != 1:
            return None
        token = parts[0]
    if not token:
        return None
    if token == DEV_NULL:
        return token
    return token.removeprefix(side_prefix)


def _build_file_patch(section: list[str], git_header: str | None) -> FilePatch:
    old_path: str | None = None
    new_path: str | None = None

    if git_header is not None:
        paths = _parse_diff_git_paths(git_header)
        if paths is None:
            logger.warning("Could not parse file header: %r", git_header)
        else:
            old_path, new_path = paths

    body_start: int | None = None
    for idx, line in enumerate(section):
        if line.startswith("@@"):
            body_start = idx
            break
        if line.startswith("--- "):
            old_path = _parse_header_path(line[4:], "a/") or old_path
        elif line.startswith("+++ "):
            new_path = _parse_header_path(line[4:], "b/") or new_path

    patch = "\n".join(section[body_start:]) if body_start is not None else ""
    return FilePatch(old_path=old_path, new_path=new_path, patch=patch)


def split_file_patches(diff_text: str | None) -> list[FilePatch]:
    """
    Split multi-file diff output into one patch per file.

    Each resulting `patch` starts at the file's first hunk header, the same
    shape the hosting API uses for its per-file `patch` field. Rename-only and
    binary sections get an empty patch. Without `diff --git` lines (plain
    `diff -u`/`diff -ruN` output) files are split on their `---`/`+++`
    header pairs; text with neither is treated as a single file.
    """

    text = "" if diff_text is None else str(diff_text)
    if not text.strip():
        return []

    lines = text.split("\n")
    starts = [idx for idx, line in enumerate(lines) if line.startswith("diff --git ")]
    if starts:
        bounds = zip(starts, starts[1:] + [len(lines)])
        return [
            _build_file_patch(lines[start + 1 : end], lines[start])
            for start, end in bounds
        ]

    starts = _plain_header_starts(lines)
    if not starts:
        return [_build_file_patch(lines, None)]

    bounds = zip(starts, starts[1:] + [len(lines)])
    return [_build_file_patch(lines[start:end], None) for start, end in bounds]


def _plain_header_starts(lines: list[str]) -> list[int]:
    """
    Find the first line of every file section in a non-git diff.

    A section header is a `--- ` line directly followed by `+++ ` and then a
    hunk header (or end of input), so a `-- x` deletion next to a `++ y`
    addition inside a hunk is not mistaken for one. A `diff ...` command line
    right above the header belongs to the same section.
    """

    starts: list[int] = []
    for idx in range(len(lines) - 1):
        if not (lines[idx].startswith("--- ") and lines[idx + 1].startswith("+++ ")):
            continue
        if idx + 2 < len(lines) and not lines[idx + 2].startswith("@@"):
            continue
        if idx > 0 and lines[idx - 1].startswith("diff "):
            starts.append(idx - 1)
        else:
            starts.append(idx)
    return starts
