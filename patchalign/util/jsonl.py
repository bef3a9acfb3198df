import json
import logging
import os
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from filelock import FileLock

logger = logging.getLogger(__name__)


def append_jsonl(path: Path, records: list[dict[str, Any]]) -> bool:
    """
    Append records to a JSONL file, one JSON object per line.

    The whole batch is written under a file lock so concurrent runs writing
    to the same file never interleave lines.

    Returns:
        True if the write succeeded, False if it failed (e.g. the path is a
        directory or not writable).
    """

    path = Path(path)
    payload = "".join(json.dumps(record, ensure_ascii=False) + "\n" for record in records)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)

        with FileLock(str(path) + ".lock"):
            with open(path, "ab") as f:
                f.write(payload.encode("utf-8"))
                f.flush()
                os.fsync(f.fileno())

    except OSError as e:
        logger.critical("Failed to write JSONL records to %s: %s", path, e)
        return False

    logger.debug("Appended %d records to %s", len(records), path)
    return True


def read_jsonl(path: Path) -> Iterator[dict]:
    """Yield one dict per line; empty and malformed lines are skipped with a warning."""

    with Path(path).open("r", encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError as e:
                logger.warning("Skipping malformed line %d in %s: %s", line_number, path, e)
