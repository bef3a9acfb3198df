import json
from pathlib import Path

import pytest

from patchalign.errors import ChangedFilesError
from patchalign.patch.align import parse_patch
from patchalign.patch.files import (
    ChangedFile,
    FilePatch,
    align_changed_files,
    load_changed_files,
    split_file_patches,
)

MULTI_FILE_DIFF = """\
diff --git a/src/app.py b/src/app.py
index 1111111..2222222 100644
--- a/src/app.py
+++ b/src/app.py
@@ -1,2 +1,2 @@
 import os
-print("a")
+print("b")
diff --git a/docs/new.md b/docs/new.md
new file mode 100644
index 0000000..3333333
--- /dev/null
+++ b/docs/new.md
@@ -0,0 +1,2 @@
+# Title
+body
diff --git a/old.txt b/renamed.txt
similarity index 100%
rename from old.txt
rename to renamed.txt
"""

QUOTED_PATH_DIFF = """\
diff --git "a/my file.txt" "b/my file.txt"
--- "a/my file.txt"
+++ "b/my file.txt"
@@ -1 +1 @@
-x
+y"""

PLAIN_DIFF = """\
--- a/f.txt\t2024-01-01 10:00:00
+++ b/f.txt\t2024-01-02 10:00:00
@@ -1 +1 @@
-x
+y"""

PLAIN_MULTI_FILE_DIFF = """\
--- a/one.py\t2024-01-01
+++ b/one.py\t2024-01-02
@@ -1 +1 @@
-x
+y
--- a/two.py\t2024-01-01
+++ b/two.py\t2024-01-02
@@ -1 +1 @@
-p
+q
"""

PLAIN_RECURSIVE_DIFF = """\
diff -ruN a/one.py b/one.py
--- a/one.py\t2024-01-01
+++ b/one.py\t2024-01-02
@@ -1 +1 @@
-x
+y
diff -ruN a/two.py b/two.py
--- a/two.py\t2024-01-01
+++ b/two.py\t2024-01-02
@@ -1 +1 @@
-p
+q
"""

DASH_CONTENT_DIFF = """\
--- a/query.sql
+++ b/query.sql
@@ -1,2 +1,2 @@
--- sql comment
+++ other
 keep
"""


def write_listing(path: Path, rows) -> Path:
    path.write_text(json.dumps(rows), encoding="utf-8")
    return path


class TestSplitFilePatches:
    def test_multi_file_diff(self):
        patches = split_file_patches(MULTI_FILE_DIFF)

        assert [(p.old_path, p.new_path) for p in patches] == [
            ("src/app.py", "src/app.py"),
            ("/dev/null", "docs/new.md"),
            ("old.txt", "renamed.txt"),
        ]
        assert patches[0].patch.startswith("@@ -1,2 +1,2 @@")
        assert patches[2].patch == ""

    def test_each_patch_aligns_on_its_own(self):
        patches = split_file_patches(MULTI_FILE_DIFF)

        app = parse_patch(patches[0].patch)
        assert app.original_text == 'import os\nprint("a")'
        assert app.modified_text == 'import os\nprint("b")'

        new = parse_patch(patches[1].patch)
        assert new.original_lines == ["", ""]
        assert new.modified_lines == ["# Title", "body"]

    def test_path_prefers_new_side(self):
        assert FilePatch(old_path="a.py", new_path="b.py", patch="").path == "b.py"
        assert FilePatch(old_path="gone.py", new_path="/dev/null", patch="").path == "gone.py"

    def test_quoted_paths(self):
        patches = split_file_patches(QUOTED_PATH_DIFF)

        assert len(patches) == 1
        assert patches[0].old_path == "my file.txt"
        assert patches[0].new_path == "my file.txt"

    def test_diff_without_git_header(self):
        patches = split_file_patches(PLAIN_DIFF)

        assert len(patches) == 1
        assert patches[0].old_path == "f.txt"
        assert patches[0].new_path == "f.txt"
        assert parse_patch(patches[0].patch).modified_text == "y"

    def test_plain_diff_with_two_files(self):
        patches = split_file_patches(PLAIN_MULTI_FILE_DIFF)

        assert [p.path for p in patches] == ["one.py", "two.py"]
        one = parse_patch(patches[0].patch)
        two = parse_patch(patches[1].patch)
        assert one.original_lines == ["x"]
        assert one.modified_lines == ["y"]
        assert two.original_lines == ["p"]
        assert two.modified_lines == ["q"]

    def test_plain_recursive_diff_keeps_command_line_out_of_hunks(self):
        patches = split_file_patches(PLAIN_RECURSIVE_DIFF)

        assert [p.path for p in patches] == ["one.py", "two.py"]
        assert parse_patch(patches[0].patch).original_lines == ["x"]
        assert parse_patch(patches[1].patch).modified_lines == ["q"]

    def test_dash_lines_inside_hunk_are_not_file_headers(self):
        patches = split_file_patches(DASH_CONTENT_DIFF)

        assert len(patches) == 1
        aligned = parse_patch(patches[0].patch)
        assert aligned.original_lines == ["-- sql comment", "keep"]
        assert aligned.modified_lines == ["++ other", "keep"]

    @pytest.mark.parametrize("text", ["", None, "\n"])
    def test_empty_input(self, text):
        assert split_file_patches(text) == []


class TestLoadChangedFiles:
    def test_load_listing(self, tmp_path: Path):
        listing = write_listing(
            tmp_path / "files.json",
            [
                {
                    "sha": "abc123",
                    "filename": "a.py",
                    "status": "modified",
                    "additions": 1,
                    "deletions": 1,
                    "patch": "@@ -1 +1 @@\n-x\n+y",
                },
                {"filename": "logo.png", "status": "added"},
            ],
        )

        files = load_changed_files(listing)

        assert [f.filename for f in files] == ["a.py", "logo.png"]
        assert files[0].additions == 1
        assert files[1].patch is None

    def test_invalid_json(self, tmp_path: Path):
        listing = tmp_path / "files.json"
        listing.write_text("{not json", encoding="utf-8")

        with pytest.raises(ChangedFilesError, match="invalid JSON"):
            load_changed_files(listing)

    def test_not_a_list(self, tmp_path: Path):
        listing = write_listing(tmp_path / "files.json", {"filename": "a.py"})

        with pytest.raises(ChangedFilesError):
            load_changed_files(listing)

    def test_missing_filename(self, tmp_path: Path):
        listing = write_listing(tmp_path / "files.json", [{"status": "added"}])

        with pytest.raises(ChangedFilesError):
            load_changed_files(listing)

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ChangedFilesError):
            load_changed_files(tmp_path / "nope.json")


class TestAlignChangedFiles:
    def test_aligns_each_file(self):
        files = [
            ChangedFile(filename="a.py", patch="@@ -1 +1 @@\n-x\n+y"),
            ChangedFile(filename="logo.png", status="added"),
        ]

        alignments = align_changed_files(files)

        assert alignments[0].aligned.original_text == "x"
        assert alignments[0].aligned.modified_text == "y"
        assert alignments[1].aligned.rows == []
        assert alignments[1].aligned.original_text == ""

    def test_to_record(self):
        files = [
            ChangedFile(
                filename="b.py",
                status="renamed",
                previous_filename="a.py",
                patch="@@ -1 +1,2 @@\n x\n+y",
            )
        ]

        record = align_changed_files(files)[0].to_record()

        assert record == {
            "filename": "b.py",
            "status": "renamed",
            "previous_filename": "a.py",
            "original_text": "x\n",
            "modified_text": "x\ny",
            "hunks": 1,
            "rows": 2,
            "warnings": [],
        }
