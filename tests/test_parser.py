from __future__ import annotations

import unittest

from hunkview.diff.parser import parse_diff
from hunkview.errors import ParseError

SAMPLE = """\
diff --git a/test.txt b/test.txt
index 1234567..abcdefg 100644
--- a/test.txt
+++ b/test.txt
@@ -1,5 +1,6 @@
-This is the original file.
+This is the MODIFIED file.
 It has multiple lines.
-Some content here.
+Some NEW content here.
 More content.
+Additional line added.
 Final line.
"""


class ParserTests(unittest.TestCase):
    def test_single_hunk_line_numbers(self) -> None:
        text = "--- a/x\n+++ b/x\n@@ -1,3 +1,3 @@\n foo\n-bar\n+baz\n qux\n"
        files = parse_diff(text)

        self.assertEqual(len(files), 1)
        file = files[0]
        self.assertEqual(file.old_path, "x")
        self.assertEqual(file.new_path, "x")
        self.assertEqual(file.status, "modified")
        self.assertEqual(len(file.hunks), 1)

        lines = file.hunks[0].lines
        self.assertEqual(
            [(line.kind, line.text, line.old_number, line.new_number) for line in lines],
            [
                ("context", "foo", 1, 1),
                ("removed", "bar", 2, None),
                ("added", "baz", None, 2),
                ("context", "qux", 3, 3),
            ],
        )

    def test_git_sample_counts_and_sides(self) -> None:
        (file,) = parse_diff(SAMPLE)
        hunk = file.hunks[0]

        self.assertEqual(file.path, "test.txt")
        self.assertEqual((hunk.old_start, hunk.old_count, hunk.new_start, hunk.new_count), (1, 5, 1, 6))
        self.assertEqual(
            [line.text for line in hunk.old_side()],
            [
                "This is the original file.",
                "It has multiple lines.",
                "Some content here.",
                "More content.",
                "Final line.",
            ],
        )
        self.assertEqual(len(hunk.new_side()), hunk.new_count)
        self.assertEqual(file.added_count, 3)
        self.assertEqual(file.removed_count, 2)
        self.assertEqual([line.new_number for line in hunk.new_side()], [1, 2, 3, 4, 5, 6])

    def test_multiple_files_keep_order(self) -> None:
        text = (
            "diff --git a/b.txt b/b.txt\n--- a/b.txt\n+++ b/b.txt\n@@ -1 +1 @@\n-x\n+y\n"
            "diff --git a/a.txt b/a.txt\n--- a/a.txt\n+++ b/a.txt\n@@ -1 +1 @@\n-x\n+y\n"
        )
        self.assertEqual([file.path for file in parse_diff(text)], ["b.txt", "a.txt"])

    def test_added_file(self) -> None:
        text = (
            "diff --git a/new.py b/new.py\n"
            "new file mode 100644\n"
            "index 0000000..e69de29\n"
            "--- /dev/null\n"
            "+++ b/new.py\n"
            "@@ -0,0 +1,2 @@\n"
            "+a = 1\n"
            "+b = 2\n"
        )
        (file,) = parse_diff(text)

        self.assertIsNone(file.old_path)
        self.assertEqual(file.new_path, "new.py")
        self.assertEqual(file.status, "added")
        self.assertEqual(file.status_letter, "A")
        self.assertEqual([line.new_number for line in file.lines()], [1, 2])

    def test_deleted_file(self) -> None:
        text = (
            "diff --git a/gone.py b/gone.py\n"
            "deleted file mode 100644\n"
            "--- a/gone.py\n"
            "+++ /dev/null\n"
            "@@ -1,2 +0,0 @@\n"
            "-a = 1\n"
            "-b = 2\n"
        )
        (file,) = parse_diff(text)

        self.assertEqual(file.status, "deleted")
        self.assertEqual(file.path, "gone.py")
        self.assertEqual([line.old_number for line in file.lines()], [1, 2])

    def test_pure_rename_has_no_hunks(self) -> None:
        text = (
            "diff --git a/old.txt b/new.txt\n"
            "similarity index 100%\n"
            "rename from old.txt\n"
            "rename to new.txt\n"
        )
        (file,) = parse_diff(text)

        self.assertEqual(file.status, "renamed")
        self.assertEqual(file.hunks, ())
        self.assertEqual(file.display_name, "old.txt → new.txt")

    def test_binary_file(self) -> None:
        text = (
            "diff --git a/img.png b/img.png\n"
            "index 1111111..2222222 100644\n"
            "Binary files a/img.png and b/img.png differ\n"
        )
        (file,) = parse_diff(text)

        self.assertTrue(file.binary)
        self.assertEqual(file.hunks, ())
        self.assertEqual(file.status, "modified")

    def test_plain_unified_diff_with_timestamps(self) -> None:
        text = (
            "--- left/config.ini\t2024-01-01 10:00:00.000000000 +0000\n"
            "+++ left/config.ini\t2024-01-02 10:00:00.000000000 +0000\n"
            "@@ -2,2 +2,2 @@\n"
            " [core]\n"
            "-debug = false\n"
            "+debug = true\n"
        )
        (file,) = parse_diff(text)

        self.assertEqual(file.path, "left/config.ini")
        self.assertEqual(file.status, "modified")
        self.assertEqual(file.lines()[1].old_number, 3)

    def test_missing_counts_default_to_one(self) -> None:
        (file,) = parse_diff("--- a/x\n+++ b/x\n@@ -3 +3 @@\n-old\n+new\n")
        hunk = file.hunks[0]

        self.assertEqual((hunk.old_start, hunk.old_count, hunk.new_start, hunk.new_count), (3, 1, 3, 1))
        self.assertEqual([line.kind for line in hunk.lines], ["removed", "added"])

    def test_section_heading_is_kept(self) -> None:
        text = "--- a/m.py\n+++ b/m.py\n@@ -10,2 +10,2 @@ def handler(event):\n     x = 1\n-    y = 2\n+    y = 3\n"
        (file,) = parse_diff(text)
        hunk = file.hunks[0]

        self.assertEqual(hunk.section, "def handler(event):")
        self.assertEqual(hunk.header, "@@ -10,2 +10,2 @@ def handler(event):")
        self.assertEqual(hunk.lines[0].old_number, 10)

    def test_removed_line_that_looks_like_a_header(self) -> None:
        text = "--- a/notes.md\n+++ b/notes.md\n@@ -1,2 +1,2 @@\n--- comment\n+++ plus\n tail\n"
        (file,) = parse_diff(text)

        self.assertEqual(
            [(line.kind, line.text) for line in file.lines()],
            [("removed", "-- comment"), ("added", "++ plus"), ("context", "tail")],
        )

    def test_no_newline_marker_is_skipped(self) -> None:
        text = (
            "--- a/x\n+++ b/x\n@@ -1 +1 @@\n"
            "-old\n"
            "\\ No newline at end of file\n"
            "+new\n"
            "\\ No newline at end of file\n"
        )
        (file,) = parse_diff(text)

        self.assertEqual([line.text for line in file.lines()], ["old", "new"])

    def test_truncated_hunk_ends_at_next_file(self) -> None:
        text = (
            "--- a/x\n+++ b/x\n@@ -1,5 +1,5 @@\n a\n b\n"
            "diff --git a/y b/y\n--- a/y\n+++ b/y\n@@ -1 +1 @@\n-1\n+2\n"
        )
        files = parse_diff(text)

        self.assertEqual([file.path for file in files], ["x", "y"])
        self.assertEqual(len(files[0].lines()), 2)
        self.assertEqual(files[0].hunks[0].old_count, 5)

    def test_truncated_hunk_at_end_of_input(self) -> None:
        (file,) = parse_diff("--- a/x\n+++ b/x\n@@ -1,5 +1,5 @@\n a\n b")
        self.assertEqual([line.text for line in file.lines()], ["a", "b"])

    def test_crlf_line_endings(self) -> None:
        text = "--- a/x\r\n+++ b/x\r\n@@ -1 +1 @@\r\n-old\r\n+new\r\n"
        (file,) = parse_diff(text)
        self.assertEqual([line.text for line in file.lines()], ["old", "new"])

    def test_empty_input(self) -> None:
        self.assertEqual(parse_diff(""), [])

    def test_malformed_hunk_header(self) -> None:
        with self.assertRaises(ParseError) as ctx:
            parse_diff("--- a/x\n+++ b/x\n@@ -a,b +1,2 @@\n x\n")

        self.assertEqual(ctx.exception.line_number, 3)
        self.assertIn("@@ -a,b +1,2 @@", str(ctx.exception))

    def test_hunk_without_file_header(self) -> None:
        with self.assertRaises(ParseError) as ctx:
            parse_diff("@@ -1 +1 @@\n-a\n+b\n")
        self.assertEqual(ctx.exception.line_number, 1)

    def test_header_missing_closing_marker(self) -> None:
        with self.assertRaises(ParseError):
            parse_diff("--- a/x\n+++ b/x\n@@ -1 +1\n-a\n+b\n")


if __name__ == "__main__":
    unittest.main()
