from __future__ import annotations

import hashlib

import pytest

from ollama_code.errors import (
    ContentNotFoundError,
    ExecutionFailedError,
    IgnoredPathError,
    InvalidRangeError,
    MissingArgumentsError,
    NotFoundError,
    PathEscapeError,
)
from ollama_code.tools.builtin_tools.file_edit import EditFileTool
from ollama_code.tools.builtin_tools.file_read import ReadFileTool
from ollama_code.tools.builtin_tools.file_write import WriteFileTool
from ollama_code.tools.builtin_tools.listdir import ListDirTool


def digest(path):
    return hashlib.sha256(path.read_bytes()).hexdigest()


class TestPathContainment:

    @pytest.mark.parametrize(
        "tool, args",
        [
            (ReadFileTool(), {"path": "../../etc/passwd"}),
            (WriteFileTool(), {"path": "../../etc/passwd", "content": "x"}),
            (ListDirTool(), {"path": "../../etc/passwd"}),
            (EditFileTool(), {"path": "../../etc/passwd", "oldContent": "a", "newContent": "b"}),
        ],
    )
    def test_parent_traversal_is_refused(self, tool_ctx, tool, args):
        with pytest.raises(PathEscapeError):
            tool.execute(tool_ctx, args)

    @pytest.mark.parametrize("tool", [ReadFileTool(), WriteFileTool(), ListDirTool()])
    def test_nul_byte_in_path_is_refused(self, tool_ctx, tool):
        with pytest.raises(PathEscapeError):
            tool.execute(tool_ctx, {"path": "a\x00b", "content": "x"})

    def test_absolute_path_outside_is_refused(self, tool_ctx):
        with pytest.raises(PathEscapeError):
            ReadFileTool().execute(tool_ctx, {"path": "/etc/hostname"})

    def test_symlink_pointing_outside_is_refused(self, tool_ctx, tmp_path):
        outside = tmp_path / "secret.txt"
        outside.write_text("s", encoding="utf-8")
        (tool_ctx.cwd / "link.txt").symlink_to(outside)
        with pytest.raises(PathEscapeError):
            ReadFileTool().execute(tool_ctx, {"path": "link.txt"})


class TestReadFile:

    def test_reads_text(self, tool_ctx):
        (tool_ctx.cwd / "a.txt").write_text("hello\nworld\n", encoding="utf-8")
        assert ReadFileTool().execute(tool_ctx, {"path": "a.txt"}) == "hello\nworld\n"

    def test_missing_file(self, tool_ctx):
        with pytest.raises(NotFoundError):
            ReadFileTool().execute(tool_ctx, {"path": "nope.txt"})

    def test_directory_is_not_a_file(self, tool_ctx):
        (tool_ctx.cwd / "src").mkdir()
        with pytest.raises(NotFoundError):
            ReadFileTool().execute(tool_ctx, {"path": "src"})

    def test_ignored_path(self, tool_ctx):
        pkg = tool_ctx.cwd / "node_modules" / "lib"
        pkg.mkdir(parents=True)
        (pkg / "index.js").write_text("x", encoding="utf-8")
        with pytest.raises(IgnoredPathError):
            ReadFileTool().execute(tool_ctx, {"path": "node_modules/lib/index.js"})

    def test_missing_path_argument(self, tool_ctx):
        with pytest.raises(MissingArgumentsError):
            ReadFileTool().execute(tool_ctx, {})


class TestWriteFile:

    def test_creates_parents(self, tool_ctx):
        msg = WriteFileTool().execute(tool_ctx, {"path": "a/b/c.txt", "content": "x"})
        assert (tool_ctx.cwd / "a/b/c.txt").read_text(encoding="utf-8") == "x"
        assert msg == "File a/b/c.txt created successfully"

    def test_overwrite_and_append(self, tool_ctx):
        tool = WriteFileTool()
        tool.execute(tool_ctx, {"path": "log.txt", "content": "one\n"})
        tool.execute(tool_ctx, {"path": "log.txt", "content": "two\n"})
        msg = tool.execute(tool_ctx, {"path": "log.txt", "content": "three\n", "append": True})
        assert (tool_ctx.cwd / "log.txt").read_text(encoding="utf-8") == "two\nthree\n"
        assert msg == "Content appended to log.txt"

    def test_empty_content_is_allowed(self, tool_ctx):
        WriteFileTool().execute(tool_ctx, {"path": "empty.txt", "content": ""})
        assert (tool_ctx.cwd / "empty.txt").read_text(encoding="utf-8") == ""

    def test_missing_content(self, tool_ctx):
        with pytest.raises(MissingArgumentsError):
            WriteFileTool().execute(tool_ctx, {"path": "a.txt"})

    def test_ignored_target(self, tool_ctx):
        with pytest.raises(IgnoredPathError):
            WriteFileTool().execute(tool_ctx, {"path": ".git/config", "content": "x"})

    def test_unencodable_content(self, tool_ctx):
        with pytest.raises(ExecutionFailedError):
            WriteFileTool().execute(tool_ctx, {"path": "a.txt", "content": "bad \ud800"})


class TestEditFile:

    def test_ignore_rules_do_not_apply(self, tool_ctx):
        for rel in ("node_modules/lib/index.js", ".git/description"):
            f = tool_ctx.cwd / rel
            f.parent.mkdir(parents=True, exist_ok=True)
            f.write_text("old\n", encoding="utf-8")
            with pytest.raises(IgnoredPathError):
                ReadFileTool().execute(tool_ctx, {"path": rel})
            with pytest.raises(IgnoredPathError):
                WriteFileTool().execute(tool_ctx, {"path": rel, "content": "x"})
            EditFileTool().execute(tool_ctx, {"path": rel, "oldContent": "old", "newContent": "new"})
            assert f.read_text(encoding="utf-8") == "new\n"

    def test_replaces_first_occurrence(self, tool_ctx):
        f = tool_ctx.cwd / "a.py"
        f.write_text("x = 1\nx = 1\n", encoding="utf-8")
        msg = EditFileTool().execute(tool_ctx, {"path": "a.py", "oldContent": "x = 1", "newContent": "x = 2"})
        assert f.read_text(encoding="utf-8") == "x = 2\nx = 1\n"
        assert msg == "File a.py updated successfully"

    def test_missing_old_content_leaves_file_untouched(self, tool_ctx):
        f = tool_ctx.cwd / "a.py"
        f.write_text("print('hi')\n", encoding="utf-8")
        before = digest(f)
        with pytest.raises(ContentNotFoundError):
            EditFileTool().execute(tool_ctx, {"path": "a.py", "oldContent": "absent", "newContent": "x"})
        assert digest(f) == before

    def test_replace_with_empty_text_deletes(self, tool_ctx):
        f = tool_ctx.cwd / "a.txt"
        f.write_text("keep DROP keep", encoding="utf-8")
        EditFileTool().execute(tool_ctx, {"path": "a.txt", "oldContent": "DROP ", "newContent": ""})
        assert f.read_text(encoding="utf-8") == "keep keep"

    def test_line_range_is_zero_based_inclusive(self, tool_ctx):
        f = tool_ctx.cwd / "a.txt"
        f.write_text("a\nb\nc\nd", encoding="utf-8")
        EditFileTool().execute(tool_ctx, {"path": "a.txt", "startLine": 1, "endLine": 2, "newContent": "B\nC\nX"})
        assert f.read_text(encoding="utf-8") == "a\nB\nC\nX\nd"

    def test_line_range_without_content_deletes_lines(self, tool_ctx):
        f = tool_ctx.cwd / "a.txt"
        f.write_text("a\nb\nc", encoding="utf-8")
        EditFileTool().execute(tool_ctx, {"path": "a.txt", "startLine": 0, "endLine": 0})
        assert f.read_text(encoding="utf-8") == "b\nc"

    @pytest.mark.parametrize("start, end", [(1, 0), (-1, 0), (0, 3), (5, 6)])
    def test_invalid_range(self, tool_ctx, start, end):
        f = tool_ctx.cwd / "a.txt"
        f.write_text("a\nb\nc", encoding="utf-8")
        before = digest(f)
        with pytest.raises(InvalidRangeError):
            EditFileTool().execute(tool_ctx, {"path": "a.txt", "startLine": start, "endLine": end, "newContent": "x"})
        assert digest(f) == before

    def test_needs_exactly_one_mode(self, tool_ctx):
        (tool_ctx.cwd / "a.txt").write_text("a", encoding="utf-8")
        tool = EditFileTool()
        with pytest.raises(MissingArgumentsError):
            tool.execute(tool_ctx, {"path": "a.txt", "newContent": "x"})
        with pytest.raises(MissingArgumentsError):
            tool.execute(tool_ctx, {"path": "a.txt", "oldContent": "a", "newContent": "b", "startLine": 0, "endLine": 0})

    def test_missing_file(self, tool_ctx):
        with pytest.raises(NotFoundError):
            EditFileTool().execute(tool_ctx, {"path": "nope.txt", "oldContent": "a", "newContent": "b"})


class TestListDir:

    @pytest.fixture
    def tree(self, tool_ctx):
        root = tool_ctx.cwd
        (root / "src" / "pkg").mkdir(parents=True)
        (root / "src" / "pkg" / "mod.py").write_text("", encoding="utf-8")
        (root / "src" / "main.py").write_text("", encoding="utf-8")
        (root / "README.md").write_text("", encoding="utf-8")
        (root / ".env").write_text("", encoding="utf-8")
        (root / "node_modules").mkdir()
        (root / "node_modules" / "x.js").write_text("", encoding="utf-8")
        return root

    def test_flat_listing_sorted_without_hidden_or_ignored(self, tool_ctx, tree):
        entries = ListDirTool().execute(tool_ctx, {})
        assert [(e["name"], e["type"]) for e in entries] == [("README.md", "file"), ("src", "directory")]

    def test_show_hidden(self, tool_ctx, tree):
        names = [e["name"] for e in ListDirTool().execute(tool_ctx, {"showHidden": True})]
        assert ".env" in names

    def test_recursive_is_preorder_with_relative_paths(self, tool_ctx, tree):
        entries = ListDirTool().execute(tool_ctx, {"recursive": True})
        assert [e["path"] for e in entries] == [
            "README.md",
            "src",
            "src/main.py",
            "src/pkg",
            "src/pkg/mod.py",
        ]

    def test_subdirectory_paths_are_relative_to_working_dir(self, tool_ctx, tree):
        entries = ListDirTool().execute(tool_ctx, {"path": "src"})
        assert [e["path"] for e in entries] == ["src/main.py", "src/pkg"]
        assert entries[1]["isDirectory"] is True

    def test_not_a_directory(self, tool_ctx, tree):
        with pytest.raises(NotFoundError):
            ListDirTool().execute(tool_ctx, {"path": "README.md"})
        with pytest.raises(NotFoundError):
            ListDirTool().execute(tool_ctx, {"path": "missing"})
