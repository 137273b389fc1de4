"""Tests for store composition, agent tools and the CLI."""

from __future__ import annotations

import io
from pathlib import Path

import pytest
import yaml

from cortex.__main__ import main
from cortex.config import CortexConfig
from cortex.core import Cortex
from cortex.result import ErrorCode
from cortex.tools.memory_tools import get_memory_tools


@pytest.fixture
def cortex(tmp_path: Path) -> Cortex:
    return Cortex(tmp_path / "memory")


class TestCortex:
    def test_open_default_store(self, tmp_path: Path):
        result = Cortex.open(CortexConfig(stores={"default": tmp_path / "memory"}))
        assert result.ok
        assert result.value.root == tmp_path / "memory"

    def test_open_unknown_store(self, tmp_path: Path):
        result = Cortex.open(CortexConfig(stores={"default": tmp_path}), "work")
        assert result.error.code == ErrorCode.STORE_NOT_FOUND

    def test_initialize(self, cortex: Cortex, tmp_path: Path):
        result = cortex.initialize()
        assert result.ok
        assert (tmp_path / "memory" / "index.yaml").is_file()


class TestMemoryTools:
    @pytest.fixture
    def tools(self, cortex: Cortex) -> dict:
        return get_memory_tools(cortex)

    def test_tool_names(self, tools: dict):
        assert set(tools) == {
            "add_memory",
            "get_memory",
            "update_memory",
            "remove_memory",
            "move_memory",
            "list_memories",
            "prune_memories",
            "reindex_store",
            "set_category_description",
        }

    def test_add_and_get(self, tools: dict):
        assert tools["add_memory"]("human/prefs", "Likes tea", tags=["drink"]).startswith(
            "Memory stored"
        )
        data = yaml.safe_load(tools["get_memory"]("human/prefs"))
        assert data["content"] == "Likes tea"
        assert data["tags"] == ["drink"]
        assert data["source"] == "mcp"

    def test_errors_are_text(self, tools: dict):
        assert tools["get_memory"]("human/none").startswith("Error: MEMORY_NOT_FOUND")
        assert tools["add_memory"]("Bad Path", "x").startswith("Error: INVALID_PATH")
        assert tools["add_memory"]("a/b", "x", expires_at="someday").startswith("Error")

    def test_list_root(self, tools: dict):
        tools["add_memory"]("project/notes", "body")
        data = yaml.safe_load(tools["list_memories"]())
        assert data["category"] == "/"
        assert data["subcategories"] == [{"path": "project", "memory_count": 1}]

    def test_update_move_remove(self, tools: dict):
        tools["add_memory"]("a/note", "old")
        assert tools["update_memory"]("a/note", content="new").startswith("Memory updated")
        assert tools["move_memory"]("a/note", "b/note").startswith("Memory moved")
        assert yaml.safe_load(tools["get_memory"]("b/note"))["content"] == "new"
        assert tools["remove_memory"]("b/note").startswith("Memory removed")

    def test_prune_and_reindex(self, tools: dict):
        tools["add_memory"]("a/old", "stale", expires_at="2000-01-01T00:00:00Z")
        assert tools["prune_memories"]() == "Pruned:\n- a/old"
        assert tools["reindex_store"]() == "Reindex complete"

    def test_describe(self, tools: dict, cortex: Cortex):
        tools["add_memory"]("project/notes", "body")
        assert tools["set_category_description"]("project", "Work").startswith(
            "Description set"
        )
        assert tools["set_category_description"]("project", "").startswith(
            "Description cleared"
        )


class TestCli:
    @pytest.fixture
    def run(self, tmp_path: Path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path / "home"))
        monkeypatch.setenv("CORTEX_STORE_DIR", str(tmp_path / "memory"))
        monkeypatch.delenv("CORTEX_DEFAULT_STORE", raising=False)

        def _run(*argv: str) -> tuple[int, str, str]:
            code = main(list(argv))
            captured = capsys.readouterr()
            return code, captured.out, captured.err

        return _run

    def test_init(self, run, tmp_path: Path):
        code, out, _ = run("init")
        assert code == 0
        assert out.startswith("Initialized store at")
        assert (tmp_path / "memory" / "index.yaml").is_file()

    def test_add_show_list(self, run):
        assert run("add", "project/notes", "--content", "Remember", "--tags", "a, b")[0] == 0

        code, out, _ = run("show", "project/notes")
        assert code == 0
        data = yaml.safe_load(out)
        assert data["content"] == "Remember"
        assert data["tags"] == ["a", "b"]
        assert data["source"] == "cli"

        code, out, _ = run("list", "project")
        assert yaml.safe_load(out)["memories"] == [
            {"path": "project/notes", "token_estimate": 2}
        ]

    def test_error_exit(self, run):
        code, _, err = run("show", "project/none")
        assert code == 1
        assert "Error: MEMORY_NOT_FOUND" in err

    def test_invalid_path(self, run):
        code, _, err = run("remove", "Not Valid")
        assert code == 1
        assert "INVALID_PATH" in err

    def test_move_and_remove(self, run):
        run("add", "a/note", "--content", "body")
        code, out, _ = run("move", "a/note", "b/note")
        assert (code, out) == (0, "Moved memory a/note -> b/note\n")
        assert run("remove", "b/note")[0] == 0
        assert run("show", "b/note")[0] == 1

    def test_category_commands(self, run):
        assert run("category", "create", "project")[1] == "Created category project\n"
        assert run("category", "describe", "project", "Work")[0] == 0
        assert run("category", "delete", "project")[0] == 0
        assert run("category", "delete", "project")[0] == 1

    def test_reindex_reports_warnings(self, run, tmp_path: Path):
        (tmp_path / "memory").mkdir()
        (tmp_path / "memory" / "readme.md").write_text("hi")
        code, out, _ = run("reindex")
        assert code == 0
        assert "warning: skipped: readme.md is not inside a category" in out

    def test_unknown_store(self, run):
        code, _, err = run("--store", "work", "list")
        assert code == 1
        assert "STORE_NOT_FOUND" in err

    def test_update_tags_keeps_content_with_piped_stdin(self, run, monkeypatch):
        run("add", "a/note", "--content", "precious")
        monkeypatch.setattr("sys.stdin", io.StringIO(""))

        assert run("update", "a/note", "--tags", "x")[0] == 0
        data = yaml.safe_load(run("show", "a/note")[1])
        assert data["content"] == "precious"
        assert data["tags"] == ["x"]

    def test_update_content_from_stdin_on_request(self, run, monkeypatch):
        run("add", "a/note", "--content", "old")
        monkeypatch.setattr("sys.stdin", io.StringIO("from stdin"))

        assert run("update", "a/note", "--content", "-")[0] == 0
        assert yaml.safe_load(run("show", "a/note")[1])["content"] == "from stdin"

    def test_missing_content_file(self, run, tmp_path: Path):
        code, _, err = run("add", "a/note", "--file", str(tmp_path / "absent.txt"))
        assert code == 1
        assert "Error: Cannot read --file" in err
