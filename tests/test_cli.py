"""Tests for the command-line layer."""

import pytest
from click.testing import CliRunner

from kvlet.cli import cli, format_commit, format_status
from kvlet.models import Commit
from kvlet.repository import StatusReport


@pytest.fixture
def run(tmp_path):
    runner = CliRunner()

    def _run(*args: str):
        return runner.invoke(cli, ["-C", str(tmp_path), *args], obj={})

    return _run


class TestFormatting:
    def test_format_commit(self):
        text = format_commit(
            Commit(id="a" * 40, message="hello", timestamp=0.0)
        )
        lines = text.splitlines()
        assert lines[0] == "==="
        assert lines[1] == "commit " + "a" * 40
        assert lines[2].startswith("Date: ")
        assert lines[3] == "hello"

    def test_format_merge_commit(self):
        text = format_commit(
            Commit(
                id="m" * 40,
                message="Merged b into master",
                timestamp=0.0,
                parents=("1234567890", "abcdefghij"),
            )
        )
        assert "Merge: 1234567 abcdefg" in text.splitlines()

    def test_format_status(self):
        report = StatusReport(
            branches=("master", "other"),
            active="master",
            staged=("a.txt",),
            removed=(),
            modified=("m.txt (modified)",),
            untracked=("u.txt",),
        )
        assert format_status(report) == (
            "=== Branches ===\n*master\nother\n\n"
            "=== Staged Files ===\na.txt\n\n"
            "=== Removed Files ===\n\n"
            "=== Modifications Not Staged For Commit ===\nm.txt (modified)\n\n"
            "=== Untracked Files ===\nu.txt\n"
        )


class TestCommands:
    def test_not_initialized(self, run):
        result = run("log")
        assert result.exit_code == 1
        assert "Not in an initialized kvlet directory." in result.output

    def test_init_twice(self, run):
        assert run("init").exit_code == 0
        result = run("init")
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_commit_and_log(self, run, tmp_path):
        run("init")
        (tmp_path / "f.txt").write_text("hello")
        assert run("add", "f.txt").exit_code == 0
        assert run("commit", "c1").exit_code == 0
        result = run("log")
        assert result.exit_code == 0
        assert result.output.count("===") == 2
        assert "c1" in result.output
        assert "initial commit" in result.output

    def test_commit_without_message(self, run, tmp_path):
        run("init")
        (tmp_path / "f.txt").write_text("hello")
        run("add", "f.txt")
        result = run("commit")
        assert result.exit_code == 1
        assert "Please enter a commit message." in result.output

    def test_rm_nothing(self, run, tmp_path):
        run("init")
        (tmp_path / "ghost.txt").write_text("boo")
        result = run("rm", "ghost.txt")
        assert result.exit_code == 1
        assert result.output.strip() == "No reason to remove the file."

    def test_find(self, run, tmp_path):
        run("init")
        result = run("find", "initial commit")
        assert result.exit_code == 0
        assert len(result.output.split()) == 1
        missing = run("find", "nope")
        assert missing.exit_code == 1
        assert "Found no commit with that message." in missing.output

    def test_status(self, run, tmp_path):
        run("init")
        (tmp_path / "u.txt").write_text("u")
        result = run("status")
        assert result.exit_code == 0
        assert "=== Branches ===\n*master\n" in result.output
        assert "=== Untracked Files ===\nu.txt\n" in result.output

    def test_checkout_file_forms(self, run, tmp_path):
        run("init")
        f = tmp_path / "f.txt"
        f.write_text("one")
        run("add", "f.txt")
        run("commit", "c1")
        c1 = run("find", "c1").output.strip()
        f.write_text("two")
        run("add", "f.txt")
        run("commit", "c2")

        f.write_text("scratch")
        assert run("checkout", "--", "f.txt").exit_code == 0
        assert f.read_text() == "two"

        assert run("checkout", c1[:8], "--", "f.txt").exit_code == 0
        assert f.read_text() == "one"

    def test_checkout_branch_form(self, run, tmp_path):
        run("init")
        run("branch", "other")
        assert run("checkout", "other").exit_code == 0
        result = run("status")
        assert "*other" in result.output

    def test_checkout_bad_operands(self, run):
        run("init")
        result = run("checkout", "a", "b")
        assert result.exit_code != 0
        assert "Incorrect operands." in result.output

    def test_merge_conflict_reported(self, run, tmp_path):
        f = tmp_path / "f.txt"
        run("init")
        f.write_text("hello\n")
        run("add", "f.txt")
        run("commit", "c1")
        run("branch", "b")
        f.write_text("X\n")
        run("add", "f.txt")
        run("commit", "X")
        run("checkout", "b")
        f.write_text("Y\n")
        run("add", "f.txt")
        run("commit", "Y")

        result = run("merge", "master")

        assert result.exit_code == 0
        assert "Encountered a merge conflict." in result.output
        assert f.read_text() == "<<<<<<< HEAD\nY\n=======\nX\n>>>>>>>\n"
        log = run("log").output
        assert "Merged master into b" in log
        assert "Merge: " in log

    def test_branch_errors(self, run):
        run("init")
        run("branch", "dev")
        assert "already exists" in run("branch", "dev").output
        assert "Cannot remove the current branch." in run("rm-branch", "master").output
        assert run("rm-branch", "dev").exit_code == 0
        assert "does not exist" in run("rm-branch", "dev").output

    def test_reset(self, run, tmp_path):
        run("init")
        root = run("find", "initial commit").output.strip()
        (tmp_path / "f.txt").write_text("x")
        run("add", "f.txt")
        run("commit", "c1")
        assert run("reset", root).exit_code == 0
        assert not (tmp_path / "f.txt").exists()
        assert "c1" not in run("log").output
