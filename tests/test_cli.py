"""Tests for the CLI module."""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from unittest.mock import patch

import click
import pytest
from click.testing import CliRunner

from git_tracer.cli import _resolve_dates, main
from git_tracer.errors import UsernameResolutionError

from .helpers import commit, init_repo, requires_git


def _invoke(args: list[str], tmp_path: Path):
    runner = CliRunner()
    return runner.invoke(main, ["-c", str(tmp_path / "init.conf"), *args])


def test_resolve_dates_explicit_range():
    """Explicit start and end dates should be used as given."""
    start, end, warning = _resolve_dates(datetime(2025, 1, 5), datetime(2025, 2, 6), None)
    assert (start, end, warning) == (date(2025, 1, 5), date(2025, 2, 6), None)


def test_resolve_dates_rejects_inverted_range():
    """A start date after the end date should be a usage error."""
    with pytest.raises(click.BadParameter):
        _resolve_dates(datetime(2025, 3, 1), datetime(2025, 1, 1), None)


def test_resolve_dates_uses_quarter_when_a_date_is_missing():
    """A missing date should fall back to the quarter range."""
    start, end, warning = _resolve_dates(datetime(2025, 3, 1), None, 2, today=date(2026, 1, 19))
    assert (start, end) == (date(2025, 4, 1), date(2025, 6, 30))
    assert warning is not None


def test_main_help():
    """Both -h and --help should print usage and exit 0."""
    runner = CliRunner()
    for flag in ("--help", "-h"):
        result = runner.invoke(main, [flag])
        assert result.exit_code == 0
        assert "--qNumber" in result.output
        assert "--sourcePath" in result.output


def test_main_version():
    """--version should print the package version."""
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "1.0.0" in result.output


@pytest.mark.parametrize("q", ["5", "-7", "two"])
def test_invalid_q_number_exits_1(tmp_path, q):
    """A bad -q value should exit 1 before git is checked."""
    with patch("git_tracer.cli.ensure_git_available") as ensure_git:
        result = _invoke(["-q", q, "-u", "alice"], tmp_path)
    assert result.exit_code == 1
    ensure_git.assert_not_called()


def test_missing_git_exits_1(tmp_path):
    """A missing git executable should exit 1."""
    with patch("git_tracer.git.runner.shutil.which", return_value=None):
        result = _invoke(["-u", "alice", "-p", str(tmp_path)], tmp_path)
    assert result.exit_code == 1


def test_unresolvable_username_exits_1(tmp_path):
    """An unresolvable username should exit 1 before discovery."""
    with patch("git_tracer.cli.ensure_git_available"), patch(
        "git_tracer.cli.resolve_username", side_effect=UsernameResolutionError()
    ), patch("git_tracer.cli.discover") as discover:
        result = _invoke(["-p", str(tmp_path)], tmp_path)
    assert result.exit_code == 1
    discover.assert_not_called()


def test_invalid_source_path_exits_1(tmp_path):
    """A nonexistent source path should exit 1 and write nothing."""
    with patch("git_tracer.cli.ensure_git_available"):
        result = _invoke(["-u", "alice", "-p", str(tmp_path / "nope")], tmp_path)
    assert result.exit_code == 1
    assert not (tmp_path / "output").exists()


def test_no_repositories_exits_1(tmp_path):
    """A source path without repositories should exit 1 and write nothing."""
    empty = tmp_path / "empty"
    empty.mkdir()
    with patch("git_tracer.cli.ensure_git_available"):
        result = _invoke(["-u", "alice", "-p", str(empty)], tmp_path)
    assert result.exit_code == 1
    assert not (tmp_path / "output").exists()


def test_invalid_config_exits_1(tmp_path):
    """An invalid config value should exit 1."""
    (tmp_path / "init.conf").write_text("MAX_PARALLEL_JOBS=0\n")
    result = _invoke(["-u", "alice"], tmp_path)
    assert result.exit_code == 1


def test_malformed_date_is_a_usage_error(tmp_path):
    """A malformed date should be a click usage error."""
    result = _invoke(["-s", "2025/01/01", "-e", "2025-02-01"], tmp_path)
    assert result.exit_code == 2


def test_declining_confirmation_aborts(tmp_path):
    """Answering no at the prompt should abort before scanning."""
    (tmp_path / "src" / "repo" / ".git").mkdir(parents=True)
    with patch("git_tracer.cli.ensure_git_available"), patch("git_tracer.cli.asyncio.run") as mock_run:
        result = CliRunner().invoke(
            main,
            ["-c", str(tmp_path / "init.conf"), "-u", "alice", "-p", str(tmp_path / "src"), "-q", "-1"],
            input="n\n",
        )
    assert result.exit_code == 1
    mock_run.assert_not_called()


@requires_git
def test_main_end_to_end(tmp_path):
    """main() should scan real repos and write the report."""
    src = tmp_path / "src"
    alpha = init_repo(src / "alpha")
    commit(alpha, "Add login form", when="2025-02-03T10:11:12+00:00")
    commit(alpha, "Fix typo", when="2025-02-04T08:00:00+00:00")
    quiet = init_repo(src / "quiet")
    commit(quiet, "Old work", when="2023-01-01T12:00:00+00:00")
    skipped = init_repo(src / "legacy-tool")
    commit(skipped, "Should be excluded")

    (tmp_path / "init.conf").write_text(
        'REPO_EXCLUDE_PATTERNS="legacy-*"\n'
        "MAX_PARALLEL_JOBS=2\n"
        "OUTPUT_DIR=reports\n"
    )

    result = _invoke(
        ["-u", "alice", "-s", "2025-01-01", "-e", "2025-03-31", "-p", str(src), "-y"],
        tmp_path,
    )

    assert result.exit_code == 0, result.output
    report = tmp_path / "reports" / "2025-01-01x2025-03-31.alice.md"
    document = report.read_text(encoding="utf-8")
    assert "**Total Commits**: 2\n" in document
    assert "**Repositories Scanned**: 2\n" in document
    assert "**Repositories with Commits**: 1\n" in document
    assert "## alpha\n" in document
    assert "| 2025-02-03 10:11:12 | Add login form" in document
    assert "quiet" not in document
    assert "legacy-tool" not in document
    assert "Scanned: alpha" in result.output
