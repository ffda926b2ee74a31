"""Error taxonomy for git-tracer.

Every error a user can act on derives from :class:`TracerError`; the CLI
turns those into a message on stderr and exit code 1. ``QueryError`` is the
one per-repository error and never escapes the scan coordinator.
"""

from __future__ import annotations

from pathlib import Path


class TracerError(Exception):
    exit_code = 1


class InvalidRootError(TracerError):
    def __init__(self, root: Path) -> None:
        super().__init__(f"Source path does not exist or is not a directory: {root}")
        self.root = root


class UsernameResolutionError(TracerError):
    def __init__(self) -> None:
        super().__init__(
            "Could not determine git username. Please provide --username or configure git."
        )


class InvalidQuarterError(TracerError):
    def __init__(self, value: object) -> None:
        super().__init__(f"qNumber must be an integer between -4 and 4, got {value!r}")
        self.value = value


class ToolMissingError(TracerError):
    def __init__(self, tool: str = "git") -> None:
        super().__init__(f"{tool} command not found. Please install {tool}.")
        self.tool = tool


class NoRepositoriesFoundError(TracerError):
    def __init__(self, root: Path) -> None:
        super().__init__(f"No git repositories found in: {root}")
        self.root = root


class ConfigError(TracerError):
    pass


class QueryError(TracerError):
    def __init__(self, repo_path: Path, returncode: int, stderr: str = "") -> None:
        detail = stderr.strip().splitlines()[-1] if stderr.strip() else "no error output"
        super().__init__(f"git log failed in {repo_path} (exit {returncode}): {detail}")
        self.repo_path = repo_path
        self.returncode = returncode
        self.stderr = stderr
