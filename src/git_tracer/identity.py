from __future__ import annotations

from pathlib import Path

from .errors import UsernameResolutionError
from .git.runner import run_git


def git_config_value(key: str, cwd: Path | None = None) -> str:
    code, out, _ = run_git(["config", "--get", key], cwd=cwd or Path.cwd())
    if code != 0:
        return ""
    return out.strip()


def resolve_username(explicit: str | None = None, default: str | None = None) -> str:
    """First non-empty of: --username, DEFAULT_USERNAME, git user.name, git user.email."""
    for candidate in (explicit, default):
        if candidate and candidate.strip():
            return candidate.strip()
    for key in ("user.name", "user.email"):
        value = git_config_value(key)
        if value:
            return value
    raise UsernameResolutionError()
