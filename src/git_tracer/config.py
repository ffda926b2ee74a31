"""Loading of the ``init.conf`` file.

The file uses shell-style ``KEY=VALUE`` lines (quotes and comments allowed),
parsed with python-dotenv. A missing file means every default applies.
"""

from __future__ import annotations

import dataclasses
import shlex
from pathlib import Path

from dotenv import dotenv_values

from .errors import ConfigError

DEFAULT_CONFIG_FILE = "init.conf"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclasses.dataclass(frozen=True)
class TracerConfig:
    default_username: str = ""
    default_source_path: str = "."
    include_patterns: tuple[str, ...] = ("*",)
    exclude_patterns: tuple[str, ...] = ()
    max_parallel_jobs: int = 5
    git_log_options: tuple[str, ...] = ()
    output_dir: Path = Path("output")
    show_progress: bool = True
    verbose: bool = False
    task_timeout: float | None = None


def _parse_bool(key: str, raw: str) -> bool:
    v = raw.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise ConfigError(f"{key} must be true or false, got {raw!r}")


def _parse_patterns(raw: str) -> tuple[str, ...]:
    return tuple(p for p in raw.split() if p)


def load_config(config_path: Path) -> TracerConfig:
    """Read ``config_path`` into a :class:`TracerConfig`.

    A relative ``OUTPUT_DIR`` is anchored at the config file's directory.
    """
    config_path = Path(config_path)
    base_dir = config_path.resolve().parent
    defaults = TracerConfig(output_dir=base_dir / "output")
    if not config_path.exists():
        return defaults

    values = {k: v for k, v in dotenv_values(config_path).items() if v is not None}
    changes: dict[str, object] = {}

    if "DEFAULT_USERNAME" in values:
        changes["default_username"] = values["DEFAULT_USERNAME"].strip()
    if values.get("DEFAULT_SOURCE_PATH", "").strip():
        changes["default_source_path"] = values["DEFAULT_SOURCE_PATH"].strip()
    if "REPO_INCLUDE_PATTERNS" in values:
        changes["include_patterns"] = _parse_patterns(values["REPO_INCLUDE_PATTERNS"]) or ("*",)
    if "REPO_EXCLUDE_PATTERNS" in values:
        changes["exclude_patterns"] = _parse_patterns(values["REPO_EXCLUDE_PATTERNS"])

    if values.get("MAX_PARALLEL_JOBS", "").strip():
        raw = values["MAX_PARALLEL_JOBS"]
        try:
            jobs = int(raw)
        except ValueError:
            raise ConfigError(f"MAX_PARALLEL_JOBS must be an integer, got {raw!r}") from None
        if jobs < 1:
            raise ConfigError(f"MAX_PARALLEL_JOBS must be >= 1, got {jobs}")
        changes["max_parallel_jobs"] = jobs

    if "GIT_LOG_OPTIONS" in values:
        try:
            changes["git_log_options"] = tuple(shlex.split(values["GIT_LOG_OPTIONS"]))
        except ValueError as exc:
            raise ConfigError(f"GIT_LOG_OPTIONS is not valid shell syntax: {exc}") from None

    if values.get("OUTPUT_DIR", "").strip():
        out = Path(values["OUTPUT_DIR"].strip()).expanduser()
        changes["output_dir"] = out if out.is_absolute() else base_dir / out

    if "SHOW_PROGRESS" in values:
        changes["show_progress"] = _parse_bool("SHOW_PROGRESS", values["SHOW_PROGRESS"])
    if "VERBOSE" in values:
        changes["verbose"] = _parse_bool("VERBOSE", values["VERBOSE"])

    if values.get("TASK_TIMEOUT", "").strip():
        raw = values["TASK_TIMEOUT"]
        try:
            timeout = float(raw)
        except ValueError:
            raise ConfigError(f"TASK_TIMEOUT must be a number of seconds, got {raw!r}") from None
        if timeout <= 0:
            raise ConfigError(f"TASK_TIMEOUT must be positive, got {raw!r}")
        changes["task_timeout"] = timeout

    return dataclasses.replace(defaults, **changes)
