"""Publish the report without ever leaving a partial file behind."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .logger import get_logger

logger = get_logger(__name__)


@contextmanager
def staging_area(output_dir: Path) -> Iterator[Path]:
    """Scratch directory next to the final report, removed on every exit path.

    It lives inside ``output_dir`` so the final ``os.replace`` is a same-filesystem
    rename.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    with tempfile.TemporaryDirectory(prefix=".git-tracer-", dir=output_dir) as tmp:
        yield Path(tmp)


def write_report(document: str, output_path: Path) -> Path:
    output_path = Path(output_path)
    with staging_area(output_path.parent) as staging:
        staged = staging / output_path.name
        staged.write_text(document, encoding="utf-8")
        os.replace(staged, output_path)
    logger.debug("Report written to %s", output_path)
    return output_path
