"""Output path helpers shared by the pipelines."""

from __future__ import annotations

import logging
from pathlib import Path

from shared.errors import IOFailure, OutputDirectoryNotFound

logger = logging.getLogger(__name__)


def ensure_directory(path: Path, create: bool) -> bool:
    """Make sure *path* is a usable output directory.

    Returns True when the directory was created by this call.

    Raises:
        OutputDirectoryNotFound: missing and *create* is not set.
        IOFailure: *path* is a file, or creating it failed.
    """
    if path.is_dir():
        return False
    if path.exists():
        raise IOFailure(path, "output path is not a directory")
    if not create:
        raise OutputDirectoryNotFound(path)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise IOFailure(path, f"failed to create the output directory: {exc}") from exc
    logger.info("Created output directory '%s'", path)
    return True
