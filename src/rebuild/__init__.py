from .config import RebuildConfig
from .pipeline import (
    STAGING_PREFIX,
    BatchRebuildResult,
    RebuildPipeline,
    RebuildResult,
    RebuildState,
    find_comics,
    rebuild,
    rebuild_directory,
    staging_area,
)

__all__ = [
    "rebuild",
    "rebuild_directory",
    "find_comics",
    "staging_area",
    "RebuildConfig",
    "RebuildPipeline",
    "RebuildResult",
    "RebuildState",
    "BatchRebuildResult",
    "STAGING_PREFIX",
]
