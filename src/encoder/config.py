"""Encode pipeline configuration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from shared.errors import InvalidGroupSize, InvalidRange
from shared.volume_planner import PARTITION_MODES, PartitionMode

EmptyChapterPolicy = Literal["error", "keep", "skip"]
EMPTY_CHAPTER_POLICIES = ("error", "keep", "skip")


@dataclass
class EncodeConfig:
    """Controls how chapter directories become volumes.

    ``output`` is a directory for "compile" and "individual", and the volume
    file for "single" (an existing directory there receives
    ``<input-name>.cbz``). Without it, volumes are written inside the input
    directory.

    ``empty_chapters`` decides what a chapter without pages does: "error"
    fails the run, "keep" leaves it in its volume with 0 pages, "skip"
    drops it before volumes are planned.
    """

    mode: PartitionMode = "compile"
    chapters_per_volume: int = 10  # "compile" only
    output: str | Path | None = None
    create_output_dir: bool = False
    overwrite: bool = False
    skip_existing: bool = False  # leave existing volume files untouched
    chapters_suffix: bool = False  # "Volume-1 (c01-c10).cbz"
    append_pages_count: bool = False  # "Volume-1 (42 pages).cbz"
    dirs_prefix: str | None = None
    start_chapter: int | None = None  # 1-indexed, inclusive
    end_chapter: int | None = None  # 1-indexed, inclusive
    root_chapter: bool = False  # input holds the images itself
    container_chapters: bool = False  # .zip/.cbz/.pdf files in the input are chapters too
    extended_image_formats: bool = False
    disable_nat_sort: bool = False
    compress_losslessly: bool = False
    verify_images: bool = True  # parse image headers, skip corrupt files
    empty_chapters: EmptyChapterPolicy = "error"
    max_workers: int = 1  # volumes built in parallel

    def __post_init__(self):
        if self.mode not in PARTITION_MODES:
            raise ValueError(f"Unknown mode: {self.mode!r}. Choose from: {list(PARTITION_MODES)}")
        if self.mode == "compile" and self.chapters_per_volume < 1:
            raise InvalidGroupSize(
                f"There must be at least 1 chapter per volume, got {self.chapters_per_volume}"
            )
        if self.start_chapter is not None and self.start_chapter < 1:
            raise InvalidRange(f"Start chapter must be 1 or higher, got {self.start_chapter}")
        if self.end_chapter is not None and self.end_chapter < 1:
            raise InvalidRange(f"End chapter must be 1 or higher, got {self.end_chapter}")
        if (
            self.start_chapter is not None
            and self.end_chapter is not None
            and self.start_chapter > self.end_chapter
        ):
            raise InvalidRange("Start chapter cannot be higher than the end chapter")
        if self.empty_chapters not in EMPTY_CHAPTER_POLICIES:
            raise ValueError(
                f"Unknown empty chapter policy: {self.empty_chapters!r}."
                f" Choose from: {list(EMPTY_CHAPTER_POLICIES)}"
            )
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")
        if self.output is not None:
            self.output = Path(self.output)
