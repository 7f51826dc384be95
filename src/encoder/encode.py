"""Encode a directory of chapters into cbz volumes."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from pathlib import Path

from shared.chapter_resolver import Chapter, SkippedPage, resolve_chapters, resolve_pages
from shared.errors import NoChaptersFound
from shared.paths import ensure_directory
from shared.volume_planner import plan_volumes

from .build import VolumeResult, build_volume
from .config import EncodeConfig

logger = logging.getLogger(__name__)


@dataclass
class EncodeResult:
    input_dir: Path
    output: Path  # output directory, or the volume file in "single" mode
    chapters_total: int
    chapters_selected: int
    volumes: list[VolumeResult] = field(default_factory=list)
    skipped_pages: dict[str, list[SkippedPage]] = field(default_factory=dict)
    empty_chapters: list[str] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def chapters_ignored(self) -> int:
        return self.chapters_total - self.chapters_selected

    @property
    def succeeded(self) -> list[VolumeResult]:
        return [v for v in self.volumes if v.ok]

    @property
    def failed(self) -> list[VolumeResult]:
        return [v for v in self.volumes if not v.ok]


def resolve_output(input_dir: Path, config: EncodeConfig) -> Path:
    """Where volumes go: a directory, or the volume file in "single" mode."""
    if config.mode == "single":
        if config.output is None:
            return input_dir / f"{input_dir.name}.cbz"
        if config.output.is_dir():
            return config.output / f"{input_dir.name}.cbz"
        ensure_directory(config.output.parent, config.create_output_dir)
        return config.output

    output_dir = config.output if config.output is not None else input_dir
    ensure_directory(output_dir, config.create_output_dir)
    return output_dir


def _attach_pages(
    chapters: list[Chapter], config: EncodeConfig
) -> tuple[list[Chapter], dict[str, list[SkippedPage]], list[str]]:
    resolved = []
    skipped: dict[str, list[SkippedPage]] = {}
    empty = []

    for chapter in chapters:
        listing = resolve_pages(
            chapter,
            extended_image_formats=config.extended_image_formats,
            natural_sort=not config.disable_nat_sort,
            verify_headers=config.verify_images,
            allow_empty=config.empty_chapters != "error",
        )
        if listing.skipped:
            skipped[chapter.name] = listing.skipped
            logger.warning(
                "Chapter '%s': ignored %d file(s) that are not supported images",
                chapter.name, len(listing.skipped),
            )
        if not listing.pages:
            empty.append(chapter.name)
            if config.empty_chapters == "skip":
                logger.warning("Leaving out chapter '%s': it does not contain any page", chapter.name)
                continue
            logger.warning("Chapter '%s' does not contain any page", chapter.name)
        resolved.append(replace(chapter, pages=tuple(listing.pages)))

    return resolved, skipped, empty


def encode(input_dir: str | Path, config: EncodeConfig | None = None) -> EncodeResult:
    """Build the volumes of *input_dir* according to *config*.

    Resolution, range and planning errors are raised before anything is
    written. Once volumes start building, a failing volume is reported in
    its ``VolumeResult`` and the others carry on.

    Raises:
        NoChaptersFound, InvalidRange, EmptyChapter, IOFailure,
        OutputDirectoryNotFound.
    """
    config = config or EncodeConfig()
    input_dir = Path(input_dir).resolve()
    t0 = time.time()

    selection = resolve_chapters(
        input_dir,
        prefix=config.dirs_prefix,
        start=config.start_chapter,
        end=config.end_chapter,
        root_chapter=config.root_chapter,
        containers=config.container_chapters,
        extended_image_formats=config.extended_image_formats,
        natural_sort=not config.disable_nat_sort,
    )
    chapters, skipped_pages, empty = _attach_pages(selection.chapters, config)
    if not chapters:
        raise NoChaptersFound(f"Every selected chapter of '{input_dir}' is empty")

    output = resolve_output(input_dir, config)
    if config.mode == "single":
        output_dir = output.parent
        plan = plan_volumes(
            chapters,
            "single",
            output_name=output.stem,
            extension=output.suffix.lstrip(".") or "cbz",
        )
    else:
        output_dir = output
        plan = plan_volumes(
            chapters,
            config.mode,
            group_size=config.chapters_per_volume,
            chapters_suffix=config.chapters_suffix,
        )

    first, last = chapters[0].ordinal, chapters[-1].ordinal
    logger.info(
        "Going to treat chapters %d to %d (%d out of %d, %d to ignore) into %d volume(s).",
        first, last, len(chapters), selection.total,
        selection.total - len(chapters), len(plan),
    )

    chapter_width = len(str(max(c.ordinal for c in chapters)))
    if config.max_workers > 1 and len(plan) > 1:
        with ThreadPoolExecutor(max_workers=config.max_workers) as pool:
            futures = [
                pool.submit(build_volume, entry, chapters, output_dir, config, len(plan), chapter_width)
                for entry in plan
            ]
            volumes = [f.result() for f in futures]
    else:
        volumes = [
            build_volume(entry, chapters, output_dir, config, len(plan), chapter_width)
            for entry in plan
        ]

    result = EncodeResult(
        input_dir=input_dir,
        output=output,
        chapters_total=selection.total,
        chapters_selected=len(chapters),
        volumes=volumes,
        skipped_pages=skipped_pages,
        empty_chapters=empty,
        elapsed=time.time() - t0,
    )
    logger.info(
        "Successfully built %d volume(s), %d failed, %d skipped.",
        len([v for v in result.succeeded if not v.skipped_existing]),
        len(result.failed),
        len([v for v in volumes if v.skipped_existing]),
    )
    return result
