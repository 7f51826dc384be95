"""Build one volume file from its planned chapters."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path

from shared.archive_codec import ArchiveEntry, PageData, ReaderOptions, open_reader, write_cbz
from shared.chapter_resolver import Chapter
from shared.errors import ComicEncoderError, IOFailure
from shared.volume_planner import VolumePlanEntry

from .config import EncodeConfig

logger = logging.getLogger(__name__)


@dataclass
class VolumeResult:
    """Outcome of building one volume."""

    number: int
    name: str
    path: Path | None  # None when the volume failed
    first_chapter: int
    last_chapter: int
    chapters: int
    pages: int = 0
    elapsed: float = 0.0
    skipped_existing: bool = False
    error: ComicEncoderError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def load_chapter_pages(chapter: Chapter, config: EncodeConfig) -> Iterator[PageData]:
    """Yield the bytes of each page of *chapter*, one page at a time, in order."""
    if chapter.kind == "directory":
        for page in chapter.pages:
            try:
                data = page.source.read_bytes()
            except OSError as exc:
                raise IOFailure(page.source, f"failed to read image: {exc}") from exc
            yield PageData(name=page.name, ext=page.fmt, data=data, index=page.position)
        return

    options = ReaderOptions(
        images_only=True,
        extended_image_formats=config.extended_image_formats,
        natural_sort=not config.disable_nat_sort,
    )
    with open_reader(chapter.path, options) as reader:
        for page in chapter.pages:
            if page.entry is not None:
                yield reader.read_entry(page.entry, index=page.position)
            else:
                yield reader.read(page.index)


def volume_entries(
    entry: VolumePlanEntry,
    chapters: Sequence[Chapter],
    config: EncodeConfig,
    volume_width: int,
    chapter_width: int,
) -> Iterator[ArchiveEntry]:
    """Archive entries for one volume: a directory per chapter, then its pages.

    Every number in an entry name is zero-padded so that natural order and
    plain codepoint order both give the page order.
    """
    for chapter in chapters:
        if config.mode == "individual":
            dir_name = prefix = chapter.name
        else:
            dir_name = prefix = (
                f"Vol_{entry.number:0{volume_width}d}_Chapter_{chapter.ordinal:0{chapter_width}d}"
            )
        logger.debug("Adding chapter '%s' to volume %d", chapter.name, entry.number)
        yield ArchiveEntry(f"{dir_name}/")

        pic_width = len(str(len(chapter.pages)))
        for page_nb, page in enumerate(load_chapter_pages(chapter, config)):
            ext = f".{page.ext}" if page.ext else ""
            yield ArchiveEntry(f"{dir_name}/{prefix}_Pic_{page_nb:0{pic_width}d}{ext}", page.data)


def build_volume(
    entry: VolumePlanEntry,
    chapters: Sequence[Chapter],
    output_dir: Path,
    config: EncodeConfig,
    volumes: int,
    chapter_width: int,
) -> VolumeResult:
    """Write the volume described by *entry* into *output_dir*.

    Failures are returned in ``VolumeResult.error`` rather than raised, so
    sibling volumes keep building.
    """
    t0 = time.time()
    members = [chapters[i] for i in entry.chapter_indices]
    page_count = sum(len(c.pages) for c in members)

    name = entry.name
    if config.append_pages_count:
        stem, suffix = Path(name).stem, Path(name).suffix
        name = f"{stem} ({page_count} pages){suffix}"
    path = output_dir / name

    result = VolumeResult(
        number=entry.number,
        name=name,
        path=path,
        first_chapter=entry.first_chapter,
        last_chapter=entry.last_chapter,
        chapters=len(members),
    )

    if path.exists() and config.skip_existing and not config.overwrite:
        logger.warning(
            "Skipping volume %d containing chapters %d to %d as its output file '%s' already exists",
            entry.number, entry.first_chapter, entry.last_chapter, path,
        )
        result.skipped_existing = True
        return result

    volume_width = len(str(volumes))
    try:
        result.pages = write_cbz(
            path,
            volume_entries(entry, members, config, volume_width, chapter_width),
            compress_losslessly=config.compress_losslessly,
            overwrite=config.overwrite,
        )
    except ComicEncoderError as exc:
        logger.error("Failed to build volume %d / %d ('%s'): %s", entry.number, volumes, name, exc)
        result.path = None
        result.error = exc
        return result

    result.elapsed = time.time() - t0
    logger.info(
        "Successfully written volume %0*d / %d (chapters %d to %d) in '%s', containing %d pages in %.3f s.",
        volume_width, entry.number, volumes, entry.first_chapter, entry.last_chapter,
        name, result.pages, result.elapsed,
    )
    return result
