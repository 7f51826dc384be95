"""Unpack a zip/cbz or PDF container into numbered page files."""

from __future__ import annotations

import contextlib
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from shared.archive_codec import ReaderOptions, open_reader
from shared.errors import IOFailure, OutputExists
from shared.paths import ensure_directory

from .config import DecodeConfig

logger = logging.getLogger(__name__)


@dataclass
class DecodeResult:
    source: Path
    output_dir: Path
    pages: list[Path] = field(default_factory=list)  # written files, in page order
    skipped_entries: list[str] = field(default_factory=list)  # zip entries left out
    failed_pages: list[int] = field(default_factory=list)  # PDF pages skipped, 0-indexed
    elapsed: float = 0.0


def default_output_dir(source: Path) -> Path:
    return source.with_suffix("")


def _remove_written(written: list[Path], output_dir: Path, created: bool) -> None:
    for path in written:
        with contextlib.suppress(OSError):
            path.unlink()
    if created:
        with contextlib.suppress(OSError):
            output_dir.rmdir()
    logger.debug("Removed %d extracted file(s) from '%s'", len(written), output_dir)


def decode(source: str | Path, config: DecodeConfig | None = None) -> DecodeResult:
    """Extract every page of *source* into ``<n>.<ext>`` files.

    Pages are numbered from 1 in reader order (natural order of the entry
    paths for zip/cbz, document order for PDF), zero-padded to the width of
    the page count so the files sort back into the same order.

    If anything fails, the files written by this call are removed before
    the error propagates, along with the output directory when this call
    created it.

    Raises:
        UnsupportedFormat, CorruptArchive, IOFailure, OutputExists,
        OutputDirectoryNotFound.
    """
    config = config or DecodeConfig()
    source = Path(source)
    t0 = time.time()

    options = ReaderOptions(
        images_only=config.images_only,
        extended_image_formats=config.extended_image_formats,
        natural_sort=not config.disable_nat_sort,
        pdf_dpi=config.pdf_dpi,
        skip_bad_pdf_pages=config.skip_bad_pdf_pages,
    )
    output_dir = config.output if config.output is not None else default_output_dir(source)

    with open_reader(source, options) as reader:
        created = ensure_directory(output_dir, config.create_output_dir)
        width = len(str(len(reader)))
        result = DecodeResult(source=source, output_dir=output_dir)

        try:
            for page in reader:
                suffix = f".{page.ext}" if page.ext else ""
                target = output_dir / f"{page.index + 1:0{width}d}{suffix}"
                if target.exists() and not config.overwrite:
                    raise OutputExists(target)
                try:
                    target.write_bytes(page.data)
                except OSError as exc:
                    raise IOFailure(target, f"failed to write page: {exc}") from exc
                result.pages.append(target)
                logger.debug("Extracted '%s' to '%s'", page.name, target.name)
        except BaseException:
            _remove_written(result.pages, output_dir, created)
            raise

        result.skipped_entries = list(getattr(reader, "skipped", []))
        result.failed_pages = list(getattr(reader, "failed_pages", []))

    result.elapsed = time.time() - t0
    logger.info(
        "Extracted %d page(s) from '%s' to '%s' in %.3f s.",
        len(result.pages), source.name, output_dir, result.elapsed,
    )
    return result
