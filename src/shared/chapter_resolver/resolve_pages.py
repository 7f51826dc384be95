"""Enumerate and order the pages of one chapter."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from shared.archive_codec import ReaderOptions, open_reader
from shared.errors import EmptyChapter, IOFailure
from shared.image_formats import extension_of, has_image_ext, is_extended_only, verify_image_header
from shared.natsort import natural_path_key

from .types import Chapter, Page, PageListing, SkippedPage

logger = logging.getLogger(__name__)


def _list_files(directory: Path) -> list[Path]:
    """All files below *directory*, recursively, in filesystem order."""
    files = []
    try:
        for dirpath, _dirnames, filenames in os.walk(directory, onerror=_raise):
            files.extend(Path(dirpath) / name for name in filenames)
    except OSError as exc:
        raise IOFailure(directory, f"failed to list chapter files: {exc}") from exc
    return files


def _raise(exc: OSError) -> None:
    raise exc


def _directory_pages(
    chapter: Chapter,
    extended: bool,
    natural_sort: bool,
    verify_headers: bool,
) -> PageListing:
    accepted: list[tuple[str, Path, str]] = []
    skipped: list[SkippedPage] = []

    for path in _list_files(chapter.path):
        rel = path.relative_to(chapter.path).as_posix()
        if not has_image_ext(path, extended):
            reason = (
                "extended image format (enable extended formats to include it)"
                if is_extended_only(path)
                else "unsupported format"
            )
            skipped.append(SkippedPage(rel, reason))
            continue
        if verify_headers:
            try:
                verify_image_header(path)
            except (UnidentifiedImageError, OSError) as exc:
                logger.warning("Skipping '%s' in chapter '%s': corrupt image header (%s)", rel, chapter.name, exc)
                skipped.append(SkippedPage(rel, f"corrupt image header: {exc}"))
                continue
            except Image.DecompressionBombError as exc:
                logger.warning("Skipping '%s' in chapter '%s': image too large (%s)", rel, chapter.name, exc)
                skipped.append(SkippedPage(rel, f"image too large: {exc}"))
                continue
        accepted.append((rel, path, extension_of(path)))

    if natural_sort:
        accepted.sort(key=lambda item: natural_path_key(item[0]))
    else:
        accepted.sort(key=lambda item: item[0])

    pages = [
        Page(source=path, name=rel, fmt=ext, position=position)
        for position, (rel, path, ext) in enumerate(accepted)
    ]
    return PageListing(pages=pages, skipped=skipped)


def _container_pages(chapter: Chapter, extended: bool, natural_sort: bool) -> PageListing:
    options = ReaderOptions(
        images_only=True,
        extended_image_formats=extended,
        natural_sort=natural_sort,
    )
    with open_reader(chapter.path, options) as reader:
        if chapter.kind == "pdf":
            # Document order is authoritative for PDF pages
            pages = [
                Page(source=chapter.path, name=f"page-{i + 1}", fmt="pdf", position=i, index=i)
                for i in range(len(reader))
            ]
            skipped = []
        else:
            pages = [
                Page(source=chapter.path, name=name, fmt=extension_of(name), position=i, entry=name)
                for i, name in enumerate(reader.names)
            ]
            skipped = [SkippedPage(name, "unsupported format") for name in reader.skipped]
    return PageListing(pages=pages, skipped=skipped)


def resolve_pages(
    chapter: Chapter,
    extended_image_formats: bool = False,
    natural_sort: bool = True,
    verify_headers: bool = True,
    allow_empty: bool = False,
) -> PageListing:
    """Resolve the ordered pages of *chapter*.

    Directory chapters are scanned recursively; files are kept when their
    extension is a supported image format (or an extended one when
    *extended_image_formats* is set) and, with *verify_headers*, when Pillow
    can parse their header. Pages are sorted by relative path in natural
    order. Zip chapters list their image entries the same way. PDF chapters
    yield one page per document page, in document order.

    Files left out are reported in ``PageListing.skipped``; they never fail
    the resolution.

    Raises:
        EmptyChapter: no page resolved and *allow_empty* is not set.
    """
    if chapter.kind == "directory":
        listing = _directory_pages(chapter, extended_image_formats, natural_sort, verify_headers)
    else:
        listing = _container_pages(chapter, extended_image_formats, natural_sort)

    logger.debug(
        "Chapter '%s': %d pages, %d files skipped",
        chapter.name, len(listing.pages), len(listing.skipped),
    )
    if not listing.pages and not allow_empty:
        raise EmptyChapter(chapter.name)
    return listing
