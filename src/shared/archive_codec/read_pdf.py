"""Read pages out of PDF documents via PyMuPDF.

Each PDF page becomes one comic page, in document order. A page made of a
single embedded image with no text on it yields that image's original bytes
(no quality loss), provided its format is accepted under the current
``extended_image_formats`` setting. Any other page is rendered to PNG at
``pdf_dpi``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pymupdf

from shared.errors import CorruptArchive, IOFailure
from shared.image_formats import has_image_ext

from .types import PageData, PageReader, ReaderOptions

logger = logging.getLogger(__name__)

# PyMuPDF names DCT streams "jpeg"
_EXT_ALIASES = {"jpeg": "jpg", "jpe": "jpg", "tif": "tiff"}


def _normalize_ext(ext: str) -> str:
    ext = ext.lower()
    return _EXT_ALIASES.get(ext, ext)


class PdfPageReader(PageReader):
    """Pages of a PDF document, in document order (never re-sorted)."""

    def __init__(self, path: str | Path, options: ReaderOptions | None = None):
        super().__init__(path, options)
        if not self.path.is_file():
            raise IOFailure(self.path, "file not found")
        try:
            self._doc = pymupdf.open(str(self.path))
        except (RuntimeError, ValueError) as exc:
            raise CorruptArchive(self.path, str(exc)) from exc
        if self._doc.needs_pass:
            self._doc.close()
            raise CorruptArchive(self.path, "document is password protected")
        self.failed_pages: list[int] = []

    def __len__(self) -> int:
        return len(self._doc)

    def read(self, index: int) -> PageData:
        try:
            return self._extract(index)
        except (RuntimeError, ValueError) as exc:
            raise CorruptArchive(self.path, f"page {index + 1}: {exc}") from exc

    def _extract(self, index: int) -> PageData:
        page = self._doc[index]
        name = f"page-{index + 1}"

        images = page.get_images(full=True)
        if len(images) == 1 and not page.get_text().strip():
            xref = images[0][0]
            info = self._doc.extract_image(xref)
            if info and info.get("image"):
                ext = _normalize_ext(info.get("ext", ""))
                if has_image_ext(f"{name}.{ext}", self.options.extended_image_formats):
                    logger.debug("Page %d: extracted embedded %s image", index + 1, ext)
                    return PageData(name=name, ext=ext, data=info["image"], index=index)

        logger.debug("Page %d: rendering at %d dpi", index + 1, self.options.pdf_dpi)
        pixmap = page.get_pixmap(dpi=self.options.pdf_dpi)
        return PageData(name=name, ext="png", data=pixmap.tobytes("png"), index=index)

    def __iter__(self) -> Iterator[PageData]:
        for index in range(len(self)):
            try:
                yield self.read(index)
            except CorruptArchive as exc:
                if not self.options.skip_bad_pdf_pages:
                    raise
                logger.warning("Skipping page %d of '%s': %s", index + 1, self.path.name, exc)
                self.failed_pages.append(index)

    def close(self) -> None:
        self._doc.close()


def open_reader(path: str | Path, options: ReaderOptions) -> PdfPageReader:
    return PdfPageReader(path, options)
