"""Shared dataclasses and the reader base class for the archive codec."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path


@dataclass
class PageData:
    """One decoded page: its bytes plus the name and format it came with."""

    name: str  # entry name in the container, or "page-<n>" for PDF pages
    ext: str  # lower-case extension without dot, "" when unknown
    data: bytes
    index: int  # 0-indexed position in the reader's page order


@dataclass
class ArchiveEntry:
    """An entry to append to a container. Names ending in "/" are directories."""

    arcname: str
    data: bytes = b""

    @property
    def is_directory(self) -> bool:
        return self.arcname.endswith("/")


@dataclass
class ReaderOptions:
    """Controls how containers are read."""

    images_only: bool = True  # zip: ignore entries without an image extension
    extended_image_formats: bool = False
    natural_sort: bool = True  # zip: natural order vs codepoint order of entry paths
    pdf_dpi: int = 150  # resolution for PDF pages that must be rendered
    skip_bad_pdf_pages: bool = False  # log and skip PDF pages that fail to extract


class PageReader:
    """Read session over one container, exposing its pages in order.

    Iterating yields ``PageData`` lazily, one page at a time; iterating again
    starts over from the first page. Use as a context manager or call
    ``close()`` explicitly.
    """

    def __init__(self, path: str | Path, options: ReaderOptions | None = None):
        self.path = Path(path)
        self.options = options or ReaderOptions()

    def __len__(self) -> int:
        raise NotImplementedError

    def read(self, index: int) -> PageData:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError

    def __iter__(self) -> Iterator[PageData]:
        for index in range(len(self)):
            yield self.read(index)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
