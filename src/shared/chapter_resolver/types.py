"""Shared dataclasses for chapter and page resolution."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

ChapterKind = Literal["directory", "zip", "pdf"]


@dataclass(frozen=True)
class Page:
    source: Path  # the image file, or the container holding the page
    name: str  # path relative to the chapter, zip entry name, or "page-<n>"
    fmt: str  # lower-case extension tag ("jpg", "png", ...; "pdf" for PDF pages)
    position: int  # 0-indexed order within the chapter
    entry: str | None = None  # zip entry name
    index: int | None = None  # 0-indexed page number in a PDF


@dataclass(frozen=True)
class Chapter:
    path: Path
    name: str  # display name: directory name or file stem
    kind: ChapterKind
    ordinal: int  # 1-indexed position after sorting and prefix filtering
    pages: tuple[Page, ...] = ()


@dataclass
class SkippedPage:
    """A file that was not turned into a page, and why."""

    name: str
    reason: str


@dataclass
class PageListing:
    """Pages resolved for one chapter, plus the files left out."""

    pages: list[Page]
    skipped: list[SkippedPage] = field(default_factory=list)


@dataclass
class ChapterSelection:
    """The chapters picked out of an input root, with what was left out."""

    chapters: list[Chapter]
    total: int  # candidates found before any filtering
    skipped_prefix: list[str] = field(default_factory=list)
    skipped_range: list[str] = field(default_factory=list)

    @property
    def ignored(self) -> int:
        return self.total - len(self.chapters)
