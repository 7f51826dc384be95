from .resolve_chapters import resolve_chapters, select_range
from .resolve_pages import resolve_pages
from .types import Chapter, ChapterKind, ChapterSelection, Page, PageListing, SkippedPage

__all__ = [
    "resolve_chapters",
    "resolve_pages",
    "select_range",
    "Chapter",
    "ChapterKind",
    "ChapterSelection",
    "Page",
    "PageListing",
    "SkippedPage",
]
