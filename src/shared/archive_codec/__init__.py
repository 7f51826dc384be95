from .readers import open_reader
from .types import ArchiveEntry, PageData, PageReader, ReaderOptions
from .write_cbz import PARTIAL_SUFFIX, CbzWriter, write_cbz

__all__ = [
    "open_reader",
    "write_cbz",
    "CbzWriter",
    "PageReader",
    "PageData",
    "ArchiveEntry",
    "ReaderOptions",
    "PARTIAL_SUFFIX",
]
