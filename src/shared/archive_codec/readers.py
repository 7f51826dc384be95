"""Open a page reader for a container, picking the backend from its extension."""

import importlib
from pathlib import Path

from shared.errors import UnsupportedFormat
from shared.image_formats import extension_of

from .types import PageReader, ReaderOptions

READERS = {
    "zip": "shared.archive_codec.read_zip",
    "cbz": "shared.archive_codec.read_zip",
    "pdf": "shared.archive_codec.read_pdf",
}


def open_reader(path: str | Path, options: ReaderOptions | None = None) -> PageReader:
    """Open *path* for reading.

    Args:
        path: A ``.zip``, ``.cbz`` or ``.pdf`` file (extension is case-insensitive).
        options: Reader options; defaults to ``ReaderOptions()``.

    Returns:
        An open ``PageReader``. The caller owns it and must close it.

    Raises:
        UnsupportedFormat: for any other extension.
        CorruptArchive: when the container cannot be opened.
        IOFailure: when the file is missing or unreadable.
    """
    ext = extension_of(path)
    if ext not in READERS:
        raise UnsupportedFormat(path, f"expected one of: {', '.join(sorted(READERS))}")

    module = importlib.import_module(READERS[ext])
    return module.open_reader(path, options or ReaderOptions())
