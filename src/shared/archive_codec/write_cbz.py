"""Write ordered pages into a cbz (zip) container."""

from __future__ import annotations

import contextlib
import logging
import os
import uuid
import zipfile
from collections.abc import Iterable
from pathlib import Path

from shared.errors import IOFailure, OutputDirectoryNotFound, OutputExists
from shared.image_formats import extension_of, reencode_lossless

from .types import ArchiveEntry

logger = logging.getLogger(__name__)

PARTIAL_SUFFIX = ".comic-enc-partial"


class CbzWriter:
    """Write session for one cbz file.

    Entries go to a per-writer ``<destination>.<random>.comic-enc-partial``
    file in the order they are added. ``finalize()`` writes the central
    directory and renames the partial file onto the destination; ``abort()``
    deletes it. Used as a context manager, the writer finalizes on success
    and aborts on any exception, so the destination never holds a
    half-written archive.
    """

    def __init__(
        self,
        destination: str | Path,
        compress_losslessly: bool = False,
        overwrite: bool = False,
    ):
        self.destination = Path(destination)
        self.partial_path = self.destination.with_name(
            f"{self.destination.name}.{uuid.uuid4().hex[:12]}{PARTIAL_SUFFIX}"
        )
        self.compress_losslessly = compress_losslessly
        self.overwrite = overwrite
        self.count = 0
        self._zip: zipfile.ZipFile | None = None

    def open(self) -> CbzWriter:
        if self.destination.is_dir():
            raise IOFailure(self.destination, "output path is a directory")
        if self.destination.exists() and not self.overwrite:
            raise OutputExists(self.destination)
        if not self.destination.parent.is_dir():
            raise OutputDirectoryNotFound(self.destination.parent)

        compression = zipfile.ZIP_DEFLATED if self.compress_losslessly else zipfile.ZIP_STORED
        try:
            self._zip = zipfile.ZipFile(self.partial_path, "x", compression=compression)
        except OSError as exc:
            raise IOFailure(self.partial_path, str(exc)) from exc
        return self

    def add(self, entry: ArchiveEntry) -> str:
        """Append *entry* and return the name it was stored under.

        With lossless compression on, uncompressed bitmaps are re-encoded as
        PNG and their extension changes accordingly.
        """
        if self._zip is None:
            raise RuntimeError("writer is not open, call open() first")

        arcname, data = entry.arcname, entry.data
        if entry.is_directory:
            self._write(arcname, b"")
            return arcname

        if self.compress_losslessly:
            ext = extension_of(arcname)
            data, new_ext = reencode_lossless(data, ext)
            if new_ext != ext:
                arcname = arcname[: len(arcname) - len(ext)] + new_ext

        logger.debug("Adding '%s' (%d bytes)", arcname, len(data))
        self._write(arcname, data)
        self.count += 1
        return arcname

    def _write(self, arcname: str, data: bytes) -> None:
        try:
            self._zip.writestr(arcname, data)
        except OSError as exc:
            raise IOFailure(self.partial_path, f"failed to write '{arcname}': {exc}") from exc

    def finalize(self) -> Path:
        if self.destination.exists() and not self.overwrite:
            # another writer finished the same destination first
            self.abort()
            raise OutputExists(self.destination)
        try:
            self._zip.close()
            os.replace(self.partial_path, self.destination)
        except OSError as exc:
            self.abort()
            raise IOFailure(self.destination, str(exc)) from exc
        finally:
            self._zip = None
        return self.destination

    def abort(self) -> None:
        if self._zip is not None:
            with contextlib.suppress(OSError, ValueError):
                self._zip.close()
            self._zip = None
        self.partial_path.unlink(missing_ok=True)
        logger.debug("Removed partial archive '%s'", self.partial_path)

    def __enter__(self) -> CbzWriter:
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.finalize()
        else:
            self.abort()
        return False


def write_cbz(
    destination: str | Path,
    entries: Iterable[ArchiveEntry],
    compress_losslessly: bool = False,
    overwrite: bool = False,
) -> int:
    """Stream *entries* into a new cbz at *destination*.

    *entries* may be a generator that reads pages lazily; if it raises, the
    partial file is removed and the error propagates.

    Returns:
        Number of page entries written (directory entries not counted).
    """
    with CbzWriter(destination, compress_losslessly=compress_losslessly, overwrite=overwrite) as writer:
        for entry in entries:
            writer.add(entry)
    return writer.count
