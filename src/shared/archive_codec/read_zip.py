"""Read pages out of zip-based containers (.zip / .cbz)."""

from __future__ import annotations

import logging
import zipfile
import zlib
from pathlib import Path, PurePosixPath

from shared.errors import CorruptArchive, IOFailure
from shared.image_formats import extension_of, has_image_ext
from shared.natsort import natural_path_key

from .types import PageData, PageReader, ReaderOptions

logger = logging.getLogger(__name__)

# Resource forks added by macOS archivers, never pages
_JUNK_DIRS = ("__MACOSX",)


class ZipPageReader(PageReader):
    """Pages of a zip/cbz archive, sorted by entry path.

    Entries are sorted in natural order (``p2.jpg`` before ``p10.jpg``),
    comparing nested paths directory by directory.
    """

    def __init__(self, path: str | Path, options: ReaderOptions | None = None):
        super().__init__(path, options)
        if not self.path.is_file():
            raise IOFailure(self.path, "file not found")
        try:
            self._zip = zipfile.ZipFile(self.path)
        except zipfile.BadZipFile as exc:
            raise CorruptArchive(self.path, str(exc)) from exc
        except OSError as exc:
            raise IOFailure(self.path, str(exc)) from exc

        names: list[str] = []
        self.skipped: list[str] = []
        for info in self._zip.infolist():
            if info.is_dir():
                continue
            parts = PurePosixPath(info.filename).parts
            if parts and parts[0] in _JUNK_DIRS:
                self.skipped.append(info.filename)
                continue
            if self.options.images_only and not has_image_ext(
                info.filename, self.options.extended_image_formats
            ):
                logger.debug("Ignoring entry '%s' based on its extension", info.filename)
                self.skipped.append(info.filename)
                continue
            names.append(info.filename)

        if self.options.natural_sort:
            names.sort(key=natural_path_key)
        else:
            names.sort()
        self.names = names

    def __len__(self) -> int:
        return len(self.names)

    def read(self, index: int) -> PageData:
        return self.read_entry(self.names[index], index=index)

    def read_entry(self, name: str, index: int | None = None) -> PageData:
        try:
            data = self._zip.read(name)
        except KeyError as exc:
            raise CorruptArchive(self.path, f"missing entry '{name}'") from exc
        except (zipfile.BadZipFile, zlib.error, EOFError) as exc:
            raise CorruptArchive(self.path, f"entry '{name}': {exc}") from exc
        except (RuntimeError, NotImplementedError) as exc:
            # encrypted entry, or a compression method zipfile cannot decode
            raise CorruptArchive(self.path, f"entry '{name}': {exc}") from exc
        except OSError as exc:
            raise IOFailure(self.path, str(exc)) from exc
        if index is None:
            index = self.names.index(name) if name in self.names else -1
        return PageData(name=name, ext=extension_of(name), data=data, index=index)

    def close(self) -> None:
        self._zip.close()


def open_reader(path: str | Path, options: ReaderOptions) -> ZipPageReader:
    return ZipPageReader(path, options)
