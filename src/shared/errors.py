"""Error taxonomy shared by the resolver, planner, codec and pipelines."""

from __future__ import annotations

from pathlib import Path


class ComicEncoderError(Exception):
    """Base class for every failure the core reports to its caller."""


class InvalidRange(ComicEncoderError, ValueError):
    """Chapter bounds fall outside the resolved chapter set."""


class NoChaptersFound(ComicEncoderError):
    """No chapter survived scanning and filtering."""


class VolumeNameConflict(ComicEncoderError, ValueError):
    """Two planned volumes would be written to the same file name."""


class EmptyChapter(ComicEncoderError):
    """A chapter resolved to zero pages while empty chapters are disallowed."""

    def __init__(self, chapter: str):
        super().__init__(f"Chapter '{chapter}' does not contain any page")
        self.chapter = chapter


class InvalidGroupSize(ComicEncoderError, ValueError):
    """Compile mode was given fewer than one chapter per volume."""


class UnsupportedFormat(ComicEncoderError):
    """A file or container has a format the core cannot handle."""

    def __init__(self, path: str | Path, detail: str = ""):
        message = f"Unsupported format: '{path}'"
        if detail:
            message += f" ({detail})"
        super().__init__(message)
        self.path = Path(path)


class CorruptArchive(ComicEncoderError):
    """A container cannot be opened or its structure is inconsistent."""

    def __init__(self, path: str | Path, detail: str = ""):
        message = f"Corrupt or unreadable archive: '{path}'"
        if detail:
            message += f": {detail}"
        super().__init__(message)
        self.path = Path(path)


class IOFailure(ComicEncoderError):
    """A read or write on a specific path failed."""

    def __init__(self, path: str | Path, detail: str = ""):
        message = f"I/O failure on '{path}'"
        if detail:
            message += f": {detail}"
        super().__init__(message)
        self.path = Path(path)


class OutputExists(ComicEncoderError):
    """The destination already exists and overwriting was not requested."""

    def __init__(self, path: str | Path):
        super().__init__(f"Output file already exists: '{path}' (use overwrite to replace it)")
        self.path = Path(path)


class OutputDirectoryNotFound(ComicEncoderError):
    """The output directory is missing and creating it was not requested."""

    def __init__(self, path: str | Path):
        super().__init__(f"Output directory was not found: '{path}'")
        self.path = Path(path)
