from .errors import (
    ComicEncoderError,
    CorruptArchive,
    EmptyChapter,
    InvalidGroupSize,
    InvalidRange,
    IOFailure,
    NoChaptersFound,
    OutputDirectoryNotFound,
    OutputExists,
    UnsupportedFormat,
    VolumeNameConflict,
)

__all__ = [
    "ComicEncoderError",
    "InvalidRange",
    "NoChaptersFound",
    "EmptyChapter",
    "InvalidGroupSize",
    "UnsupportedFormat",
    "CorruptArchive",
    "IOFailure",
    "OutputExists",
    "OutputDirectoryNotFound",
    "VolumeNameConflict",
]
