"""Image and container format classification, header checks and lossless re-encoding."""

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path, PurePath

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

# Widely supported by comic readers
IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "bmp"})

# Accepted only with extended formats enabled
EXTENDED_IMAGE_EXTENSIONS = frozenset({
    "tif", "tiff", "gif", "eps", "raw", "cr2", "nef", "orf", "sr2",
    "ppm", "webp", "pgm", "pbm", "pnm", "ico", "flif", "pam", "pcx",
    "pgf", "sgi", "sid", "bgp",
})

CONTAINER_EXTENSIONS = frozenset({"zip", "cbz", "pdf"})

# Extensions Pillow can identify from their header; the others (camera raw,
# flif, ...) are trusted on their extension alone.
PILLOW_FORMATS = {
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "png": "PNG",
    "bmp": "BMP",
    "gif": "GIF",
    "tif": "TIFF",
    "tiff": "TIFF",
    "webp": "WEBP",
    "ppm": "PPM",
    "pgm": "PPM",
    "pbm": "PPM",
    "pnm": "PPM",
    "ico": "ICO",
    "pcx": "PCX",
    "sgi": "SGI",
}

# Uncompressed (or weakly compressed) bitmaps that shrink as PNG
LOSSLESS_REENCODE_EXTENSIONS = frozenset({
    "bmp", "tif", "tiff", "ppm", "pgm", "pbm", "pnm", "pam", "pcx", "sgi",
})


def extension_of(name: str | PurePath) -> str:
    """Lower-cased extension of *name* without the leading dot ("" if none)."""
    suffix = PurePath(name).suffix
    return suffix[1:].lower() if suffix else ""


def has_image_ext(name: str | PurePath, extended: bool = False) -> bool:
    """Check whether *name* has a comic-friendly image extension.

    Formats that not every reader supports (TIFF, RAW, CR2, ...) are only
    accepted when *extended* is set.
    """
    ext = extension_of(name)
    if ext in IMAGE_EXTENSIONS:
        return True
    return extended and ext in EXTENDED_IMAGE_EXTENSIONS


def is_extended_only(name: str | PurePath) -> bool:
    return extension_of(name) in EXTENDED_IMAGE_EXTENSIONS


def is_supported_for_decoding(name: str | PurePath) -> bool:
    """Check whether *name* is a container the decoder can read (zip, cbz, pdf)."""
    return extension_of(name) in CONTAINER_EXTENSIONS


def verify_image_header(path: Path) -> str | None:
    """Open *path* with Pillow and return the detected format name.

    Only the header is parsed. Returns None for extensions Pillow cannot
    identify. Raises ``UnidentifiedImageError`` or ``OSError`` when the
    header is corrupt, and ``Image.DecompressionBombError`` when it declares
    more pixels than ``Image.MAX_IMAGE_PIXELS`` allows.
    """
    expected = PILLOW_FORMATS.get(extension_of(path))
    if expected is None:
        return None
    with Image.open(path) as img:
        return img.format


def reencode_lossless(data: bytes, ext: str) -> tuple[bytes, str]:
    """Re-encode an uncompressed bitmap as PNG when that makes it smaller.

    Returns ``(data, ext)`` unchanged for formats that would not benefit,
    for multi-frame images, and for images Pillow cannot convert.
    """
    if ext not in LOSSLESS_REENCODE_EXTENSIONS:
        return data, ext
    try:
        with Image.open(BytesIO(data)) as img:
            if getattr(img, "n_frames", 1) > 1:
                return data, ext
            buffer = BytesIO()
            img.save(buffer, "PNG", optimize=True)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        logger.debug("Keeping original %s bytes, PNG re-encoding failed: %s", ext, exc)
        return data, ext
    encoded = buffer.getvalue()
    if len(encoded) >= len(data):
        return data, ext
    return encoded, "png"
