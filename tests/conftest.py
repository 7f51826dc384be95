"""Shared fixtures and path setup for the test suite."""

import io
import sys
from pathlib import Path

import pytest
from PIL import Image

# Mirror the sys.path setup used by the CLI script
_APP = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_APP / "src"))
sys.path.insert(0, str(_APP / "scripts"))

_PILLOW_NAMES = {"png": "PNG", "jpg": "JPEG", "jpeg": "JPEG", "bmp": "BMP", "gif": "GIF", "tiff": "TIFF"}


def image_bytes(ext="png", color=(200, 30, 30), size=(8, 8)):
    """Real, decodable image bytes generated with Pillow."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=_PILLOW_NAMES[ext])
    return buffer.getvalue()


@pytest.fixture
def make_image():
    return image_bytes


@pytest.fixture
def make_chapters(tmp_path):
    """Build ``<root>/<prefix><i>/page_<p>.<ext>`` trees.

    Each page gets its own colour, so page bytes are unique and ordering
    mistakes show up as content mismatches.
    """
    def _make(count, pages=2, prefix="Chapter_", root_name="comic", ext="png"):
        root = tmp_path / root_name
        root.mkdir(exist_ok=True)
        for i in range(1, count + 1):
            chapter = root / f"{prefix}{i}"
            chapter.mkdir()
            for p in range(1, pages + 1):
                color = ((i * 17) % 256, (p * 23) % 256, 90)
                (chapter / f"page_{p}.{ext}").write_bytes(image_bytes(ext, color))
        return root
    return _make


def _patch_zip_headers(path, flag_bits=0, method=None):
    """Set general purpose flag bits and/or the compression method of every entry.

    Both the local headers and the central directory are rewritten, the
    way an archiver that encrypts or uses an exotic codec writes them.
    """
    data = bytearray(path.read_bytes())
    for signature, flags_at, method_at in ((b"PK\x03\x04", 6, 8), (b"PK\x01\x02", 8, 10)):
        start = data.find(signature)
        while start != -1:
            data[start + flags_at] |= flag_bits
            if method is not None:
                data[start + method_at:start + method_at + 2] = method.to_bytes(2, "little")
            start = data.find(signature, start + 4)
    path.write_bytes(bytes(data))


@pytest.fixture
def patch_zip_headers():
    return _patch_zip_headers
