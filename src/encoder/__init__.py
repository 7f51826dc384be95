from .build import VolumeResult, build_volume, load_chapter_pages, volume_entries
from .config import EMPTY_CHAPTER_POLICIES, EncodeConfig
from .encode import EncodeResult, encode, resolve_output

__all__ = [
    "encode",
    "EncodeConfig",
    "EncodeResult",
    "VolumeResult",
    "EMPTY_CHAPTER_POLICIES",
    "build_volume",
    "load_chapter_pages",
    "volume_entries",
    "resolve_output",
]
