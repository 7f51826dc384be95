from .config import DecodeConfig
from .decode import DecodeResult, decode, default_output_dir

__all__ = [
    "decode",
    "DecodeConfig",
    "DecodeResult",
    "default_output_dir",
]
