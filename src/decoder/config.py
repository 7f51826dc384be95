"""Decode configuration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass
class DecodeConfig:
    """Controls how a container is unpacked into page files.

    Without ``output``, pages go to the input path with its extension
    removed (``comic.cbz`` -> ``comic/``).
    """

    output: str | Path | None = None
    create_output_dir: bool = True
    overwrite: bool = False  # replace page files already in the output directory
    images_only: bool = False  # zip: skip entries without an image extension
    extended_image_formats: bool = False
    disable_nat_sort: bool = False
    skip_bad_pdf_pages: bool = False
    pdf_dpi: int = 150

    def __post_init__(self):
        if self.pdf_dpi < 1:
            raise ValueError(f"pdf_dpi must be at least 1, got {self.pdf_dpi}")
        if self.output is not None:
            self.output = Path(self.output)
