"""Rebuild configuration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass
class RebuildConfig:
    """Controls how existing comics are turned into fresh cbz volumes.

    ``output`` is the target file for a single source, or a directory (for a
    single source or a batch). Without it, each rebuilt volume is written
    beside its source as ``<source-stem>.cbz``.

    ``temporary_dir`` is where staging areas are created; it defaults to the
    system temporary directory.
    """

    output: str | Path | None = None
    overwrite: bool = False
    create_output_dir: bool = False
    temporary_dir: str | Path | None = None
    images_only: bool = True  # zip: drop entries that are not images
    extended_image_formats: bool = False
    disable_nat_sort: bool = False
    compress_losslessly: bool = False
    skip_bad_pdf_pages: bool = False
    pdf_dpi: int = 150
    recursive: bool = False  # batch: look for comics in subdirectories too
    max_workers: int = 1  # batch: comics rebuilt in parallel

    def __post_init__(self):
        if self.pdf_dpi < 1:
            raise ValueError(f"pdf_dpi must be at least 1, got {self.pdf_dpi}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")
        if self.output is not None:
            self.output = Path(self.output)
        if self.temporary_dir is not None:
            self.temporary_dir = Path(self.temporary_dir)
