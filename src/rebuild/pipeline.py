"""Rebuild existing comics (zip, cbz, PDF) into fresh cbz volumes.

Each rebuild extracts the source into a private staging directory, encodes
the staged pages into ``<source-stem>.cbz``, then removes the staging
directory whatever happened before.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
import time
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path

from decoder import DecodeConfig, decode
from encoder import EncodeConfig, encode
from shared.errors import ComicEncoderError, IOFailure, OutputExists
from shared.image_formats import is_supported_for_decoding
from shared.natsort import natural_path_key
from shared.paths import ensure_directory

from .config import RebuildConfig

logger = logging.getLogger(__name__)

STAGING_PREFIX = "comic-rebuild-"


class RebuildState(Enum):
    START = "start"
    EXTRACTING = "extracting"
    ENCODING = "encoding"
    CLEANUP = "cleanup"
    DONE = "done"
    FAILED = "failed"


@dataclass
class RebuildResult:
    source: Path
    output: Path | None
    state: RebuildState
    failed_stage: RebuildState | None = None
    pages: int = 0
    error: ComicEncoderError | None = None
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return self.state is RebuildState.DONE


@contextmanager
def staging_area(parent: Path | None = None) -> Iterator[Path]:
    """A fresh, uniquely named directory removed on every exit path."""
    if parent is not None and not parent.is_dir():
        raise IOFailure(parent, "temporary directory was not found")
    try:
        path = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=parent))
    except OSError as exc:
        raise IOFailure(parent or tempfile.gettempdir(), f"failed to create a staging area: {exc}") from exc
    logger.debug("Created staging area '%s'", path)
    try:
        yield path
    finally:
        try:
            shutil.rmtree(path)
        except OSError as exc:
            raise IOFailure(path, f"failed to remove the staging area: {exc}") from exc
        logger.debug("Removed staging area '%s'", path)


def resolve_rebuild_output(source: Path, config: RebuildConfig) -> Path:
    if config.output is None:
        return source.with_suffix(".cbz")
    if config.output.is_dir():
        return config.output / f"{source.stem}.cbz"
    ensure_directory(config.output.parent, config.create_output_dir)
    return config.output


class RebuildPipeline:
    """One rebuild run: Start -> Extracting -> Encoding -> Cleanup -> Done.

    Any failure moves to Failed and records the stage it happened in. The
    staging area is removed before ``run()`` returns or raises.
    """

    def __init__(self, source: str | Path, config: RebuildConfig | None = None):
        self.source = Path(source)
        self.config = config or RebuildConfig()
        self.state = RebuildState.START
        self.failed_stage: RebuildState | None = None

    def _enter(self, state: RebuildState) -> None:
        logger.debug("Rebuilding '%s': %s -> %s", self.source.name, self.state.value, state.value)
        self.state = state

    def _extract(self, staging: Path) -> int:
        decoded = decode(self.source, DecodeConfig(
            output=staging,
            create_output_dir=True,
            images_only=self.config.images_only,
            extended_image_formats=self.config.extended_image_formats,
            disable_nat_sort=self.config.disable_nat_sort,
            skip_bad_pdf_pages=self.config.skip_bad_pdf_pages,
            pdf_dpi=self.config.pdf_dpi,
        ))
        return len(decoded.pages)

    def _encode(self, staging: Path, output: Path) -> int:
        encoded = encode(staging, EncodeConfig(
            mode="single",
            output=output,
            overwrite=self.config.overwrite,
            root_chapter=True,
            extended_image_formats=self.config.extended_image_formats,
            disable_nat_sort=self.config.disable_nat_sort,
            compress_losslessly=self.config.compress_losslessly,
        ))
        volume = encoded.volumes[0]
        if volume.error is not None:
            raise volume.error
        return volume.pages

    def run(self) -> RebuildResult:
        """Run the pipeline once. Core failures are returned, not raised.

        Anything else (a keyboard interrupt, for instance) still removes the
        staging area, then propagates.
        """
        t0 = time.time()
        result = RebuildResult(source=self.source, output=None, state=self.state)
        try:
            if not self.source.is_file():
                raise IOFailure(self.source, "input file was not found")
            output = resolve_rebuild_output(self.source, self.config)
            if output.exists() and not self.config.overwrite:
                raise OutputExists(output)
            result.output = output

            with staging_area(self.config.temporary_dir) as staging:
                self._enter(RebuildState.EXTRACTING)
                pages_dir = staging / "pages"
                extracted = self._extract(pages_dir)
                logger.debug("Extracted %d page(s) to '%s'", extracted, pages_dir)

                self._enter(RebuildState.ENCODING)
                result.pages = self._encode(pages_dir, output)

                self._enter(RebuildState.CLEANUP)
        except ComicEncoderError as exc:
            self.failed_stage = self.state
            self._enter(RebuildState.FAILED)
            logger.error(
                "Failed to rebuild '%s' while %s: %s", self.source, self.failed_stage.value, exc,
            )
            result.output = None
            result.error = exc
        except BaseException:
            self.failed_stage = self.state
            self._enter(RebuildState.FAILED)
            raise
        else:
            self._enter(RebuildState.DONE)

        result.state = self.state
        result.failed_stage = self.failed_stage
        result.elapsed = time.time() - t0
        if result.ok:
            logger.info(
                "Rebuilt '%s' into '%s' (%d pages) in %.3f s.",
                self.source.name, result.output, result.pages, result.elapsed,
            )
        return result


def rebuild(source: str | Path, config: RebuildConfig | None = None) -> RebuildResult:
    """Rebuild one comic file, raising the failure if there is one."""
    result = RebuildPipeline(source, config).run()
    if result.error is not None:
        raise result.error
    return result


@dataclass
class BatchRebuildResult:
    directory: Path
    results: list[RebuildResult] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def succeeded(self) -> list[RebuildResult]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> list[RebuildResult]:
        return [r for r in self.results if not r.ok]


def find_comics(directory: Path, recursive: bool = False, natural_sort: bool = True) -> list[Path]:
    """Decodable files (zip, cbz, pdf) in *directory*, sorted by relative path."""
    pattern = "**/*" if recursive else "*"
    comics = [p for p in directory.glob(pattern) if p.is_file() and is_supported_for_decoding(p)]
    if natural_sort:
        comics.sort(key=lambda p: natural_path_key(p.relative_to(directory).as_posix()))
    else:
        comics.sort(key=lambda p: p.relative_to(directory).as_posix())
    return comics


def rebuild_directory(directory: str | Path, config: RebuildConfig | None = None) -> BatchRebuildResult:
    """Rebuild every comic found in *directory*.

    A failing comic does not stop the others; inspect ``failed`` on the
    result. With ``config.output`` set, rebuilt volumes mirror the source
    layout under that directory.

    Two comics that would rebuild to the same file (``x.zip`` next to
    ``x.pdf``) are not both written: the later one in order fails with
    ``OutputExists`` without being extracted.
    """
    config = config or RebuildConfig()
    directory = Path(directory)
    t0 = time.time()
    if not directory.is_dir():
        raise IOFailure(directory, "input directory was not found")

    comics = find_comics(directory, config.recursive, not config.disable_nat_sort)
    if not comics:
        logger.warning("No comic found in '%s'", directory)
    else:
        logger.info("Found %d comic(s) to rebuild in '%s'", len(comics), directory)

    if config.output is not None:
        ensure_directory(config.output, config.create_output_dir)

    def item_config(source: Path) -> RebuildConfig:
        if config.output is None:
            return config
        return replace(config, output=target_of(source), create_output_dir=True)

    def target_of(source: Path) -> Path:
        if config.output is None:
            return source.with_suffix(".cbz")
        return config.output / source.relative_to(directory).with_suffix(".cbz")

    # "x.zip" and "x.pdf" both rebuild to "x.cbz": the first in order wins
    results: list[RebuildResult | None] = [None] * len(comics)
    claimed: dict[Path, Path] = {}
    jobs = []
    for i, comic in enumerate(comics):
        target = target_of(comic)
        if target in claimed:
            logger.error(
                "Failed to rebuild '%s': '%s' is already the output of '%s'",
                comic, target, claimed[target],
            )
            results[i] = RebuildResult(
                source=comic,
                output=None,
                state=RebuildState.FAILED,
                failed_stage=RebuildState.START,
                error=OutputExists(target),
            )
        else:
            claimed[target] = comic
            jobs.append(i)

    if config.max_workers > 1 and len(jobs) > 1:
        with ThreadPoolExecutor(max_workers=config.max_workers) as pool:
            futures = {i: pool.submit(RebuildPipeline(comics[i], item_config(comics[i])).run) for i in jobs}
            for i, future in futures.items():
                results[i] = future.result()
    else:
        for n, i in enumerate(jobs, start=1):
            logger.info("[%d/%d] Rebuilding '%s'", n, len(jobs), comics[i].name)
            results[i] = RebuildPipeline(comics[i], item_config(comics[i])).run()

    batch = BatchRebuildResult(directory=directory, results=results, elapsed=time.time() - t0)
    logger.info(
        "Rebuilt %d comic(s), %d failed.", len(batch.succeeded), len(batch.failed),
    )
    return batch
