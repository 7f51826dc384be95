"""Find the chapters of an input root and select the requested range."""

from __future__ import annotations

import logging
from pathlib import Path

from shared.errors import InvalidRange, IOFailure, NoChaptersFound
from shared.image_formats import extension_of, has_image_ext, is_supported_for_decoding
from shared.natsort import sort_names

from .types import Chapter, ChapterKind, ChapterSelection

logger = logging.getLogger(__name__)


def _kind_of(path: Path) -> ChapterKind:
    return "pdf" if extension_of(path) == "pdf" else "zip"


def select_range(count: int, start: int | None = None, end: int | None = None) -> tuple[int, int]:
    """Validate 1-indexed inclusive bounds against *count* chapters.

    Returns ``(first, last)``. Missing bounds default to the whole set.
    Out-of-range bounds raise ``InvalidRange`` instead of being clamped.
    """
    first = 1 if start is None else start
    last = count if end is None else end
    if first < 1:
        raise InvalidRange(f"Start chapter must be 1 or higher, got {first}")
    if last < 1:
        raise InvalidRange(f"End chapter must be 1 or higher, got {last}")
    if first > last:
        raise InvalidRange(f"Start chapter ({first}) cannot be higher than the end chapter ({last})")
    if first > count:
        raise InvalidRange(f"Start chapter {first} is out of range: only {count} chapters were found")
    if last > count:
        raise InvalidRange(f"End chapter {last} is out of range: only {count} chapters were found")
    return first, last


def _scan_candidates(root: Path, containers: bool) -> list[tuple[Path, str, ChapterKind]]:
    try:
        entries = list(root.iterdir())
    except OSError as exc:
        raise IOFailure(root, f"failed to read the chapters directory: {exc}") from exc

    candidates = []
    for path in entries:
        if path.is_dir():
            candidates.append((path, path.name, "directory"))
        elif containers and path.is_file() and is_supported_for_decoding(path):
            candidates.append((path, path.stem, _kind_of(path)))
    return candidates


def _has_direct_images(root: Path, extended: bool) -> bool:
    return any(p.is_file() and has_image_ext(p, extended) for p in root.iterdir())


def resolve_chapters(
    root: str | Path,
    prefix: str | None = None,
    start: int | None = None,
    end: int | None = None,
    root_chapter: bool = False,
    containers: bool = False,
    extended_image_formats: bool = False,
    natural_sort: bool = True,
) -> ChapterSelection:
    """List the chapters under *root*, sorted, filtered and sliced.

    Every immediate subdirectory of *root* is a chapter. With *containers*,
    so is every ``.pdf`` / ``.zip`` / ``.cbz`` file sitting directly in it.
    When there is no such candidate but *root* holds images itself and
    *root_chapter* is set, *root* becomes the only chapter.

    Candidates are sorted by display name (natural order unless
    *natural_sort* is off), then dropped unless their name starts with
    *prefix*, then sliced to the 1-indexed inclusive ``start``..``end``
    bounds.

    Raises:
        NoChaptersFound: nothing left after filtering.
        InvalidRange: bounds outside the filtered set.
        IOFailure: *root* is missing or unreadable.
    """
    root = Path(root)
    if not root.is_dir():
        raise IOFailure(root, "chapters directory was not found")

    candidates = _scan_candidates(root, containers)
    if not candidates and root_chapter and _has_direct_images(root, extended_image_formats):
        logger.debug("Using '%s' itself as the only chapter", root)
        candidates = [(root, root.name, "directory")]

    candidates = sort_names(candidates, key=lambda c: c[1], natural=natural_sort)
    total = len(candidates)

    skipped_prefix = []
    if prefix:
        skipped_prefix = [name for _, name, _ in candidates if not name.startswith(prefix)]
        candidates = [c for c in candidates if c[1].startswith(prefix)]

    if not candidates:
        detail = f" starting with '{prefix}'" if prefix else ""
        raise NoChaptersFound(f"No chapter{detail} found in '{root}'")

    first, last = select_range(len(candidates), start, end)
    skipped_range = [name for _, name, _ in candidates[: first - 1] + candidates[last:]]

    chapters = [
        Chapter(path=path, name=name, kind=kind, ordinal=ordinal)
        for ordinal, (path, name, kind) in enumerate(candidates, start=1)
        if first <= ordinal <= last
    ]
    logger.debug(
        "Selected chapters %d to %d (%d out of %d)", first, last, len(chapters), total,
    )
    return ChapterSelection(
        chapters=chapters,
        total=total,
        skipped_prefix=skipped_prefix,
        skipped_range=skipped_range,
    )
