"""Group an ordered chapter list into output volumes."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from shared.chapter_resolver import Chapter
from shared.errors import InvalidGroupSize, VolumeNameConflict

PartitionMode = Literal["single", "individual", "compile"]
PARTITION_MODES = ("single", "individual", "compile")

DEFAULT_SINGLE_NAME = "Volume"


@dataclass(frozen=True)
class VolumePlanEntry:
    number: int  # 1-indexed volume number
    name: str  # output file name, extension included
    chapter_indices: tuple[int, ...]  # positions in the planned chapter list
    first_chapter: int  # inclusive chapter ordinal, for reporting
    last_chapter: int  # inclusive chapter ordinal, for reporting


def _groups(count: int, size: int) -> list[range]:
    return [range(i, min(i + size, count)) for i in range(0, count, size)]


def plan_volumes(
    chapters: Sequence[Chapter],
    mode: PartitionMode,
    group_size: int | None = None,
    output_name: str | None = None,
    chapters_suffix: bool = False,
    extension: str = "cbz",
) -> list[VolumePlanEntry]:
    """Assign already sorted and filtered *chapters* to volumes.

    Modes:
        - "single": every chapter in one volume named ``<output_name>.<ext>``.
        - "individual": one volume per chapter, named after the chapter.
        - "compile": consecutive groups of at most *group_size* chapters,
          named ``Volume-<k>.<ext>`` (k from 1, zero-padded to the width of
          the volume count). The last group may be smaller.

    With *chapters_suffix*, compiled names also carry the chapter range:
    ``Volume-1 (c01-c05).cbz``.

    Grouping is strictly sequential: no reordering, no rebalancing. The plan
    only depends on its arguments.

    Raises:
        InvalidGroupSize: "compile" with a group size below 1.
        VolumeNameConflict: two chapters give the same "individual" volume
            name (a directory "x" next to "x.pdf", for instance).
        ValueError: unknown mode.
    """
    if mode not in PARTITION_MODES:
        raise ValueError(f"Unknown partition mode: {mode!r}. Choose from: {list(PARTITION_MODES)}")

    if mode == "compile":
        if group_size is None or group_size < 1:
            raise InvalidGroupSize(
                f"There must be at least 1 chapter per volume, got {group_size}"
            )
        groups = _groups(len(chapters), group_size)
    elif mode == "individual":
        groups = _groups(len(chapters), 1)
    else:
        groups = [range(len(chapters))] if chapters else []

    volume_width = len(str(len(groups)))
    chapter_width = len(str(max((c.ordinal for c in chapters), default=1)))

    names: dict[str, str] = {}
    plan = []
    for number, group in enumerate(groups, start=1):
        members = [chapters[i] for i in group]
        first, last = members[0].ordinal, members[-1].ordinal

        if mode == "compile":
            stem = f"Volume-{number:0{volume_width}d}"
            if chapters_suffix:
                stem += f" (c{first:0{chapter_width}d}-c{last:0{chapter_width}d})"
        elif mode == "individual":
            stem = members[0].name
        else:
            stem = output_name or DEFAULT_SINGLE_NAME

        name = f"{stem}.{extension}"
        if name in names:
            raise VolumeNameConflict(
                f"Chapters '{names[name]}' and '{members[0].name}' would both be written to '{name}'"
            )
        names[name] = members[0].name

        plan.append(VolumePlanEntry(
            number=number,
            name=name,
            chapter_indices=tuple(group),
            first_chapter=first,
            last_chapter=last,
        ))
    return plan
