"""Tests for plan_volumes: grouping ordered chapters into volumes."""

from pathlib import Path

import pytest

from shared.chapter_resolver import Chapter
from shared.errors import InvalidGroupSize, VolumeNameConflict
from shared.volume_planner import plan_volumes


def _chapters(count, first_ordinal=1):
    return [
        Chapter(path=Path(f"/comic/Chapter_{i}"), name=f"Chapter_{i}", kind="directory", ordinal=i)
        for i in range(first_ordinal, first_ordinal + count)
    ]


class TestCompile:
    """Compile(n): consecutive groups of at most n chapters."""

    def test_groups_of_five_over_twelve(self):
        plan = plan_volumes(_chapters(12), "compile", group_size=5)

        assert [len(e.chapter_indices) for e in plan] == [5, 5, 2]
        assert [e.name for e in plan] == ["Volume-1.cbz", "Volume-2.cbz", "Volume-3.cbz"]
        assert [(e.first_chapter, e.last_chapter) for e in plan] == [(1, 5), (6, 10), (11, 12)]

    def test_every_chapter_exactly_once_in_order(self):
        plan = plan_volumes(_chapters(23), "compile", group_size=4)

        flat = [i for e in plan for i in e.chapter_indices]
        assert flat == list(range(23))
        assert [e.number for e in plan] == list(range(1, len(plan) + 1))

    def test_volume_numbers_are_zero_padded(self):
        plan = plan_volumes(_chapters(12), "compile", group_size=1)

        assert plan[0].name == "Volume-01.cbz"
        assert plan[-1].name == "Volume-12.cbz"

    def test_chapters_suffix(self):
        plan = plan_volumes(_chapters(12), "compile", group_size=5, chapters_suffix=True)

        assert [e.name for e in plan] == [
            "Volume-1 (c01-c05).cbz",
            "Volume-2 (c06-c10).cbz",
            "Volume-3 (c11-c12).cbz",
        ]

    def test_ordinals_come_from_the_selection(self):
        plan = plan_volumes(_chapters(4, first_ordinal=7), "compile", group_size=3)

        assert [(e.first_chapter, e.last_chapter) for e in plan] == [(7, 9), (10, 10)]

    @pytest.mark.parametrize("size", [0, -1, None])
    def test_invalid_group_size(self, size):
        with pytest.raises(InvalidGroupSize):
            plan_volumes(_chapters(3), "compile", group_size=size)

    def test_group_larger_than_chapter_count(self):
        plan = plan_volumes(_chapters(3), "compile", group_size=10)

        assert len(plan) == 1
        assert plan[0].chapter_indices == (0, 1, 2)


class TestIndividualAndSingle:
    """Individual: one volume per chapter. Single: one volume for all."""

    def test_individual(self):
        plan = plan_volumes(_chapters(12), "individual")

        assert len(plan) == 12
        assert all(len(e.chapter_indices) == 1 for e in plan)
        assert plan[9].name == "Chapter_10.cbz"

    def test_individual_duplicate_names_rejected(self):
        chapters = [
            Chapter(path=Path("/comic/Extra"), name="Extra", kind="directory", ordinal=1),
            Chapter(path=Path("/comic/Extra.pdf"), name="Extra", kind="pdf", ordinal=2),
        ]

        with pytest.raises(VolumeNameConflict, match="Extra.cbz"):
            plan_volumes(chapters, "individual")

    def test_single_default_name(self):
        plan = plan_volumes(_chapters(12), "single")

        assert len(plan) == 1
        assert plan[0].chapter_indices == tuple(range(12))
        assert plan[0].name == "Volume.cbz"

    def test_single_custom_name_and_extension(self):
        plan = plan_volumes(_chapters(2), "single", output_name="My Comic", extension="zip")

        assert plan[0].name == "My Comic.zip"

    def test_empty_chapter_list(self):
        assert plan_volumes([], "single") == []
        assert plan_volumes([], "compile", group_size=2) == []


class TestDeterminism:
    def test_same_input_same_plan(self):
        chapters = _chapters(9)
        assert plan_volumes(chapters, "compile", group_size=4) == plan_volumes(chapters, "compile", group_size=4)

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            plan_volumes(_chapters(2), "shuffle")
