"""Tests for the comic_encoder command line."""

import zipfile

import pytest

from comic_encoder import build_parser, main


@pytest.fixture
def comic(tmp_path, make_image):
    path = tmp_path / "comic.zip"
    with zipfile.ZipFile(path, "w") as zf:
        for i in (2, 1):
            zf.writestr(f"{i}.png", make_image(color=(i, 0, 0)))
    return path


class TestParser:
    def test_compile_takes_group_size_before_input(self):
        args = build_parser().parse_args(["encode", "compile", "5", "manga", "-o", "out"])

        assert args.command == "encode"
        assert args.method == "compile"
        assert args.chapters_per_volume == 5
        assert args.input == "manga"
        assert args.output == "out"

    def test_single_has_no_group_size(self):
        args = build_parser().parse_args(["encode", "single", "manga", "--root-chapter"])

        assert args.method == "single"
        assert args.root_chapter
        assert not hasattr(args, "chapters_per_volume")

    def test_silent_and_verbose_are_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["decode", "comic.cbz", "--silent", "--verbose"])

    def test_empty_chapter_choices(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["encode", "individual", "manga", "--empty-chapters", "ignore"])


class TestEncodeCommand:
    def test_compile(self, make_chapters, capsys):
        root = make_chapters(12, pages=1)

        status = main(["encode", "compile", "5", str(root)])

        out = capsys.readouterr().out
        assert status == 0
        assert sorted(p.name for p in root.glob("*.cbz")) == ["Volume-1.cbz", "Volume-2.cbz", "Volume-3.cbz"]
        assert "Chapters: 12 out of 12 (0 ignored)" in out
        assert "Done in" in out

    def test_invalid_range_is_reported(self, make_chapters, capsys):
        root = make_chapters(12, pages=1)

        status = main(["encode", "compile", "5", str(root), "--start-chapter", "15"])

        out = capsys.readouterr().out
        assert status == 1
        assert "ERROR:" in out
        assert not list(root.glob("*.cbz"))

    def test_invalid_group_size_is_reported(self, make_chapters, capsys):
        root = make_chapters(2, pages=1)

        assert main(["encode", "compile", "0", str(root)]) == 1
        assert "ERROR:" in capsys.readouterr().out

    def test_failed_volume_sets_status(self, make_chapters, capsys):
        root = make_chapters(2, pages=1)
        (root / "Chapter_1.cbz").write_bytes(b"keep me")

        status = main(["encode", "individual", str(root)])

        assert status == 1
        assert "FAILED" in capsys.readouterr().out
        assert (root / "Chapter_2.cbz").is_file()

    def test_log_file(self, make_chapters, tmp_path, capsys):
        root = make_chapters(2, pages=1)
        log = tmp_path / "encode.log"

        status = main(["encode", "single", str(root), "--log-file", str(log)])

        assert status == 0
        assert "Done in" in log.read_text()
        assert "Done in" in capsys.readouterr().out


class TestDecodeCommand:
    def test_decode(self, comic, tmp_path, capsys):
        out = tmp_path / "pages"

        status = main(["decode", str(comic), "-o", str(out)])

        assert status == 0
        assert sorted(p.name for p in out.iterdir()) == ["1.png", "2.png"]
        assert "2 page(s) extracted" in capsys.readouterr().out

    def test_unsupported_format(self, tmp_path, capsys):
        path = tmp_path / "comic.rar"
        path.write_bytes(b"Rar!")

        assert main(["decode", str(path)]) == 1
        assert "ERROR:" in capsys.readouterr().out


class TestRebuildCommand:
    def test_single_file(self, comic, tmp_path, capsys):
        status = main(["rebuild", str(comic), "--temporary-dir", str(tmp_path)])

        assert status == 0
        assert comic.with_suffix(".cbz").is_file()
        assert "Done in" in capsys.readouterr().out

    def test_directory_with_a_broken_comic(self, comic, tmp_path, capsys):
        (tmp_path / "broken.zip").write_bytes(b"not a zip")

        status = main(["rebuild", str(tmp_path)])

        out = capsys.readouterr().out
        assert status == 1
        assert "OK     comic.zip" in out
        assert "FAILED broken.zip (extracting)" in out
        assert comic.with_suffix(".cbz").is_file()
