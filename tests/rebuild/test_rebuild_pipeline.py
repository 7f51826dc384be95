"""Tests for the rebuild pipeline: staging, stage tracking and cleanup."""

import zipfile
from unittest.mock import MagicMock, patch

import pytest

from rebuild import RebuildConfig, RebuildPipeline, RebuildState, rebuild, staging_area
from shared.archive_codec import PARTIAL_SUFFIX
from shared.errors import CorruptArchive, IOFailure, OutputExists


def _page_bytes(path):
    with zipfile.ZipFile(path) as zf:
        return [zf.read(info) for info in zf.infolist() if not info.is_dir()]


def _failing_pages(chapter, config):
    raise IOFailure(chapter.path, "simulated read failure")
    yield


@pytest.fixture
def source(tmp_path, make_image):
    path = tmp_path / "comic.zip"
    with zipfile.ZipFile(path, "w") as zf:
        for i in (3, 1, 20, 2):
            zf.writestr(f"scans/{i}.png", make_image(color=(i, i, 0)))
        zf.writestr("notes.txt", "scanned by someone")
    return path


@pytest.fixture
def staging_parent(tmp_path):
    path = tmp_path / "staging"
    path.mkdir()
    return path


class TestStagingArea:
    def test_created_and_removed(self, staging_parent):
        with staging_area(staging_parent) as staging:
            assert staging.is_dir()
            assert staging.parent == staging_parent
            (staging / "page.png").write_bytes(b"x")
        assert not staging.exists()

    def test_removed_on_error(self, staging_parent):
        with pytest.raises(RuntimeError):
            with staging_area(staging_parent) as staging:
                raise RuntimeError("boom")
        assert not staging.exists()

    def test_unique_names(self, staging_parent):
        with staging_area(staging_parent) as first, staging_area(staging_parent) as second:
            assert first != second

    def test_missing_parent(self, tmp_path):
        with pytest.raises(IOFailure):
            with staging_area(tmp_path / "missing"):
                pass


class TestRebuild:
    """A successful rebuild: <stem>.cbz beside the source, pages in order."""

    def test_zip_to_cbz(self, source, staging_parent, make_image):
        result = rebuild(source, RebuildConfig(temporary_dir=staging_parent))

        assert result.ok
        assert result.state is RebuildState.DONE
        assert result.failed_stage is None
        assert result.output == source.with_suffix(".cbz")
        assert result.pages == 4
        assert _page_bytes(result.output) == [make_image(color=(i, i, 0)) for i in (1, 2, 3, 20)]
        assert list(staging_parent.iterdir()) == []

    def test_explicit_output_directory(self, source, tmp_path, staging_parent):
        out = tmp_path / "out"
        out.mkdir()

        result = rebuild(source, RebuildConfig(output=out, temporary_dir=staging_parent))

        assert result.output == out / "comic.cbz"
        assert result.output.is_file()

    def test_rebuilding_twice_keeps_pages(self, source, staging_parent):
        first = rebuild(source, RebuildConfig(temporary_dir=staging_parent))
        before = _page_bytes(first.output)

        second = rebuild(first.output, RebuildConfig(temporary_dir=staging_parent, overwrite=True))

        assert second.output == first.output
        assert second.pages == first.pages
        assert _page_bytes(second.output) == before

    def test_compress_losslessly(self, source, staging_parent):
        result = rebuild(source, RebuildConfig(temporary_dir=staging_parent, compress_losslessly=True))

        with zipfile.ZipFile(result.output) as zf:
            pages = [info for info in zf.infolist() if not info.is_dir()]
            assert all(info.compress_type == zipfile.ZIP_DEFLATED for info in pages)

    def test_pdf_source(self, tmp_path, staging_parent, make_image):
        pdf = tmp_path / "scan.pdf"
        pdf.write_bytes(b"%PDF-1.4")
        pages = []
        for i in range(2):
            page = MagicMock()
            page.get_images.return_value = [(i + 1,)]
            page.get_text.return_value = ""
            pages.append(page)
        doc = MagicMock()
        doc.__len__ = MagicMock(return_value=2)
        doc.__getitem__ = MagicMock(side_effect=lambda i: pages[i])
        doc.needs_pass = False
        jpegs = {1: make_image("jpg", color=(250, 0, 0)), 2: make_image("jpg", color=(0, 0, 250))}
        doc.extract_image.side_effect = lambda xref: {"image": jpegs[xref], "ext": "jpeg"}

        with patch("shared.archive_codec.read_pdf.pymupdf") as mock_pymupdf:
            mock_pymupdf.open.return_value = doc
            result = rebuild(pdf, RebuildConfig(temporary_dir=staging_parent))

        assert result.output == tmp_path / "scan.cbz"
        assert _page_bytes(result.output) == [jpegs[1], jpegs[2]]
        with zipfile.ZipFile(result.output) as zf:
            assert all(n.endswith((".jpg", "/")) for n in zf.namelist())


    def test_pdf_with_extended_embedded_image_keeps_every_page(self, tmp_path, staging_parent, make_image):
        pdf = tmp_path / "mixed.pdf"
        pdf.write_bytes(b"%PDF-1.4")
        embedded = {1: ("jpeg", make_image("jpg")), 2: ("tiff", make_image("tiff"))}
        rendered = make_image(color=(0, 250, 0))
        pages = []
        for xref in embedded:
            page = MagicMock()
            page.get_images.return_value = [(xref,)]
            page.get_text.return_value = ""
            page.get_pixmap.return_value.tobytes.return_value = rendered
            pages.append(page)
        doc = MagicMock()
        doc.__len__ = MagicMock(return_value=2)
        doc.__getitem__ = MagicMock(side_effect=lambda i: pages[i])
        doc.needs_pass = False
        doc.extract_image.side_effect = lambda xref: {"image": embedded[xref][1], "ext": embedded[xref][0]}

        with patch("shared.archive_codec.read_pdf.pymupdf") as mock_pymupdf:
            mock_pymupdf.open.return_value = doc
            result = rebuild(pdf, RebuildConfig(temporary_dir=staging_parent))

        assert result.pages == 2
        assert _page_bytes(result.output) == [embedded[1][1], rendered]

class TestRebuildFailures:
    """Failures record their stage and never leave staging or partial output behind."""

    def test_failure_while_encoding(self, source, staging_parent):
        with patch("encoder.build.load_chapter_pages", side_effect=_failing_pages):
            result = RebuildPipeline(source, RebuildConfig(temporary_dir=staging_parent)).run()

        assert result.state is RebuildState.FAILED
        assert result.failed_stage is RebuildState.ENCODING
        assert isinstance(result.error, IOFailure)
        assert list(staging_parent.iterdir()) == []
        assert not source.with_suffix(".cbz").exists()
        assert not list(source.parent.glob(f"*{PARTIAL_SUFFIX}"))

    def test_failure_while_extracting(self, tmp_path, staging_parent):
        broken = tmp_path / "broken.cbz"
        broken.write_bytes(b"not a zip")

        result = RebuildPipeline(broken, RebuildConfig(temporary_dir=staging_parent, overwrite=True)).run()

        assert result.failed_stage is RebuildState.EXTRACTING
        assert isinstance(result.error, CorruptArchive)
        assert list(staging_parent.iterdir()) == []
        assert broken.read_bytes() == b"not a zip"

    def test_existing_output_fails_before_staging(self, source, staging_parent):
        source.with_suffix(".cbz").write_bytes(b"keep")

        result = RebuildPipeline(source, RebuildConfig(temporary_dir=staging_parent)).run()

        assert result.failed_stage is RebuildState.START
        assert isinstance(result.error, OutputExists)
        assert source.with_suffix(".cbz").read_bytes() == b"keep"

    def test_interrupt_still_cleans_up(self, source, staging_parent):
        pipeline = RebuildPipeline(source, RebuildConfig(temporary_dir=staging_parent))

        with patch("rebuild.pipeline.decode", side_effect=KeyboardInterrupt):
            with pytest.raises(KeyboardInterrupt):
                pipeline.run()

        assert pipeline.state is RebuildState.FAILED
        assert pipeline.failed_stage is RebuildState.EXTRACTING
        assert list(staging_parent.iterdir()) == []

    def test_rebuild_raises(self, tmp_path):
        with pytest.raises(IOFailure):
            rebuild(tmp_path / "missing.cbz")
