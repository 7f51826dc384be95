"""Tests for ZipPageReader and the extension-based reader dispatch."""

import zipfile

import pytest

from shared.archive_codec import ReaderOptions, open_reader
from shared.archive_codec.read_pdf import PdfPageReader
from shared.archive_codec.read_zip import ZipPageReader
from shared.errors import CorruptArchive, IOFailure, UnsupportedFormat


@pytest.fixture
def comic_zip(tmp_path, make_image):
    path = tmp_path / "comic.cbz"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("ch2/", b"")
        zf.writestr("ch10/1.png", make_image(color=(1, 0, 0)))
        zf.writestr("ch2/10.png", make_image(color=(2, 0, 0)))
        zf.writestr("ch2/9.jpg", make_image("jpg", color=(3, 0, 0)))
        zf.writestr("ComicInfo.xml", "<ComicInfo/>")
        zf.writestr("__MACOSX/ch2/._9.jpg", b"resource fork")
    return path


class TestZipPageReader:
    """ZipPageReader lists image entries in natural path order."""

    def test_order_and_filtering(self, comic_zip):
        with open_reader(comic_zip) as reader:
            assert isinstance(reader, ZipPageReader)
            assert reader.names == ["ch2/9.jpg", "ch2/10.png", "ch10/1.png"]
            assert "ComicInfo.xml" in reader.skipped
            assert "__MACOSX/ch2/._9.jpg" in reader.skipped

    def test_pages_carry_bytes_and_extension(self, comic_zip, make_image):
        with open_reader(comic_zip) as reader:
            pages = list(reader)

        assert [p.ext for p in pages] == ["jpg", "png", "png"]
        assert [p.index for p in pages] == [0, 1, 2]
        assert pages[1].data == make_image(color=(2, 0, 0))

    def test_iteration_is_restartable(self, comic_zip):
        with open_reader(comic_zip) as reader:
            first = [p.name for p in reader]
            second = [p.name for p in reader]
        assert first == second

    def test_non_images_kept_when_not_images_only(self, comic_zip):
        with open_reader(comic_zip, ReaderOptions(images_only=False)) as reader:
            assert "ComicInfo.xml" in reader.names
            assert not any(name.startswith("__MACOSX") for name in reader.names)

    def test_codepoint_order(self, comic_zip):
        with open_reader(comic_zip, ReaderOptions(natural_sort=False)) as reader:
            assert reader.names == ["ch10/1.png", "ch2/10.png", "ch2/9.jpg"]

    def test_read_entry_by_name(self, comic_zip):
        with open_reader(comic_zip) as reader:
            page = reader.read_entry("ch10/1.png")
        assert page.index == 2

    def test_missing_entry(self, comic_zip):
        with open_reader(comic_zip) as reader:
            with pytest.raises(CorruptArchive):
                reader.read_entry("nope.png")

    def test_corrupt_archive(self, tmp_path):
        path = tmp_path / "broken.cbz"
        path.write_bytes(b"this is not a zip file")
        with pytest.raises(CorruptArchive):
            open_reader(path)

    def test_encrypted_entry(self, comic_zip, patch_zip_headers):
        patch_zip_headers(comic_zip, flag_bits=0x1)
        with open_reader(comic_zip) as reader:
            with pytest.raises(CorruptArchive, match="encrypted"):
                reader.read(0)

    def test_unknown_compression_method(self, comic_zip, patch_zip_headers):
        patch_zip_headers(comic_zip, method=99)
        with open_reader(comic_zip) as reader:
            with pytest.raises(CorruptArchive):
                list(reader)

    def test_missing_file(self, tmp_path):
        with pytest.raises(IOFailure):
            open_reader(tmp_path / "missing.zip")


class TestOpenReaderDispatch:
    """open_reader() picks the backend from the extension."""

    @pytest.mark.parametrize("name", ["comic.rar", "comic.7z", "comic", "page.png"])
    def test_unsupported(self, tmp_path, name):
        path = tmp_path / name
        path.write_bytes(b"")
        with pytest.raises(UnsupportedFormat):
            open_reader(path)

    def test_uppercase_extension(self, comic_zip):
        upper = comic_zip.rename(comic_zip.with_name("COMIC.ZIP"))
        with open_reader(upper) as reader:
            assert isinstance(reader, ZipPageReader)

    def test_pdf_goes_to_pymupdf(self, tmp_path):
        import pymupdf

        path = tmp_path / "doc.pdf"
        doc = pymupdf.open()
        doc.new_page()
        doc.save(str(path))
        doc.close()

        with open_reader(path) as reader:
            assert isinstance(reader, PdfPageReader)
            assert len(reader) == 1
