"""Tests for PDF assembly and the tesseract OCR pass."""

import io
import subprocess
from unittest.mock import patch

import img2pdf
import pytest
from PIL import Image
from pypdf import PdfReader

from anyflip_dl import document
from anyflip_dl.errors import AssemblyError


def write_image(path, mode="RGB", fmt="JPEG", size=(30, 40)):
    color = (10, 120, 200, 128) if mode == "RGBA" else (10, 120, 200)
    Image.new(mode, size, color).save(path, format=fmt)
    return path


class TestPreparePageImage:
    """Tests for prepare_page_image."""

    def test_jpeg_passes_through(self, tmp_path):
        """Test RGB JPEG bytes are used unchanged."""
        path = write_image(tmp_path / "0000.jpg")

        assert document.prepare_page_image(path) == path.read_bytes()

    def test_alpha_png_is_flattened(self, tmp_path):
        """Test transparent images become RGB JPEG."""
        path = write_image(tmp_path / "0000.png", mode="RGBA", fmt="PNG")

        data = document.prepare_page_image(path)

        with Image.open(io.BytesIO(data)) as image:
            assert image.format == "JPEG"
            assert image.mode == "RGB"

    def test_webp_is_reencoded(self, tmp_path):
        """Test WebP pages are converted to JPEG."""
        path = write_image(tmp_path / "0000.webp", fmt="WEBP")

        with Image.open(io.BytesIO(document.prepare_page_image(path))) as image:
            assert image.format == "JPEG"

    def test_unreadable_image(self, tmp_path):
        """Test non-image data raises AssemblyError."""
        path = tmp_path / "0000.jpg"
        path.write_bytes(b"<html>not an image</html>")

        with pytest.raises(AssemblyError):
            document.prepare_page_image(path)


class TestCreatePdf:
    """Tests for create_pdf."""

    def test_pages_in_order(self, tmp_path):
        """Test each image becomes one page in file order."""
        images = [
            write_image(tmp_path / "0000.jpg", size=(30, 40)),
            write_image(tmp_path / "0001.png", mode="RGBA", fmt="PNG", size=(50, 20)),
        ]
        output = tmp_path / "out" / "book.pdf"

        document.create_pdf(images, output)

        reader = PdfReader(str(output))
        assert len(reader.pages) == 2
        first, second = reader.pages
        assert float(first.mediabox.width) < float(first.mediabox.height)
        assert float(second.mediabox.width) > float(second.mediabox.height)

    def test_no_images(self, tmp_path):
        """Test an empty page list raises AssemblyError."""
        with pytest.raises(AssemblyError):
            document.create_pdf([], tmp_path / "book.pdf")


class TestOcr:
    """Tests for the tesseract-backed OCR assembly."""

    def _fake_tesseract(self, cmd, **kwargs):
        image_path, output_base = cmd[1], cmd[2]
        with open(output_base + ".pdf", "wb") as handle:
            handle.write(img2pdf.convert(image_path))
        return subprocess.CompletedProcess(cmd, 0)

    @patch("anyflip_dl.document.shutil.which", return_value="/usr/bin/tesseract")
    @patch("anyflip_dl.document.subprocess.run")
    def test_merges_page_pdfs_in_order(self, mock_run, _which, tmp_path):
        """Test page PDFs are merged in order and the work folder removed."""
        mock_run.side_effect = self._fake_tesseract
        images = [write_image(tmp_path / f"{index:04d}.jpg") for index in range(3)]
        work_dir = tmp_path / "pages_pdf"
        output = tmp_path / "book.pdf"

        document.create_ocr_pdf(images, output, work_dir)

        assert len(PdfReader(str(output)).pages) == 3
        commands = [call.args[0] for call in mock_run.call_args_list]
        assert [cmd[1] for cmd in commands] == [str(path) for path in images]
        assert all(cmd[0] == "tesseract" and cmd[3] == "pdf" for cmd in commands)
        assert not work_dir.exists()

    @patch("anyflip_dl.document.shutil.which", return_value=None)
    def test_missing_tesseract(self, _which, tmp_path):
        """Test a missing tesseract binary raises AssemblyError."""
        image = write_image(tmp_path / "0000.jpg")

        with pytest.raises(AssemblyError, match="tesseract"):
            document.create_ocr_pdf([image], tmp_path / "book.pdf", tmp_path / "work")

    @patch("anyflip_dl.document.shutil.which", return_value="/usr/bin/tesseract")
    @patch("anyflip_dl.document.subprocess.run")
    def test_tesseract_failure(self, mock_run, _which, tmp_path):
        """Test a failing tesseract run raises and cleans up."""
        mock_run.side_effect = subprocess.CalledProcessError(1, ["tesseract"], stderr=b"bad image")
        image = write_image(tmp_path / "0000.jpg")
        work_dir = tmp_path / "work"

        with pytest.raises(AssemblyError, match="bad image"):
            document.create_ocr_pdf([image], tmp_path / "book.pdf", work_dir)

        assert not work_dir.exists()
        assert not (tmp_path / "book.pdf").exists()

    @patch("anyflip_dl.document.shutil.which", return_value="/usr/bin/tesseract")
    @patch("anyflip_dl.document.subprocess.run")
    def test_existing_work_folder_is_left_alone(self, mock_run, _which, tmp_path):
        """Test an existing work folder is refused and its contents kept."""
        image = write_image(tmp_path / "0000.jpg")
        work_dir = tmp_path / "Sample Book_pdf"
        work_dir.mkdir()
        (work_dir / "mine.txt").write_text("mine")

        with pytest.raises(AssemblyError, match="already exists"):
            document.create_ocr_pdf([image], tmp_path / "book.pdf", work_dir)

        assert (work_dir / "mine.txt").read_text() == "mine"
        mock_run.assert_not_called()
