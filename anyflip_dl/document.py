"""Assembly of downloaded page images into a single PDF, optionally with OCR text."""

from __future__ import annotations

import io
import logging
import shutil
import subprocess
import time
from pathlib import Path
from typing import List, Sequence

import img2pdf
from PIL import Image
from pypdf import PdfWriter

from .errors import AssemblyError

logger = logging.getLogger("anyflip_dl.document")

TESSERACT_BINARY = "tesseract"
DEFAULT_OCR_TIMEOUT = 300
PASSTHROUGH_FORMATS = {"JPEG", "PNG"}


def _flatten(image: Image.Image) -> bytes:
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.split()[3])
        image = background
    out = io.BytesIO()
    image.convert("RGB").save(out, format="JPEG", quality=95)
    return out.getvalue()


def prepare_page_image(path: Path) -> bytes:
    """Return image bytes img2pdf can embed.

    JPEG and opaque PNG pages pass through untouched, everything else is
    re-encoded as an RGB JPEG.
    """
    data = path.read_bytes()
    try:
        with Image.open(io.BytesIO(data)) as image:
            opaque = image.mode not in ("RGBA", "LA", "P")
            if image.format in PASSTHROUGH_FORMATS and opaque:
                return data
            logger.debug("Re-encoding %s (%s, %s)", path.name, image.format, image.mode)
            return _flatten(image)
    except OSError as exc:
        raise AssemblyError(f"Cannot read page image {path}: {exc}") from exc


def create_pdf(image_paths: Sequence[Path], output_path: Path) -> Path:
    """Combine page images, in the given order, into ``output_path``."""
    if not image_paths:
        raise AssemblyError("No page images to convert")
    pages = [prepare_page_image(path) for path in image_paths]
    try:
        pdf_bytes = img2pdf.convert(pages)
    except (img2pdf.ImageOpenError, img2pdf.AlphaChannelError, ValueError) as exc:
        raise AssemblyError(f"img2pdf failed: {exc}") from exc
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(pdf_bytes)
    logger.info("Saved PDF to %s (%d pages)", output_path, len(pages))
    return output_path


def ocr_page(image_path: Path, output_base: Path, timeout: int = DEFAULT_OCR_TIMEOUT) -> Path:
    """Run tesseract on one page and return the searchable single-page PDF."""
    cmd = [TESSERACT_BINARY, str(image_path), str(output_base), "pdf"]
    try:
        subprocess.run(cmd, check=True, capture_output=True, timeout=timeout)
    except subprocess.TimeoutExpired as exc:
        raise AssemblyError(f"tesseract timed out after {timeout}s on {image_path.name}") from exc
    except subprocess.CalledProcessError as exc:
        stderr = (exc.stderr or b"").decode("utf-8", errors="replace").strip()
        raise AssemblyError(
            f"tesseract failed on {image_path.name} (exit code {exc.returncode}): {stderr}"
        ) from exc
    return output_base.with_name(output_base.name + ".pdf")


def merge_pdfs(pdf_paths: Sequence[Path], output_path: Path) -> Path:
    writer = PdfWriter()
    for path in pdf_paths:
        writer.append(str(path))
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("wb") as handle:
        writer.write(handle)
    writer.close()
    return output_path


def create_ocr_pdf(image_paths: Sequence[Path], output_path: Path, work_dir: Path) -> Path:
    """OCR every page with tesseract, then merge the page PDFs in order.

    ``work_dir`` receives the intermediate single-page PDFs. It must not
    exist yet and is removed once the merged document has been written.
    """
    if not image_paths:
        raise AssemblyError("No page images to convert")
    if shutil.which(TESSERACT_BINARY) is None:
        raise AssemblyError(
            "tesseract is not installed or not on PATH. Install it or pass --no-ocr."
        )
    try:
        work_dir.mkdir(parents=True)
    except FileExistsError as exc:
        raise AssemblyError(f"OCR work folder already exists: {work_dir}") from exc
    page_pdfs: List[Path] = []
    start = time.perf_counter()
    try:
        for index, image_path in enumerate(image_paths, start=1):
            page_pdfs.append(ocr_page(image_path, work_dir / image_path.stem))
            logger.info("OCR page %d/%d", index, len(image_paths))
        merge_pdfs(page_pdfs, output_path)
    finally:
        shutil.rmtree(work_dir, ignore_errors=True)
    logger.info(
        "Saved searchable PDF to %s (%d pages, OCR took %.2fs)",
        output_path,
        len(page_pdfs),
        time.perf_counter() - start,
    )
    return output_path
