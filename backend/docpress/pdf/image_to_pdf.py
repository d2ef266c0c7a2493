"""
DocPress — Image to PDF converter.

Converts uploaded images into either one combined PDF or one PDF per
image. Every page is laid out by the compositor; images are decoded in
worker threads and reassembled in upload order.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass, field

import fitz

from docpress.errors import ConversionFailedError
from docpress.imaging.prepare import PreparedImage, is_svg, prepare_image
from docpress.layout.compositor import compute_placement
from docpress.layout.page_size import resolve_page_size
from docpress.models.layout import PageDimensions
from docpress.models.options import ConversionOptions, FitPolicy
from docpress.models.uploads import Upload
from docpress.storage.outputs import timestamp_ms
from docpress.utils.logging import logger, step_timer


@dataclass
class BuiltDocument:
    source_name: str
    pdf_name: str
    data: bytes
    pages: int


@dataclass
class ImageBatchResult:
    documents: list[BuiltDocument] = field(default_factory=list)
    succeeded: int = 0
    failed: int = 0
    failures: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        msg = f"Successfully converted {self.succeeded} image(s) to PDF."
        if self.failed:
            msg += f" {self.failed} image(s) failed."
        return msg

    def record_failure(self, filename: str, exc: Exception) -> None:
        self.failed += 1
        self.failures.append(f"{filename}: {exc}")
        logger.warning("  Skipped %s: %s", filename, exc)


def safe_stem(filename: str) -> str:
    """Replace anything but letters, digits and dots, then drop the extension."""
    safe = re.sub(r"[^a-zA-Z0-9.]", "_", filename)
    return re.sub(r"\.[^/.]+$", "", safe) or "image"


def draw_image_page(doc: fitz.Document, image: PreparedImage, page_size: PageDimensions, fit: FitPolicy) -> None:
    """Append one page to ``doc`` with ``image`` placed by the compositor."""
    placement = compute_placement(image.descriptor, page_size, fit)
    page = doc.new_page(width=page_size.width, height=page_size.height)
    rect = fitz.Rect(*placement.to_top_left(page_size.height))
    try:
        page.insert_image(rect, stream=image.data, keep_proportion=fit is not FitPolicy.STRETCH)
    except Exception:
        doc.delete_page(page.number)
        raise
    logger.info(
        "  Page %d: %s at x=%.1f y=%.1f w=%.1f h=%.1f",
        page.number + 1, image.filename,
        placement.x, placement.y, placement.width, placement.height,
    )


async def _prepare(upload: Upload, quality) -> PreparedImage:
    if is_svg(upload.filename):
        # PyMuPDF is not thread-safe; keep it on the loop thread
        return prepare_image(upload.filename, upload.data, quality)
    return await asyncio.to_thread(prepare_image, upload.filename, upload.data, quality)


async def _prepare_all(uploads: list[Upload], options: ConversionOptions) -> list[PreparedImage | BaseException]:
    # gather keeps input order regardless of completion order
    return await asyncio.gather(
        *(_prepare(u, options.quality) for u in uploads),
        return_exceptions=True,
    )


def _unwrap(item: PreparedImage | BaseException) -> PreparedImage:
    if isinstance(item, BaseException):
        raise item
    return item


async def images_to_pdf(uploads: list[Upload], options: ConversionOptions) -> ImageBatchResult:
    """
    Convert images to PDF under ``options``.

    Images that fail to decode or place are skipped and counted. Raises
    ConversionFailedError when none succeed.
    """
    page_size = resolve_page_size(options.page_size, options.orientation)
    fit = FitPolicy.parse(options.fit)
    result = ImageBatchResult()

    with step_timer(f"Convert {len(uploads)} image(s) → PDF"):
        prepared = await _prepare_all(uploads, options)
        single_document = options.combine or len(uploads) == 1

        if single_document:
            doc = fitz.open()
            try:
                for upload, item in zip(uploads, prepared):
                    try:
                        draw_image_page(doc, _unwrap(item), page_size, fit)
                        result.succeeded += 1
                    except Exception as exc:
                        result.record_failure(upload.filename, exc)

                if result.succeeded:
                    if options.combine:
                        source_name = f"{len(uploads)} images combined.pdf"
                        pdf_name = f"combined_images_{timestamp_ms()}.pdf"
                    else:
                        source_name = uploads[0].filename
                        pdf_name = f"{safe_stem(uploads[0].filename)}_{timestamp_ms()}.pdf"
                    result.documents.append(
                        BuiltDocument(source_name, pdf_name, doc.tobytes(garbage=3, deflate=True), len(doc))
                    )
            finally:
                doc.close()
        else:
            for upload, item in zip(uploads, prepared):
                doc = fitz.open()
                try:
                    draw_image_page(doc, _unwrap(item), page_size, fit)
                    pdf_name = f"{safe_stem(upload.filename)}_{timestamp_ms()}.pdf"
                    result.documents.append(
                        BuiltDocument(upload.filename, pdf_name, doc.tobytes(garbage=3, deflate=True), 1)
                    )
                    result.succeeded += 1
                except Exception as exc:
                    result.record_failure(upload.filename, exc)
                finally:
                    doc.close()

    if not result.succeeded:
        raise ConversionFailedError(
            "Failed to process any images. Please check file formats and try again.",
            failures=result.failures,
        )

    logger.info("  %s", result.message)
    return result
