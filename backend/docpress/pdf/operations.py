"""
DocPress — PDF housekeeping operations.

Merge, split, watermark and password-protect, all done locally with
PyMuPDF. Every function takes and returns raw PDF bytes.
"""

from __future__ import annotations

import fitz

from docpress.errors import InvalidPdfError, NoFilesError
from docpress.layout.watermark import watermark_positions
from docpress.models.options import ProtectOptions, WatermarkOptions
from docpress.models.uploads import Upload
from docpress.pdf.page_ranges import parse_page_ranges
from docpress.utils.logging import logger, step_timer

WATERMARK_FONT = "helv"


def open_pdf(upload: Upload) -> fitz.Document:
    """Open an uploaded PDF, rejecting unreadable or password-locked files."""
    try:
        doc = fitz.open(stream=upload.data, filetype="pdf")
    except Exception as exc:
        raise InvalidPdfError(upload.filename, str(exc)) from exc
    if doc.needs_pass:
        doc.close()
        raise InvalidPdfError(upload.filename, "document is password protected")
    if len(doc) == 0:
        doc.close()
        raise InvalidPdfError(upload.filename, "document has no pages")
    return doc


def _save(doc: fitz.Document, **kwargs) -> bytes:
    try:
        return doc.tobytes(garbage=3, deflate=True, **kwargs)
    finally:
        doc.close()


def merge_pdfs(uploads: list[Upload]) -> tuple[bytes, int]:
    """Concatenate PDFs in upload order. Returns (bytes, page count)."""
    if len(uploads) < 2:
        raise NoFilesError(minimum=2)

    with step_timer(f"Merge {len(uploads)} PDFs"):
        merged = fitz.open()
        for upload in uploads:
            src = open_pdf(upload)
            try:
                merged.insert_pdf(src)
                logger.info("  Appended %s (%d pages)", upload.filename, len(src))
            finally:
                src.close()
        page_count = len(merged)
        return _save(merged), page_count


def split_pdf(upload: Upload, page_ranges: str) -> tuple[bytes, list[int]]:
    """Extract the pages named by ``page_ranges``. Returns (bytes, 1-indexed pages)."""
    src = open_pdf(upload)
    try:
        pages = parse_page_ranges(page_ranges, len(src))
        with step_timer(f"Extract {len(pages)} of {len(src)} pages"):
            out = fitz.open()
            for number in pages:
                out.insert_pdf(src, from_page=number - 1, to_page=number - 1)
    finally:
        src.close()
    return _save(out), pages


def add_watermark(upload: Upload, options: WatermarkOptions) -> tuple[bytes, int]:
    """Stamp ``options.text`` on every page. Returns (bytes, page count)."""
    doc = open_pdf(upload)
    font = fitz.Font(WATERMARK_FONT)
    text_width = font.text_length(options.text, fontsize=options.font_size)
    text_height = (font.ascender - font.descender) * options.font_size
    color = options.rgb()

    with step_timer(f"Watermark {len(doc)} page(s)"):
        for page in doc:
            width, height = page.rect.width, page.rect.height
            stamps = watermark_positions(
                width, height, text_width, text_height,
                repeat=options.repeat, diagonal=options.diagonal,
            )
            for stamp in stamps:
                # PyMuPDF measures y from the top edge, so a counterclockwise
                # turn in page space is a positive angle here
                origin = fitz.Point(stamp.x, height - stamp.y)
                morph = (origin, fitz.Matrix(stamp.angle)) if stamp.angle else None
                page.insert_text(
                    origin,
                    options.text,
                    fontsize=options.font_size,
                    fontname=WATERMARK_FONT,
                    color=color,
                    fill_opacity=options.opacity,
                    stroke_opacity=options.opacity,
                    morph=morph,
                )
    page_count = len(doc)
    return _save(doc), page_count


def _permissions(options: ProtectOptions) -> int:
    perm = 0
    if options.allow_printing:
        perm |= fitz.PDF_PERM_PRINT | fitz.PDF_PERM_PRINT_HQ
    if options.allow_modifying:
        perm |= fitz.PDF_PERM_MODIFY
    if options.allow_copying:
        perm |= fitz.PDF_PERM_COPY
    if options.allow_annotating:
        perm |= fitz.PDF_PERM_ANNOTATE
    if options.allow_filling_forms:
        perm |= fitz.PDF_PERM_FORM
    if options.allow_accessibility:
        perm |= fitz.PDF_PERM_ACCESSIBILITY
    if options.allow_assembly:
        perm |= fitz.PDF_PERM_ASSEMBLE
    return perm


def protect_pdf(upload: Upload, options: ProtectOptions) -> tuple[bytes, int]:
    """Encrypt with AES-256. Returns (bytes, page count)."""
    doc = open_pdf(upload)
    page_count = len(doc)
    with step_timer("Encrypt PDF"):
        return (
            _save(
                doc,
                encryption=fitz.PDF_ENCRYPT_AES_256,
                owner_pw=options.effective_owner_password,
                user_pw=options.user_password,
                permissions=_permissions(options),
            ),
            page_count,
        )
