"""
DocPress — Plain text to PDF.

Used by the debug text conversion and by the Word fallback when no
office suite is installed.
"""

from __future__ import annotations

import textwrap
from collections.abc import Sequence

import fitz

from docpress.layout.page_size import resolve_page_size

WRAP_WIDTH = 60
LEFT_MARGIN = 50
BODY_TOP = 92  # 750pt from the bottom of an A4 page
BOTTOM_MARGIN = 50
LINE_PITCH = 20


def wrap_text(text: str, width: int = WRAP_WIDTH) -> list[str]:
    lines: list[str] = []
    for paragraph in text.splitlines():
        lines.extend(textwrap.wrap(paragraph, width=width) or [""])
    return lines


def text_to_pdf(text: str, heading: str | None = None, notes: Sequence[str] = ()) -> tuple[bytes, int]:
    """Render ``text`` onto A4 pages; an optional heading and notes go on top. Returns (bytes, page count)."""
    size = resolve_page_size()
    doc = fitz.open()
    page = doc.new_page(width=size.width, height=size.height)

    y = BODY_TOP
    if heading:
        page.insert_text((LEFT_MARGIN, 42), heading, fontsize=14, fontname="helv")
    if notes:
        for note in notes:
            page.insert_text((LEFT_MARGIN, y), note, fontsize=12, fontname="helv")
            y += LINE_PITCH * 1.5
        y += LINE_PITCH

    for line in wrap_text(text):
        if y > size.height - BOTTOM_MARGIN:
            page = doc.new_page(width=size.width, height=size.height)
            y = BODY_TOP
        page.insert_text((LEFT_MARGIN, y), line, fontsize=12, fontname="helv")
        y += LINE_PITCH

    page_count = len(doc)
    pdf_bytes = doc.tobytes(garbage=3, deflate=True)
    doc.close()
    return pdf_bytes, page_count
