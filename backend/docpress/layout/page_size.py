"""
DocPress — Page size resolution.

Sizes are in PDF points (1/72 inch).
"""

from __future__ import annotations

from typing import Any

from docpress.models.layout import PageDimensions
from docpress.models.options import Orientation, PageSize

PAGE_SIZES: dict[PageSize, tuple[int, int]] = {
    PageSize.A4: (595, 842),
    PageSize.LETTER: (612, 792),
    PageSize.LEGAL: (612, 1008),
}


def resolve_page_size(size: Any = None, orientation: Any = None) -> PageDimensions:
    """Look up a named paper size, swapping the sides for landscape."""
    width, height = PAGE_SIZES[PageSize.parse(size)]
    if Orientation.parse(orientation) is Orientation.LANDSCAPE:
        width, height = height, width
    return PageDimensions(width=width, height=height)
