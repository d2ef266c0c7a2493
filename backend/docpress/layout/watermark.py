"""
DocPress — Watermark tiling.

Positions are text baseline origins in bottom-left page space. The
repeated layout is a fixed 3-row by 2-column grid, independent of the
text length.
"""

from __future__ import annotations

from docpress.models.layout import WatermarkStamp

GRID_ROWS = 3
GRID_COLUMNS = 2
DIAGONAL_ANGLE = 45.0


def watermark_positions(
    page_width: float,
    page_height: float,
    text_width: float,
    text_height: float,
    repeat: bool = False,
    diagonal: bool = False,
) -> list[WatermarkStamp]:
    """Return one stamp centred on the page, or six on the grid when repeating."""
    if not repeat:
        if diagonal:
            return [WatermarkStamp(page_width / 2, page_height / 2, DIAGONAL_ANGLE)]
        return [WatermarkStamp(page_width / 2 - text_width / 2, page_height / 2 - text_height / 2)]

    spacing_x = page_width / GRID_COLUMNS
    spacing_y = page_height / GRID_ROWS
    stamps: list[WatermarkStamp] = []
    for row in range(GRID_ROWS):
        for col in range(GRID_COLUMNS):
            x = col * spacing_x + spacing_x / 2 - text_width / 2
            y = row * spacing_y + spacing_y / 2 - text_height / 2
            if diagonal:
                stamps.append(WatermarkStamp(x + text_width / 2, y + text_height / 2, DIAGONAL_ANGLE))
            else:
                stamps.append(WatermarkStamp(x, y))
    return stamps
