"""DocPress — Geometry value types shared by the layout engine."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PageDimensions:
    """Resolved page size in PDF points."""
    width: float
    height: float

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


@dataclass(frozen=True)
class ImageDescriptor:
    """Intrinsic pixel size of a decoded image."""
    width: int
    height: int

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


@dataclass(frozen=True)
class Placement:
    """Where an image is drawn, bottom-left origin."""
    x: float
    y: float
    width: float
    height: float

    def to_top_left(self, page_height: float) -> tuple[float, float, float, float]:
        """Return (x0, y0, x1, y1) in a top-left page space such as PyMuPDF's."""
        y0 = page_height - (self.y + self.height)
        return (self.x, y0, self.x + self.width, y0 + self.height)


@dataclass(frozen=True)
class WatermarkStamp:
    """Baseline origin of one watermark text run, bottom-left origin."""
    x: float
    y: float
    angle: float = 0.0
