"""
DocPress — Page compositor.

Computes where a decoded image lands on a PDF page for a fit policy:

  contain  shrink to fit with a 20pt margin on each side, keep aspect ratio
  cover    grow to fill the page, keep aspect ratio, may overflow one axis
  stretch  fill the page exactly, ignore aspect ratio

Placements use the PDF bottom-left origin. Overflow from ``cover`` is
left for the drawing layer to clip against the page box.
"""

from __future__ import annotations

from typing import Any

from docpress.errors import DegenerateImageError, InvalidFitPolicyError
from docpress.models.layout import ImageDescriptor, PageDimensions, Placement
from docpress.models.options import FitPolicy

CONTAIN_MARGIN = 40  # total, split evenly on the constraining axis


def _centered(page: PageDimensions, width: float, height: float) -> Placement:
    return Placement(
        x=(page.width - width) / 2,
        y=(page.height - height) / 2,
        width=width,
        height=height,
    )


def compute_placement(image: ImageDescriptor, page: PageDimensions, fit: Any = FitPolicy.CONTAIN) -> Placement:
    """
    Return the rectangle an image occupies on ``page`` under ``fit``.

    Raises InvalidFitPolicyError for a fit outside {contain, cover, stretch}
    and DegenerateImageError when the image or page has no area.
    """
    policy = FitPolicy.parse(fit)

    if image.width <= 0 or image.height <= 0:
        raise DegenerateImageError("Image", image.width, image.height)
    if page.width <= 0 or page.height <= 0:
        raise DegenerateImageError("Page", page.width, page.height)

    aspect_ratio = image.aspect_ratio
    wider_than_page = aspect_ratio > page.aspect_ratio

    if policy is FitPolicy.CONTAIN:
        if wider_than_page:
            width = page.width - CONTAIN_MARGIN
            height = width / aspect_ratio
        else:
            height = page.height - CONTAIN_MARGIN
            width = height * aspect_ratio
        return _centered(page, width, height)

    if policy is FitPolicy.COVER:
        if wider_than_page:
            height = page.height
            width = height * aspect_ratio
        else:
            width = page.width
            height = width / aspect_ratio
        return _centered(page, width, height)

    if policy is FitPolicy.STRETCH:
        return Placement(x=0, y=0, width=page.width, height=page.height)

    raise InvalidFitPolicyError(policy)
