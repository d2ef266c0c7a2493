"""Unit tests for page size resolution."""

import pytest
from docpress.layout.page_size import PAGE_SIZES, resolve_page_size
from docpress.models.layout import PageDimensions
from docpress.models.options import Orientation, PageSize


class TestResolvePageSize:
    def test_default_is_a4_portrait(self):
        assert resolve_page_size() == PageDimensions(595, 842)

    @pytest.mark.parametrize("name,expected", [
        ("a4", (595, 842)),
        ("letter", (612, 792)),
        ("legal", (612, 1008)),
        ("LETTER", (612, 792)),
    ])
    def test_named_sizes(self, name, expected):
        page = resolve_page_size(name)
        assert (page.width, page.height) == expected

    def test_unknown_name_falls_back_to_a4(self):
        assert resolve_page_size("tabloid") == PageDimensions(595, 842)

    @pytest.mark.parametrize("size", list(PageSize))
    def test_landscape_swaps_portrait(self, size):
        portrait = resolve_page_size(size, Orientation.PORTRAIT)
        landscape = resolve_page_size(size, Orientation.LANDSCAPE)
        assert (landscape.width, landscape.height) == (portrait.height, portrait.width)

    def test_unknown_orientation_is_portrait(self):
        assert resolve_page_size("letter", "sideways") == PageDimensions(612, 792)

    def test_all_sizes_positive(self):
        for width, height in PAGE_SIZES.values():
            assert width > 0 and height > 0
