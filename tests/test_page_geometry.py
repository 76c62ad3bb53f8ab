import math

import pytest

from longshot.errors import ImageTooSmallError, InvalidGeometryError
from longshot.page_geometry import Orientation, PageGeometry, PageSize, compute_layout


class TestPageGeometry:

    def test_portrait_dimensions(self):
        geometry = PageGeometry(PageSize.LETTER, Orientation.PORTRAIT)
        assert geometry.page_dimensions_mm() == (215.9, 279.4)

    def test_landscape_swaps_dimensions(self):
        geometry = PageGeometry(PageSize.A4, Orientation.LANDSCAPE, margin_mm=10)
        assert geometry.page_dimensions_mm() == (297.0, 210.0)
        assert geometry.printable_area_mm() == (277.0, 190.0)

    def test_from_options_parses_strings(self):
        geometry = PageGeometry.from_options("legal", "LANDSCAPE", "5", "0.5")
        assert geometry.page_size is PageSize.LEGAL
        assert geometry.orientation is Orientation.LANDSCAPE
        assert geometry.margin_mm == 5.0
        assert geometry.quality == 0.5

    @pytest.mark.parametrize("page_size, orientation", [("A5", "portrait"), ("A4", "sideways")])
    def test_from_options_rejects_unknown_values(self, page_size, orientation):
        with pytest.raises(InvalidGeometryError):
            PageGeometry.from_options(page_size, orientation)

    def test_legal_with_maximum_margin_is_valid(self):
        geometry = PageGeometry(PageSize.LEGAL, margin_mm=50)
        width, height = geometry.printable_area_mm()
        assert width == pytest.approx(115.9)
        assert height == pytest.approx(255.6)

    @pytest.mark.parametrize("margin", [105, 110, 200])
    def test_margin_leaving_no_printable_area(self, margin):
        with pytest.raises(InvalidGeometryError):
            PageGeometry(PageSize.A4, margin_mm=margin).printable_area_mm()

    def test_negative_margin(self):
        with pytest.raises(InvalidGeometryError):
            PageGeometry(margin_mm=-1).printable_area_mm()

    @pytest.mark.parametrize("quality, expected", [(0.9, 90), (1.0, 100), (0.001, 1), (0.5, 50)])
    def test_jpeg_quality(self, quality, expected):
        assert PageGeometry(quality=quality).jpeg_quality() == expected

    @pytest.mark.parametrize("quality", [0, -0.5, 1.5])
    def test_quality_out_of_range(self, quality):
        with pytest.raises(InvalidGeometryError):
            PageGeometry(quality=quality).jpeg_quality()

    def test_label(self):
        assert [s.label for s in PageSize] == ["A4", "Letter", "Legal"]


class TestComputeLayout:

    def test_long_screenshot_on_a4(self):
        layout = compute_layout(1200, 12000, PageGeometry(PageSize.A4, margin_mm=10))

        assert layout.printable_width_mm == 190
        assert layout.printable_height_mm == 277
        assert layout.scale == pytest.approx(1200 / 190)
        assert layout.segment_height == pytest.approx(1749.47, abs=0.01)
        assert layout.segment_height_px == 1749
        assert layout.total_pages == 7

        rows = list(layout.capture_rows())
        assert rows[-1] == (6 * 1749, 12000 - 6 * 1749)

    def test_whole_pixel_pages_can_add_a_sliver_page(self):
        layout = compute_layout(1200, 12245, PageGeometry(PageSize.A4, margin_mm=10))

        assert layout.segment_height_px == 1749
        assert math.ceil(12245 / layout.segment_height) == 7
        assert layout.total_pages == 8
        assert list(layout.capture_rows())[-1] == (12243, 2)

    @pytest.mark.parametrize("height", [1, 276, 277, 278, 554, 1000, 9999])
    def test_page_count_is_ceiling(self, height):
        layout = compute_layout(190, height, PageGeometry(PageSize.A4, margin_mm=10))
        assert layout.segment_height_px == 277
        assert layout.total_pages == math.ceil(height / 277)
        assert layout.total_pages >= 1

    @pytest.mark.parametrize("height", [1, 500, 1749, 1750, 12000, 54321])
    def test_capture_heights_cover_source_exactly(self, height):
        layout = compute_layout(1200, height, PageGeometry(PageSize.A4, margin_mm=10))
        rows = list(layout.capture_rows())

        assert len(rows) == layout.total_pages
        assert sum(capture for _, capture in rows) == height
        assert all(capture == layout.segment_height_px for _, capture in rows[:-1])
        assert rows[-1][1] == height - (layout.total_pages - 1) * layout.segment_height_px
        assert rows[-1][1] > 0

    @pytest.mark.parametrize("height", [300, 3000, 12000, 40000])
    def test_wider_margin_never_reduces_page_count(self, height):
        narrow = compute_layout(1200, height, PageGeometry(PageSize.A4, margin_mm=10))
        wide = compute_layout(1200, height, PageGeometry(PageSize.A4, margin_mm=20))

        assert wide.printable_height_mm < narrow.printable_height_mm
        assert wide.total_pages >= narrow.total_pages

    def test_quality_does_not_change_layout(self):
        low = compute_layout(800, 5000, PageGeometry(quality=0.2))
        high = compute_layout(800, 5000, PageGeometry(quality=1.0))
        assert low == high

    def test_landscape_holds_fewer_rows_per_page(self):
        portrait = compute_layout(1000, 10000, PageGeometry(PageSize.A4, Orientation.PORTRAIT))
        landscape = compute_layout(1000, 10000, PageGeometry(PageSize.A4, Orientation.LANDSCAPE))
        assert landscape.segment_height_px < portrait.segment_height_px
        assert landscape.total_pages > portrait.total_pages

    def test_tiny_source_still_gets_one_row_per_page(self):
        layout = compute_layout(1, 50, PageGeometry(PageSize.LEGAL, Orientation.LANDSCAPE, margin_mm=50))
        assert layout.segment_height_px >= 1
        assert layout.total_pages == math.ceil(50 / layout.segment_height_px)

    @pytest.mark.parametrize("width, height", [(0, 100), (100, 0)])
    def test_degenerate_source(self, width, height):
        with pytest.raises(ImageTooSmallError):
            compute_layout(width, height, PageGeometry())

    def test_invalid_geometry_checked_before_source_size(self):
        with pytest.raises(InvalidGeometryError):
            compute_layout(0, 0, PageGeometry(margin_mm=150))
