import math
from dataclasses import dataclass
from enum import Enum

from .errors import InvalidGeometryError, ImageTooSmallError


class PageSize(Enum):
    A4 = (210.0, 297.0)
    LETTER = (215.9, 279.4)
    LEGAL = (215.9, 355.6)

    @property
    def label(self):
        return "A4" if self is PageSize.A4 else self.name.title()

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise InvalidGeometryError(f"Unknown page size: {value!r}") from None


class Orientation(Enum):
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidGeometryError(f"Unknown orientation: {value!r}") from None


@dataclass(frozen=True)
class PageGeometry:
    page_size: PageSize = PageSize.A4
    orientation: Orientation = Orientation.PORTRAIT
    margin_mm: float = 10.0
    quality: float = 0.9

    @classmethod
    def from_options(cls, page_size="A4", orientation="portrait", margin_mm=10.0, quality=0.9):
        return cls(
            page_size=PageSize.parse(page_size),
            orientation=Orientation.parse(orientation),
            margin_mm=float(margin_mm),
            quality=float(quality),
        )

    def page_dimensions_mm(self):
        width, height = self.page_size.value
        if self.orientation is Orientation.LANDSCAPE:
            return height, width
        return width, height

    def printable_area_mm(self):
        """Page dimensions minus the margin on all four sides.

        Raises InvalidGeometryError when nothing printable is left, i.e.
        unless ``2 * margin_mm < min(width, height)``.
        """
        if self.margin_mm < 0:
            raise InvalidGeometryError(f"Margin must not be negative, got {self.margin_mm}mm")
        width, height = self.page_dimensions_mm()
        printable_width = width - 2 * self.margin_mm
        printable_height = height - 2 * self.margin_mm
        if printable_width <= 0 or printable_height <= 0:
            raise InvalidGeometryError(
                f"Margin {self.margin_mm}mm leaves no printable area on "
                f"{self.page_size.label} {self.orientation.value} ({width}x{height}mm)"
            )
        return printable_width, printable_height

    def jpeg_quality(self):
        """Pillow JPEG quality (1..100) for the 0..1 quality factor."""
        if not 0 < self.quality <= 1:
            raise InvalidGeometryError(f"Quality must be in (0, 1], got {self.quality}")
        return max(1, min(100, int(round(self.quality * 100))))


@dataclass(frozen=True)
class PageLayout:
    page_width_mm: float
    page_height_mm: float
    printable_width_mm: float
    printable_height_mm: float
    source_width: int
    source_height: int
    scale: float
    segment_height: float
    segment_height_px: int
    total_pages: int

    def capture_rows(self):
        """Yield ``(offset, capture_height)`` for every page, top to bottom."""
        for index in range(self.total_pages):
            offset = index * self.segment_height_px
            yield offset, min(self.segment_height_px, self.source_height - offset)


def compute_layout(source_width: int, source_height: int, geometry: PageGeometry) -> PageLayout:
    """Resolve a page geometry against the pixel size of one source image.

    The source width always fills the printable width, so the pixel density
    (px per mm) is fixed by the width alone. Every page then holds the same
    number of source rows; the last one may hold fewer and gets padded.
    """
    page_width, page_height = geometry.page_dimensions_mm()
    printable_width, printable_height = geometry.printable_area_mm()
    geometry.jpeg_quality()

    if source_width <= 0 or source_height <= 0:
        raise ImageTooSmallError(f"Source image is {source_width}x{source_height}px")

    scale = source_width / printable_width
    segment_height = printable_height * scale
    # Canvases have whole rows
    segment_height_px = max(1, int(math.floor(segment_height)))
    total_pages = int(math.ceil(source_height / segment_height_px))

    return PageLayout(
        page_width_mm=page_width,
        page_height_mm=page_height,
        printable_width_mm=printable_width,
        printable_height_mm=printable_height,
        source_width=source_width,
        source_height=source_height,
        scale=scale,
        segment_height=segment_height,
        segment_height_px=segment_height_px,
        total_pages=total_pages,
    )
