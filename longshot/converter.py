import logging
from dataclasses import dataclass, field
from typing import List

from .config import MAX_WORKERS
from .image_utils import PillowBackend, SourceImage
from .page_geometry import PageGeometry, PageLayout, compute_layout
from .pdf_utils import PageBitmap, assemble, segment
from .errors import ImageTooSmallError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionResult:
    source: SourceImage
    layout: PageLayout
    pages: List[PageBitmap] = field(repr=False)
    pdf: bytes = field(repr=False)
    subject: str = None

    @property
    def page_count(self):
        return len(self.pages)


def load_source(data: bytes, backend=None) -> SourceImage:
    backend = backend or PillowBackend()
    source = backend.decode(data)
    if source.width == 0 or source.height == 0:
        raise ImageTooSmallError(f"Source image is {source.width}x{source.height}px")
    logger.info(f"Loaded {source.format} source image {source.width}x{source.height}px")
    return source


def convert_image(data: bytes, geometry: PageGeometry, title=None, subject=None,
                  max_workers: int = MAX_WORKERS, backend=None, cancel=None) -> ConversionResult:
    """Decode, segment and assemble one long image into PDF bytes.

    Every call starts from scratch; nothing is reused between runs.
    ``subject`` may be a callable; it is only called after segmentation, so a
    slow caption request overlaps with page rendering.
    """
    backend = backend or PillowBackend()
    source = load_source(data, backend)
    layout = compute_layout(source.width, source.height, geometry)
    pages = segment(source, geometry, backend=backend, max_workers=max_workers, cancel=cancel)
    if callable(subject):
        subject = subject()
    pdf = assemble(pages, geometry, title=title, subject=subject)
    return ConversionResult(source, layout, pages, pdf, subject)


def preview_image(data: bytes, geometry: PageGeometry) -> dict:
    """Layout summary for a source image without rendering any page."""
    source = load_source(data)
    layout = compute_layout(source.width, source.height, geometry)
    return {
        "source": {"width": source.width, "height": source.height, "format": source.format},
        "page_size": geometry.page_size.label,
        "orientation": geometry.orientation.value,
        "margin_mm": geometry.margin_mm,
        "quality": geometry.quality,
        "page_mm": [layout.page_width_mm, layout.page_height_mm],
        "printable_mm": [layout.printable_width_mm, layout.printable_height_mm],
        "scale": layout.scale,
        "page_px": [layout.source_width, layout.segment_height_px],
        "total_pages": layout.total_pages,
        "pages": [
            {"index": i, "offset": offset, "capture_height": capture_height}
            for i, (offset, capture_height) in enumerate(layout.capture_rows())
        ],
    }
