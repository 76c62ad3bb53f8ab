import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field

import img2pdf

from .config import PAGE_IMAGE_FORMAT
from .errors import ConversionCancelled, EmptyInputError, EncodeError
from .image_utils import PillowBackend, SourceImage
from .page_geometry import PageGeometry, PageLayout, compute_layout

logger = logging.getLogger(__name__)

PDF_CREATOR = "longshot"


@dataclass(frozen=True)
class PageBitmap:
    index: int
    width: int
    height: int
    offset: int
    capture_height: int
    data: bytes = field(repr=False)


def render_page(source: SourceImage, layout: PageLayout, index: int, offset: int, capture_height: int,
                quality: int, backend=None, cancel=None) -> PageBitmap:
    """Cut one segment out of the source and draw it on a full-size white page canvas."""
    backend = backend or PillowBackend()
    if cancel is not None and cancel.is_set():
        raise ConversionCancelled(f"Cancelled before page {index + 1}")

    canvas = backend.new_canvas((layout.source_width, layout.segment_height_px))
    crop = backend.crop(source.image, (0, offset, layout.source_width, offset + capture_height))
    backend.draw(canvas, crop, (0, 0))
    try:
        data = backend.encode(canvas, PAGE_IMAGE_FORMAT, quality)
    except EncodeError as e:
        raise EncodeError(f"Page {index + 1} failed to encode: {e}", page_index=index) from e
    return PageBitmap(index, layout.source_width, layout.segment_height_px, offset, capture_height, data)


def segment(source: SourceImage, geometry: PageGeometry, backend=None, max_workers: int = 1, cancel=None):
    """Slice the source into page-sized bitmaps, returned in page order.

    Geometry is validated before any canvas is allocated. With
    ``max_workers > 1`` pages render on a thread pool; a set ``cancel``
    event aborts the run with ConversionCancelled.
    """
    layout = compute_layout(source.width, source.height, geometry)
    quality = geometry.jpeg_quality()
    backend = backend or PillowBackend()
    logger.info(
        f"Segmenting {source.width}x{source.height}px into {layout.total_pages} page(s) of "
        f"{layout.source_width}x{layout.segment_height_px}px "
        f"({geometry.page_size.label} {geometry.orientation.value}, margin {geometry.margin_mm}mm)"
    )

    pages = [None] * layout.total_pages
    rows = list(layout.capture_rows())

    if max_workers <= 1:
        for index, (offset, capture_height) in enumerate(rows):
            pages[index] = render_page(source, layout, index, offset, capture_height, quality, backend, cancel)
        return pages

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(render_page, source, layout, index, offset, capture_height, quality, backend, cancel): index
            for index, (offset, capture_height) in enumerate(rows)
        }
        try:
            for future in as_completed(futures):
                pages[futures[future]] = future.result()
        except BaseException:
            for future in futures:
                future.cancel()
            raise

    return pages


def page_layout_fun(geometry: PageGeometry):
    page_width, page_height = geometry.page_dimensions_mm()
    printable_width, printable_height = geometry.printable_area_mm()
    # img2pdf centres the image, so equal margins put it at (margin, margin)
    return img2pdf.get_layout_fun(
        pagesize=(img2pdf.mm_to_pt(page_width), img2pdf.mm_to_pt(page_height)),
        imgsize=(img2pdf.mm_to_pt(printable_width), img2pdf.mm_to_pt(printable_height)),
        fit=img2pdf.FitMode.exact,
    )


def assemble(pages, geometry: PageGeometry, title=None, subject=None) -> bytes:
    """Build one PDF page per bitmap, each image stretched over the printable area."""
    pages = list(pages)
    if not pages:
        raise EmptyInputError("Cannot assemble a document without pages")

    layout_fun = page_layout_fun(geometry)
    try:
        pdf = img2pdf.convert(
            [page.data for page in pages],
            layout_fun=layout_fun,
            title=title,
            subject=subject,
            creator=PDF_CREATOR,
        )
    except (img2pdf.ImageOpenError, img2pdf.PdfTooLargeError, ValueError, OSError) as e:
        raise EncodeError(f"Could not assemble PDF: {e}") from e

    logger.info(f"Assembled PDF with {len(pages)} page(s), {len(pdf)} bytes")
    return pdf


def save_pdf(pdf: bytes, output_path):
    with open(output_path, "wb") as f:
        f.write(pdf)
    logger.info(f"PDF saved to {output_path}")
