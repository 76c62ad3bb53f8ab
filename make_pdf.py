# ─────────────────────────────────────────────────────────────
# Long image → printable multi-page PDF (command line)
# ─────────────────────────────────────────────────────────────
import argparse
import logging
import os
import sys

from longshot.caption_utils import CaptionService
from longshot.config import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_ORIENTATION,
    DEFAULT_MARGIN_MM,
    DEFAULT_QUALITY,
    MAX_MARGIN_MM,
    MAX_WORKERS,
    OUTPUT_DIR,
)
from longshot.converter import convert_image
from longshot.errors import PaginationError
from longshot.image_utils import fetch_image, sniff_mime_type
from longshot.page_geometry import PageGeometry
from longshot.pdf_utils import save_pdf

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def margin_mm(value):
    margin = float(value)
    if not 0 <= margin <= MAX_MARGIN_MM:
        raise argparse.ArgumentTypeError(f"margin must be between 0 and {MAX_MARGIN_MM}mm, got {value}")
    return margin


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Split a long image into a printable multi-page PDF.")
    parser.add_argument("source", help="image file path or http(s) URL")
    parser.add_argument("-o", "--output", help="output PDF path (default: <OUTPUT_DIR>/<name>.pdf)")
    parser.add_argument("--page-size", default=DEFAULT_PAGE_SIZE, choices=["A4", "Letter", "Legal"],
                        type=lambda s: {"a4": "A4", "letter": "Letter", "legal": "Legal"}.get(s.lower(), s))
    parser.add_argument("--orientation", default=DEFAULT_ORIENTATION, choices=["portrait", "landscape"],
                        type=str.lower)
    parser.add_argument("--margin", type=margin_mm, default=DEFAULT_MARGIN_MM,
                        help=f"margin in mm (0-{MAX_MARGIN_MM})")
    parser.add_argument("--quality", type=float, default=DEFAULT_QUALITY, help="JPEG quality factor (0-1]")
    parser.add_argument("--workers", type=int, default=MAX_WORKERS)
    parser.add_argument("--describe", action="store_true", help="embed an AI caption as the PDF subject")
    return parser.parse_args(argv)


def read_source(source):
    if source.startswith(("http://", "https://")):
        return fetch_image(source)
    with open(source, "rb") as f:
        return f.read()


def output_path_for(source, output=None):
    if output:
        return output
    name = os.path.basename(source.rstrip("/")).split(".")[0] or "document"
    return os.path.join(OUTPUT_DIR, f"{name}.pdf")


def main(argv=None):
    args = parse_args(argv)
    pdf_path = output_path_for(args.source, args.output)
    title = os.path.splitext(os.path.basename(pdf_path))[0]

    try:
        geometry = PageGeometry.from_options(args.page_size, args.orientation, args.margin, args.quality)
        data = read_source(args.source)

        subject = None
        if args.describe:
            # Runs while the pages render; collected with whatever time is left
            subject = CaptionService().start(data, sniff_mime_type(data)).result

        result = convert_image(data, geometry, title=title, subject=subject, max_workers=args.workers)
        save_pdf(result.pdf, pdf_path)
    except (PaginationError, OSError) as e:
        print(f"❌ Conversion failed: {e}")
        return 1

    if args.describe:
        print(f"📝 {result.subject}")
    print(
        f"✅ {result.page_count} page(s) • source {result.source.width}x{result.source.height}px "
        f"• {geometry.page_size.label} {geometry.orientation.value} → {pdf_path}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
