import io
import logging
from dataclasses import dataclass, field

import requests
from PIL import Image, UnidentifiedImageError

from .config import PAGE_BG_COLOR, FETCH_TIMEOUT
from .errors import DecodeError, EncodeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceImage:
    width: int
    height: int
    image: Image.Image = field(repr=False)
    format: str = None
    mime_type: str = None


class PillowBackend:
    """Raster operations the segmenter needs, done with Pillow."""

    def __init__(self, bg_color=PAGE_BG_COLOR):
        self.bg_color = bg_color

    def decode(self, data: bytes) -> SourceImage:
        try:
            img = Image.open(io.BytesIO(data))
            img.load()
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise DecodeError(f"Could not decode source image: {e}") from e
        except Image.DecompressionBombError as e:
            raise DecodeError(f"Source image is too large to decode safely: {e}") from e
        mime_type = Image.MIME.get(img.format, "application/octet-stream")
        return SourceImage(img.width, img.height, img, img.format, mime_type)

    def new_canvas(self, size):
        return Image.new("RGB", size, self.bg_color)

    def crop(self, img: Image.Image, box):
        return img.crop(box)

    def draw(self, canvas: Image.Image, img: Image.Image, position=(0, 0)):
        # Transparent pixels end up on the canvas background
        if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
            img = img.convert("RGBA")
            canvas.paste(img, position, img)
        else:
            canvas.paste(img.convert("RGB"), position)
        return canvas

    def encode(self, img: Image.Image, fmt="JPEG", quality=90) -> bytes:
        buf = io.BytesIO()
        try:
            img.save(buf, format=fmt, quality=quality)
        except (OSError, ValueError, KeyError) as e:
            raise EncodeError(f"Could not encode image as {fmt}: {e}") from e
        return buf.getvalue()


def fetch_image(url: str, timeout: int = FETCH_TIMEOUT) -> bytes:
    logger.info(f"Fetching source image from {url}")
    try:
        r = requests.get(url, stream=True, timeout=timeout)
        r.raise_for_status()
    except requests.RequestException as e:
        raise DecodeError(f"Could not fetch image from {url}: {e}") from e
    return r.content


def sniff_mime_type(data: bytes) -> str:
    """MIME type from the image header, without decoding any pixels."""
    try:
        fmt = Image.open(io.BytesIO(data)).format
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError):
        return "application/octet-stream"
    return Image.MIME.get(fmt, "application/octet-stream")
