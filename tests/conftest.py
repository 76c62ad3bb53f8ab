"""Shared fixtures: in-memory Pillow images and page geometries."""
import io
import logging

import pytest
from PIL import Image

from longshot.image_utils import PillowBackend
from longshot.page_geometry import Orientation, PageGeometry, PageSize

logging.getLogger("PIL").setLevel(logging.WARNING)


def make_image_bytes(width, height, color="black", mode="RGB", fmt="PNG"):
    img = Image.new(mode, (width, height), color)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def open_page(page):
    return Image.open(io.BytesIO(page.data)).convert("RGB")


class RecordingBackend(PillowBackend):
    """Pillow backend that remembers every canvas it hands out."""

    def __init__(self):
        super().__init__()
        self.canvases = []

    def new_canvas(self, size):
        self.canvases.append(size)
        return super().new_canvas(size)


@pytest.fixture
def a4_geometry():
    return PageGeometry(PageSize.A4, Orientation.PORTRAIT, margin_mm=10, quality=0.9)


@pytest.fixture
def long_image_bytes():
    # 1 px per mm on A4 with 10mm margins: 277 rows per page
    return make_image_bytes(190, 1000)


@pytest.fixture
def source(long_image_bytes):
    return PillowBackend().decode(long_image_bytes)


@pytest.fixture
def recording_backend():
    return RecordingBackend()
