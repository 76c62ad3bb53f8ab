from functools import lru_cache
from urllib.parse import quote
import logging
import os

from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel

from longshot.caption_utils import CaptionService
from longshot.config import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_ORIENTATION,
    DEFAULT_MARGIN_MM,
    DEFAULT_QUALITY,
    MAX_MARGIN_MM,
    MAX_WORKERS,
)
from longshot.converter import convert_image, load_source, preview_image
from longshot.errors import DecodeError, EncodeError, ImageTooSmallError, InvalidGeometryError
from longshot.page_geometry import PageGeometry

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

app = FastAPI(root_path=os.getenv("ROOT_PATH", ""))

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


class CaptionResponse(BaseModel):
    caption: str


@lru_cache()
def get_caption_service() -> CaptionService:
    return CaptionService()


def geometry_form(
    page_size: str = Form(DEFAULT_PAGE_SIZE),
    orientation: str = Form(DEFAULT_ORIENTATION),
    margin: float = Form(DEFAULT_MARGIN_MM, ge=0, le=MAX_MARGIN_MM),
    quality: float = Form(DEFAULT_QUALITY, gt=0, le=1),
) -> PageGeometry:
    try:
        return PageGeometry.from_options(page_size, orientation, margin, quality)
    except InvalidGeometryError as e:
        raise HTTPException(status_code=422, detail=str(e))


def document_name(filename) -> str:
    stem = (filename or "").split(".")[0]
    return stem or "document"


def content_disposition(name) -> str:
    # Header values are latin-1, so non-ASCII names go in the RFC 5987 form
    ascii_name = name.encode("ascii", "ignore").decode().replace('"', "").strip() or "document"
    return f'attachment; filename="{ascii_name}.pdf"; filename*=UTF-8\'\'{quote(name + ".pdf")}'


@app.post("/convert")
def convert(file: UploadFile = File(...), geometry: PageGeometry = Depends(geometry_form)):
    data = file.file.read()
    name = document_name(file.filename)
    try:
        result = convert_image(data, geometry, title=name, max_workers=MAX_WORKERS)
    except InvalidGeometryError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except (DecodeError, ImageTooSmallError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except EncodeError as e:
        logger.error(f"PDF generation failed for {name}: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    logger.info(f"Converted {file.filename} into {result.page_count} page(s)")
    return Response(
        content=result.pdf,
        media_type="application/pdf",
        headers={
            "Content-Disposition": content_disposition(name),
            "X-Page-Count": str(result.page_count),
        },
    )


@app.post("/preview")
def preview(file: UploadFile = File(...), geometry: PageGeometry = Depends(geometry_form)):
    try:
        return preview_image(file.file.read(), geometry)
    except InvalidGeometryError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except (DecodeError, ImageTooSmallError) as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/describe", response_model=CaptionResponse)
def describe(file: UploadFile = File(...), captions: CaptionService = Depends(get_caption_service)):
    data = file.file.read()
    try:
        source = load_source(data)
    except (DecodeError, ImageTooSmallError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return CaptionResponse(caption=captions.describe(data, source.mime_type))
