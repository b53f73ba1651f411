import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import FileResponse
from PIL import UnidentifiedImageError
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.dependencies import get_current_actor
from app.schemas.banner import BannerResponse
from app.schemas.entities import BannerData
from app.services.job_lifecycle import banner_image
from app.services.job_store import SqlJobStore
from app.services.storage_service import FileStorage, get_storage

logger = logging.getLogger("app.storage")

MAX_DIMENSION = 2000

router = APIRouter(
    prefix="/banners",
    tags=["banners"],
    dependencies=[Depends(get_current_actor)],
)

media_router = APIRouter(tags=["media"])


def _banner_to_response(banner: BannerData) -> BannerResponse:
    return BannerResponse(
        id=banner.id,
        link=banner.link,
        url=banner_image(banner.link, settings.banner_width, settings.banner_height),
        job_id=banner.job_id,
        created_at=banner.created_at,
    )


@router.post("", response_model=BannerResponse, status_code=201)
async def upload_banner(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
):
    """Upload a banner ahead of job creation. It stays unlinked until a job
    references it, and is swept if the job is created without it."""
    if not (file.content_type or "").startswith("image/"):
        raise HTTPException(status_code=415, detail="Banner must be an image")

    max_bytes = settings.max_upload_bytes
    size = 0
    chunks: list[bytes] = []
    while True:
        chunk = await file.read(1024 * 1024)
        if not chunk:
            break
        size += len(chunk)
        if size > max_bytes:
            raise HTTPException(status_code=413, detail=f"File too large (max {max_bytes} bytes)")
        chunks.append(chunk)

    content = b"".join(chunks)
    if not content:
        raise HTTPException(status_code=400, detail="Empty file")

    link = storage.save(file.filename or "banner", content)
    banner = SqlJobStore(db).create_banner(link)
    return _banner_to_response(banner)


@media_router.get(settings.media_url + "/{link:path}")
async def media_file(
    link: str,
    w: int | None = Query(default=None, ge=1, le=MAX_DIMENSION),
    h: int | None = Query(default=None, ge=1, le=MAX_DIMENSION),
    storage: FileStorage = Depends(get_storage),
):
    """Serve a stored file. With both ``w`` and ``h`` the image is cropped
    and scaled to that size."""
    try:
        path = storage.resolve(link)
    except ValueError:
        raise HTTPException(status_code=404, detail="File not found")
    if not path.is_file():
        raise HTTPException(status_code=404, detail="File not found")
    if w and h:
        try:
            path = storage.resolve(storage.thumbnail(link, w, h))
        except UnidentifiedImageError:
            logger.warning("Serving %s unscaled: not a readable image", link)
    return FileResponse(path=str(path))
