from fastapi import APIRouter, Depends

from app.core.storage import ObjectStorage
from app.deps import get_storage
from .service import MediaService

router = APIRouter()


def get_media_service(storage: ObjectStorage = Depends(get_storage)) -> MediaService:
    return MediaService(storage)


@router.get("/{path:path}")
def serve_media(path: str, media_service: MediaService = Depends(get_media_service)):
    return media_service.get_media(path)
