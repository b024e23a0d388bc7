import logging

from starlette.responses import Response

from app.core.exceptions import NotFound
from app.core.storage import ObjectStorage

logger = logging.getLogger(__name__)


class MediaService:
    def __init__(self, storage: ObjectStorage):
        self.storage = storage

    def get_media(self, path: str) -> Response:
        """Serve a stored media object, from R2 or the local uploads directory"""
        stored = self.storage.open(path)
        if stored is None:
            logger.error(f"File {path} not found in storage")
            raise NotFound("File not found")

        return Response(
            content=stored.body,
            media_type=stored.content_type,
            headers={
                "Cache-Control": "public, max-age=86400",
                "Content-Disposition": f"inline; filename={path.split('/')[-1]}",
            },
        )
