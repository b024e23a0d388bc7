from typing import Any, Optional
import logging
import os

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import ValidationError
from app.core.storage import ObjectStorage
from app.db.session import get_db
from app.deps import get_current_user, get_storage, get_viewer
from app.modules.auth.schemas.auth import Authenticated, Viewer
from app.modules.user_management.models.user import User
from app.modules.posts.schemas.post import PostPage, PostView
from app.modules.posts.services.post import (
    create_post, delete_post, get_post_view, list_post_views,
)

logger = logging.getLogger(__name__)

router = APIRouter()

MEDIA_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}


async def _read_media(media: Optional[UploadFile]) -> bytes:
    """Check type and size of the uploaded image and return its bytes"""
    if media is None or not media.filename:
        raise ValidationError.for_field("media", "The media field is required.")

    if media.content_type not in settings.ALLOWED_MEDIA_TYPES:
        logger.info(f"Rejected upload {media.filename} with type {media.content_type}")
        raise ValidationError.for_field(
            "media",
            f"The media field must be a file of type: {', '.join(settings.ALLOWED_MEDIA_TYPES)}.",
        )

    content = await media.read()
    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise ValidationError.for_field(
            "media",
            f"The media field must not be greater than {settings.MAX_UPLOAD_SIZE // 1024} kilobytes.",
        )
    if not content:
        raise ValidationError.for_field("media", "The media field is required.")
    return content


@router.get("", response_model=PostPage)
def read_posts(
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    page: int = Query(1, ge=1),
    viewer: Viewer = Depends(get_viewer),
) -> Any:
    """Retrieve the feed, newest posts first, with counts and like state."""
    return list_post_views(db, storage, viewer, page=page)


@router.post("", response_model=PostView, status_code=status.HTTP_201_CREATED)
async def create_new_post(
    *,
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    caption: Optional[str] = Form(None),
    media: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Create new image post.
    """
    content = await _read_media(media)
    extension = MEDIA_EXTENSIONS.get(media.content_type) or os.path.splitext(media.filename)[1]
    post = create_post(
        db,
        storage,
        current_user.id,
        caption,
        content,
        extension=extension,
        content_type=media.content_type,
    )
    return get_post_view(db, storage, Authenticated(current_user.id), post.id)


@router.get("/{post_id}", response_model=PostView)
def read_post_by_id(
    *,
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    post_id: str,
    viewer: Viewer = Depends(get_viewer),
) -> Any:
    """
    Get post by ID with its comments.
    """
    return get_post_view(db, storage, viewer, post_id)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post_by_id(
    *,
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    post_id: str,
    current_user: User = Depends(get_current_user),
) -> Response:
    """
    Delete a post and all associated data (comments and likes).
    This is a cascading delete operation that will remove:
    1. All likes on this post
    2. All comments on this post
    3. The post itself and its stored media
    """
    delete_post(db, storage, current_user.id, post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
