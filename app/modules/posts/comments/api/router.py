from typing import Any

from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.orm import Session

from app.core.storage import ObjectStorage
from app.db.session import get_db
from app.deps import get_current_user, get_storage
from app.modules.auth.schemas.auth import Authenticated
from app.modules.user_management.models.user import User
from app.modules.posts.comments.schemas.comment import CommentCreate, CommentCreated
from app.modules.posts.comments.services.comment import add_comment, delete_comment
from app.modules.posts.services.views import AUTHOR, assemble_comment

# Mounted under /posts/{post_id}/comments
router = APIRouter()

# Mounted under /comments
comment_router = APIRouter()


@router.post("", response_model=CommentCreated, status_code=status.HTTP_201_CREATED)
def create_new_comment(
    *,
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    post_id: str = Path(..., description="The ID of the post to comment on"),
    comment_in: CommentCreate,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Create new comment on a post"""
    comment = add_comment(db, current_user.id, post_id, comment_in.content)
    return CommentCreated(
        message="Comment added successfully",
        comment=assemble_comment(comment, Authenticated(current_user.id), {AUTHOR}, storage),
    )


@comment_router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment_by_id(
    *,
    db: Session = Depends(get_db),
    comment_id: str,
    current_user: User = Depends(get_current_user),
) -> Response:
    """Delete a comment written by the current user"""
    delete_comment(db, current_user.id, comment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
