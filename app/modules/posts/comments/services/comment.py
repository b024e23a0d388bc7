from typing import List, Optional
import logging
import uuid

from sqlalchemy.orm import Session, joinedload

from app.core.config import settings
from app.core.exceptions import Forbidden, NotFound, ValidationError
from app.modules.auth.schemas.auth import Authenticated
from app.modules.posts.comments.models.comment import Comment
from app.modules.posts.models.post import Post
from app.modules.posts.services.views import can_delete

logger = logging.getLogger("app")


def validate_content(content: Optional[str]) -> str:
    """Reject empty comments and comments over the length limit"""
    content = content.strip() if content is not None else ""
    if not content:
        raise ValidationError.for_field("content", "The content field is required.")
    if len(content) > settings.MAX_COMMENT_LENGTH:
        raise ValidationError.for_field(
            "content",
            f"The content field must not be greater than {settings.MAX_COMMENT_LENGTH} characters.",
        )
    return content


def get_comment(db: Session, comment_id: str) -> Optional[Comment]:
    """Get comment by ID with its author loaded"""
    return (
        db.query(Comment)
        .options(joinedload(Comment.author))
        .filter(Comment.id == comment_id)
        .first()
    )


def get_comments_by_post(db: Session, post_id: str, limit: Optional[int] = None) -> List[Comment]:
    """Get the earliest comments of a post, oldest first, with authors loaded"""
    query = (
        db.query(Comment)
        .options(joinedload(Comment.author))
        .filter(Comment.post_id == post_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
    )
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def add_comment(db: Session, user_id: str, post_id: str, content: str) -> Comment:
    """Create a comment on an existing post"""
    content = validate_content(content)

    if db.query(Post.id).filter(Post.id == post_id).first() is None:
        raise NotFound("Post not found")

    comment = Comment(
        id=str(uuid.uuid4()),
        author_id=user_id,
        post_id=post_id,
        content=content,
    )
    db.add(comment)
    db.commit()
    logger.info(f"User {user_id} commented on post {post_id}")

    return get_comment(db, comment.id)


def delete_comment(db: Session, requester_id: str, comment_id: str) -> None:
    """Delete a comment; only its author may do so"""
    comment = db.query(Comment).filter(Comment.id == comment_id).first()
    if not comment:
        raise NotFound("Comment not found")

    if not can_delete(comment, Authenticated(requester_id)):
        logger.warning(f"User {requester_id} tried to delete comment {comment_id} without permission")
        raise Forbidden()

    db.delete(comment)
    db.commit()
    logger.info(f"Deleted comment {comment_id}")
