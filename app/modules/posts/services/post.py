from math import ceil
from typing import List, Optional, Tuple
import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from app.core.config import settings
from app.core.exceptions import Forbidden, NotFound, ValidationError
from app.core.storage import ObjectStorage
from app.modules.auth.schemas.auth import Authenticated, Viewer
from app.modules.posts.comments.models.comment import Comment
from app.modules.posts.comments.services.comment import get_comments_by_post
from app.modules.posts.likes.models.like import Like
from app.modules.posts.likes.services.like import liked_post_ids
from app.modules.posts.models.post import Post
from app.modules.posts.schemas.post import PageMeta, PostPage, PostView
from app.modules.posts.services.views import (
    AUTHOR, COMMENTS, COMMENT_AUTHORS, COMMENTS_COUNT, LIKES_COUNT,
    PostLoad, assemble_post, can_delete,
)

logger = logging.getLogger("app")

MEDIA_PREFIX = "posts"


def _likes_count_column():
    return (
        select(func.count())
        .select_from(Like)
        .where(Like.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
        .label("likes_count")
    )


def _comments_count_column():
    return (
        select(func.count())
        .select_from(Comment)
        .where(Comment.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
        .label("comments_count")
    )


def _posts_with_counts(db: Session):
    """Posts with author and both counts loaded in one statement"""
    return (
        db.query(Post, _likes_count_column(), _comments_count_column())
        .options(joinedload(Post.author))
    )


def normalize_caption(caption: Optional[str]) -> Optional[str]:
    caption = caption.strip() if caption is not None else ""
    if not caption:
        return None
    if len(caption) > settings.MAX_CAPTION_LENGTH:
        raise ValidationError.for_field(
            "caption",
            f"The caption field must not be greater than {settings.MAX_CAPTION_LENGTH} characters.",
        )
    return caption


def get_post(db: Session, post_id: str) -> Optional[Post]:
    """Get post row by ID"""
    return db.query(Post).filter(Post.id == post_id).first()


def get_post_view(db: Session, storage: ObjectStorage, viewer: Viewer, post_id: str) -> PostView:
    """Single post with author, counts and its first comments"""
    row = _posts_with_counts(db).filter(Post.id == post_id).first()
    if row is None:
        raise NotFound("Post not found")
    post, likes_count, comments_count = row

    load = PostLoad(
        relations=frozenset({AUTHOR, LIKES_COUNT, COMMENTS_COUNT, COMMENTS, COMMENT_AUTHORS}),
        likes_count=likes_count,
        comments_count=comments_count,
        comments=get_comments_by_post(db, post.id, limit=settings.POST_COMMENTS_LIMIT),
    )
    return assemble_post(post, viewer, load, liked_post_ids(db, viewer, [post.id]), storage)


def list_post_views(
    db: Session,
    storage: ObjectStorage,
    viewer: Viewer,
    page: int = 1,
    per_page: Optional[int] = None,
) -> PostPage:
    """Newest posts first, one page at a time"""
    per_page = per_page or settings.POSTS_PER_PAGE
    total = db.query(func.count(Post.id)).scalar() or 0
    last_page = max(1, ceil(total / per_page))

    rows: List[Tuple[Post, int, int]] = (
        _posts_with_counts(db)
        .order_by(Post.created_at.desc(), Post.id.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
        .all()
    )
    liked = liked_post_ids(db, viewer, [post.id for post, _, _ in rows])

    relations = frozenset({AUTHOR, LIKES_COUNT, COMMENTS_COUNT})
    data = [
        assemble_post(
            post,
            viewer,
            PostLoad(relations=relations, likes_count=likes_count, comments_count=comments_count),
            liked,
            storage,
        )
        for post, likes_count, comments_count in rows
    ]
    return PostPage(
        data=data,
        meta=PageMeta(current_page=page, last_page=last_page, per_page=per_page, total=total),
    )


def create_post(
    db: Session,
    storage: ObjectStorage,
    author_id: str,
    caption: Optional[str],
    media: bytes,
    extension: str = "",
    content_type: Optional[str] = None,
) -> Post:
    """Store the media and create the post pointing at it"""
    caption = normalize_caption(caption)
    if not media:
        raise ValidationError.for_field("media", "The media field is required.")

    media_path = storage.store(media, MEDIA_PREFIX, extension, content_type)
    post = Post(
        id=str(uuid.uuid4()),
        author_id=author_id,
        caption=caption,
        media_path=media_path,
    )
    db.add(post)
    try:
        db.commit()
    except Exception:
        db.rollback()
        storage.delete(media_path)
        raise

    logger.info(f"Created post {post.id} for author {author_id}")
    return post


def delete_post(db: Session, storage: ObjectStorage, requester_id: str, post_id: str) -> None:
    """
    Delete a post and all associated likes and comments.
    Only the author may delete; nothing is touched otherwise.
    """
    post = get_post(db, post_id)
    if not post:
        raise NotFound("Post not found")

    if not can_delete(post, Authenticated(requester_id)):
        logger.warning(f"User {requester_id} tried to delete post {post_id} without permission")
        raise Forbidden()

    media_path = post.media_path
    db.query(Like).filter(Like.post_id == post.id).delete(synchronize_session=False)
    db.query(Comment).filter(Comment.post_id == post.id).delete(synchronize_session=False)
    db.delete(post)
    db.commit()
    logger.info(f"Deleted post {post_id} with its likes and comments")

    storage.delete(media_path)
