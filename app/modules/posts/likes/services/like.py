from typing import FrozenSet, Iterable
import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import NotFound
from app.db.errors import is_foreign_key_violation, is_unique_violation
from app.modules.auth.schemas.auth import Authenticated, Viewer
from app.modules.posts.likes.models.like import Like
from app.modules.posts.likes.schemas.like import LikeToggleResult
from app.modules.posts.models.post import Post

logger = logging.getLogger("app")


def count_likes(db: Session, post_id: str) -> int:
    """Count likes on a post"""
    return db.query(func.count()).select_from(Like).filter(Like.post_id == post_id).scalar() or 0


def liked_post_ids(db: Session, viewer: Viewer, post_ids: Iterable[str]) -> FrozenSet[str]:
    """Ids among ``post_ids`` the viewer has liked, in one query.

    Anonymous viewers never touch the likes table.
    """
    post_ids = list(post_ids)
    if not isinstance(viewer, Authenticated) or not post_ids:
        return frozenset()
    rows = (
        db.query(Like.post_id)
        .filter(Like.user_id == viewer.user_id, Like.post_id.in_(post_ids))
        .all()
    )
    return frozenset(post_id for (post_id,) in rows)


def _delete_like(db: Session, user_id: str, post_id: str) -> bool:
    deleted = (
        db.query(Like)
        .filter(Like.user_id == user_id, Like.post_id == post_id)
        .delete(synchronize_session=False)
    )
    return deleted > 0


def toggle_like(db: Session, user_id: str, post_id: str) -> LikeToggleResult:
    """
    Flip the (user, post) like and return the post's new like state.

    The delete and the insert are each single statements guarded by the
    composite primary key, so two racing toggles can never leave two rows:
    if our insert loses to a concurrent one, the pair has been toggled twice
    and we remove the row the other request added. A post deleted between the
    existence check and the insert surfaces as NotFound.
    """
    if db.query(Post.id).filter(Post.id == post_id).first() is None:
        raise NotFound("Post not found")

    if _delete_like(db, user_id, post_id):
        db.commit()
        is_liked = False
    else:
        db.add(Like(user_id=user_id, post_id=post_id))
        try:
            db.commit()
            is_liked = True
        except IntegrityError as e:
            db.rollback()
            if is_foreign_key_violation(e):
                logger.info(f"Post {post_id} was deleted while {user_id} was liking it")
                raise NotFound("Post not found")
            if not is_unique_violation(e):
                raise
            logger.info(f"Concurrent like on post {post_id} by {user_id}, removing it")
            _delete_like(db, user_id, post_id)
            db.commit()
            is_liked = False

    likes_count = count_likes(db, post_id)
    logger.info(f"User {user_id} {'liked' if is_liked else 'unliked'} post {post_id} ({likes_count} likes)")
    return LikeToggleResult(likes_count=likes_count, is_liked=is_liked)
