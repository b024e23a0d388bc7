"""
View assembly for posts and comments.

Everything here is a pure transformation of rows the caller already fetched.
The caller states which relations it loaded; anything not loaded degrades to
an empty/placeholder value instead of being fetched on demand.
"""
from dataclasses import dataclass, field
from typing import AbstractSet, FrozenSet, Optional, Sequence

from app.core.storage import ObjectStorage
from app.modules.auth.schemas.auth import Authenticated, Viewer
from app.modules.posts.comments.models.comment import Comment
from app.modules.posts.comments.schemas.comment import CommentView
from app.modules.posts.models.post import Post
from app.modules.posts.schemas.post import PostView
from app.modules.user_management.models.user import User
from app.modules.user_management.schemas.user import Author

# Relations a caller may have loaded alongside a post or comment
AUTHOR = "author"
COMMENTS = "comments"
COMMENT_AUTHORS = "comments.author"
LIKES_COUNT = "likes_count"
COMMENTS_COUNT = "comments_count"


@dataclass
class PostLoad:
    """What was fetched together with a post row"""
    relations: FrozenSet[str] = frozenset()
    likes_count: int = 0
    comments_count: int = 0
    # Already bounded and ordered by the caller
    comments: Sequence[Comment] = field(default_factory=tuple)


def can_delete(entity, viewer: Viewer) -> bool:
    """Only the author may delete a post or a comment"""
    return isinstance(viewer, Authenticated) and viewer.user_id == entity.author_id


def avatar_url(user: User, storage: ObjectStorage) -> Optional[str]:
    return storage.url_for(user.avatar_path) if user.avatar_path else None


def assemble_author(entity, relations: AbstractSet[str], storage: ObjectStorage) -> Author:
    if AUTHOR not in relations:
        return Author(id=entity.author_id)
    user = entity.author
    return Author(
        id=user.id,
        name=user.name,
        username=user.username,
        avatar_url=avatar_url(user, storage),
    )


def assemble_comment(
    comment: Comment,
    viewer: Viewer,
    relations: AbstractSet[str],
    storage: ObjectStorage,
) -> CommentView:
    return CommentView(
        id=comment.id,
        content=comment.content,
        author=assemble_author(comment, relations, storage),
        can_delete=can_delete(comment, viewer),
        created_at=comment.created_at,
    )


def assemble_post(
    post: Post,
    viewer: Viewer,
    load: PostLoad,
    liked_post_ids: AbstractSet[str],
    storage: ObjectStorage,
) -> PostView:
    """Build the view of ``post`` for ``viewer``.

    ``liked_post_ids`` is the viewer's like set for the batch being assembled;
    it is ignored for anonymous viewers.
    """
    relations = load.relations
    comments = []
    if COMMENTS in relations:
        comment_relations = {AUTHOR} if COMMENT_AUTHORS in relations else set()
        comments = [
            assemble_comment(comment, viewer, comment_relations, storage)
            for comment in load.comments
        ]

    return PostView(
        id=post.id,
        caption=post.caption,
        media_url=storage.url_for(post.media_path),
        author=assemble_author(post, relations, storage),
        likes_count=load.likes_count if LIKES_COUNT in relations else 0,
        comments_count=load.comments_count if COMMENTS_COUNT in relations else 0,
        comments=comments,
        is_liked=isinstance(viewer, Authenticated) and post.id in liked_post_ids,
        can_delete=can_delete(post, viewer),
        created_at=post.created_at,
    )
