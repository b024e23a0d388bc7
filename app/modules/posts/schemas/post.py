from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel

from app.modules.user_management.schemas.user import Author
from app.modules.posts.comments.schemas.comment import CommentView


class PostView(BaseModel):
    """Post as seen by one viewer"""
    id: str
    caption: Optional[str] = None
    media_url: str
    author: Author
    likes_count: int = 0
    comments_count: int = 0
    comments: List[CommentView] = []
    is_liked: bool = False
    can_delete: bool = False
    created_at: datetime


class PageMeta(BaseModel):
    current_page: int
    last_page: int
    per_page: int
    total: int


class PostPage(BaseModel):
    """Paginated feed returned to client"""
    data: List[PostView]
    meta: PageMeta
