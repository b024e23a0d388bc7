from datetime import datetime
from pydantic import BaseModel

from app.modules.user_management.schemas.user import Author


class CommentCreate(BaseModel):
    # Length rules live in the service so they surface as ValidationError
    content: str


class CommentView(BaseModel):
    """Comment as seen by one viewer"""
    id: str
    content: str
    author: Author
    can_delete: bool = False
    created_at: datetime


class CommentCreated(BaseModel):
    message: str
    comment: CommentView
