from pydantic import BaseModel


class LikeToggleResult(BaseModel):
    """Aggregate like state of a post after a toggle"""
    likes_count: int
    is_liked: bool


class LikeToggleResponse(LikeToggleResult):
    message: str
