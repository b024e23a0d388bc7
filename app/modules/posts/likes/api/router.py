from typing import Any

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps import get_current_user
from app.modules.user_management.models.user import User
from app.modules.posts.likes.schemas.like import LikeToggleResponse
from app.modules.posts.likes.services.like import toggle_like

router = APIRouter()


@router.post("", response_model=LikeToggleResponse)
def toggle_post_like(
    *,
    db: Session = Depends(get_db),
    post_id: str = Path(..., description="The ID of the post to like or unlike"),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Like the post, or remove the like if it is already there"""
    result = toggle_like(db, current_user.id, post_id)
    return LikeToggleResponse(
        message="Like status toggled successfully",
        **result.model_dump(),
    )
