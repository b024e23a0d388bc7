from typing import Any

from fastapi import APIRouter, Depends

from app.core.storage import ObjectStorage
from app.deps import get_current_user, get_storage
from app.modules.user_management.models.user import User
from app.modules.user_management.schemas.user import User as UserSchema
from app.modules.posts.services.views import avatar_url

router = APIRouter()


@router.get("", response_model=UserSchema)
def read_current_user(
    current_user: User = Depends(get_current_user),
    storage: ObjectStorage = Depends(get_storage),
) -> Any:
    """Profile of the authenticated user"""
    return UserSchema(
        id=current_user.id,
        name=current_user.name,
        username=current_user.username,
        email=current_user.email,
        avatar_url=avatar_url(current_user, storage),
        created_at=current_user.created_at,
    )
