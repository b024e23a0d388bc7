from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.core import security
from app.core.config import settings
from app.core.exceptions import Unauthenticated
from app.core.storage import ObjectStorage, storage
from app.db.session import get_db
from app.modules.auth.schemas.auth import ANONYMOUS, Authenticated, Viewer
from app.modules.user_management.models.user import User
from app.modules.user_management.services.user import get_user

# Missing credentials are reported by get_current_user, not by the scheme
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/login", auto_error=False)


def get_storage() -> ObjectStorage:
    """
    Dependency for getting the media storage
    """
    return storage


def _resolve_user(db: Session, token: str) -> User:
    user_id = security.verify_access_token(token)
    if not user_id:
        raise Unauthenticated()

    user = get_user(db, user_id=user_id)
    if not user:
        raise Unauthenticated()
    return user


def get_current_user(db: Session = Depends(get_db), token: Optional[str] = Depends(oauth2_scheme)) -> User:
    """
    Dependency for getting current authenticated user
    """
    if not token:
        raise Unauthenticated()
    return _resolve_user(db, token)


def get_viewer(db: Session = Depends(get_db), token: Optional[str] = Depends(oauth2_scheme)) -> Viewer:
    """
    Dependency for read endpoints: the requesting viewer.

    Without a credential the viewer is anonymous when anonymous reads are
    enabled; a credential that is present but invalid is always rejected.
    """
    if not token:
        if settings.ALLOW_ANONYMOUS_READS:
            return ANONYMOUS
        raise Unauthenticated()
    return Authenticated(_resolve_user(db, token).id)
