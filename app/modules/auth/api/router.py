"""Authentication router for email/password accounts"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.modules.auth.schemas.auth import LoginRequest, RegisterRequest, Token
from app.modules.auth.services.auth import login_user, register_user

router = APIRouter()


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register(
    *,
    db: Session = Depends(get_db),
    register_in: RegisterRequest,
) -> Token:
    """Create an account and return its access token"""
    return Token(access_token=register_user(db, register_in))


@router.post("/login", response_model=Token)
def login(
    *,
    db: Session = Depends(get_db),
    login_in: LoginRequest,
) -> Token:
    """Exchange email and password for an access token"""
    return Token(access_token=login_user(db, login_in))
