import logging
import uuid
from typing import Dict, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import Unauthenticated, ValidationError
from app.core.security import create_access_token, get_password_hash, verify_password
from app.modules.auth.schemas.auth import LoginRequest, RegisterRequest
from app.modules.user_management.models.user import User
from app.modules.user_management.services.user import get_user_by_email, get_user_by_username

logger = logging.getLogger("app")

MIN_PASSWORD_LENGTH = 8


def _registration_errors(db: Session, data: RegisterRequest) -> Dict[str, List[str]]:
    errors: Dict[str, List[str]] = {}

    if not data.username.strip():
        errors.setdefault("username", []).append("The username field is required.")
    elif get_user_by_username(db, data.username):
        errors.setdefault("username", []).append("The username has already been taken.")

    if get_user_by_email(db, data.email):
        errors.setdefault("email", []).append("The email has already been taken.")

    if len(data.password) < MIN_PASSWORD_LENGTH:
        errors.setdefault("password", []).append(
            f"The password field must be at least {MIN_PASSWORD_LENGTH} characters."
        )
    if data.password != data.password_confirmation:
        errors.setdefault("password", []).append("The password field confirmation does not match.")

    return errors


def register_user(db: Session, data: RegisterRequest) -> str:
    """Create the account and return an access token for it"""
    errors = _registration_errors(db, data)
    if errors:
        raise ValidationError("The given data was invalid.", errors=errors)

    user = User(
        id=str(uuid.uuid4()),
        name=data.name,
        username=data.username,
        email=data.email,
        hashed_password=get_password_hash(data.password),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with another registration using the same username/email
        db.rollback()
        raise ValidationError(
            "The given data was invalid.",
            errors={"email": ["The email has already been taken."]},
        )

    logger.info(f"Registered user {user.id} ({user.username})")
    return create_access_token(user.id)


def login_user(db: Session, data: LoginRequest) -> str:
    """Check the credentials and return an access token"""
    user = get_user_by_email(db, data.email)
    if not user or not verify_password(data.password, user.hashed_password):
        logger.warning(f"Failed login attempt for {data.email}")
        raise Unauthenticated("Invalid credentials.")

    return create_access_token(user.id)
