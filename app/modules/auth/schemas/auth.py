from dataclasses import dataclass
from typing import Union
from pydantic import BaseModel, EmailStr, field_validator


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class RegisterRequest(BaseModel):
    name: str
    username: str
    email: EmailStr
    password: str
    password_confirmation: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower()


@dataclass(frozen=True)
class Anonymous:
    """Viewer without a credential"""


@dataclass(frozen=True)
class Authenticated:
    """Viewer resolved from a bearer token"""
    user_id: str


Viewer = Union[Anonymous, Authenticated]

ANONYMOUS = Anonymous()
