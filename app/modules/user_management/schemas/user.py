from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr


class UserBase(BaseModel):
    name: Optional[str] = None
    username: str
    email: EmailStr


class User(UserBase):
    """User model returned to client"""
    id: str
    avatar_url: Optional[str] = None
    created_at: datetime


class Author(BaseModel):
    """Author sub-object embedded in post and comment views"""
    id: str
    name: Optional[str] = None
    username: Optional[str] = None
    avatar_url: Optional[str] = None
