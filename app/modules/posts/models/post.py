from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship

from app.db.session import Base
from app.modules.user_management.models.user import User


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Post(Base):
    __tablename__ = "posts"

    id = Column(String, primary_key=True, index=True)
    caption = Column(Text, nullable=True)
    # Written once at creation, never updated
    media_path = Column(String, nullable=False)
    author_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)

    # Must be eagerly loaded by the caller; the view assembler never fetches
    author = relationship(User, lazy="raise_on_sql")
