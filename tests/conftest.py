"""
Pytest configuration and fixtures for the feed API tests.
"""
import os

# Configure before the app (and its engine) is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("R2_ENDPOINT", None)
os.environ.pop("R2_PUBLIC_URL", None)

import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.security import create_access_token, get_password_hash
from app.core.storage import ObjectStorage
from app.db import base  # noqa: F401
from app.db.session import Base, build_engine, get_db
from app.deps import get_storage
from app.main import app
from app.modules.posts.comments.models.comment import Comment
from app.modules.posts.likes.models.like import Like
from app.modules.posts.models.post import Post
from app.modules.user_management.models.user import User

# In-memory SQLite with a single shared connection
engine = build_engine("sqlite://", poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Global session for sharing across requests
_test_session = None

PASSWORD = "testpassword123"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def get_test_db():
    """Get the shared test database session."""
    yield _test_session


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    global _test_session

    Base.metadata.create_all(bind=engine)
    _test_session = TestingSessionLocal()
    app.dependency_overrides[get_db] = get_test_db

    yield _test_session

    app.dependency_overrides.pop(get_db, None)
    _test_session.close()
    _test_session = None
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def storage(tmp_path):
    """Local-disk storage rooted in a temporary directory."""
    media_storage = ObjectStorage(upload_directory=str(tmp_path / "uploads"), public_url="")
    app.dependency_overrides[get_storage] = lambda: media_storage
    yield media_storage
    app.dependency_overrides.pop(get_storage, None)


@pytest.fixture(scope="function")
def client(db, storage):
    """Create a test client."""
    with TestClient(app) as c:
        yield c


def make_user(db, username, email=None, name=None, avatar_path=None):
    user = User(
        id=str(uuid.uuid4()),
        name=name or username.title(),
        username=username,
        email=email or f"{username}@example.com",
        hashed_password=get_password_hash(PASSWORD),
        avatar_path=avatar_path,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_post(db, author, caption="hi", media_path="posts/test.png"):
    post = Post(id=str(uuid.uuid4()), author_id=author.id, caption=caption, media_path=media_path)
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


def make_comment(db, author, post, content="nice"):
    comment = Comment(id=str(uuid.uuid4()), author_id=author.id, post_id=post.id, content=content)
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment


def make_like(db, user, post):
    db.add(Like(user_id=user.id, post_id=post.id))
    db.commit()


def auth_headers_for(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture(scope="function")
def alice(db):
    return make_user(db, "alice")


@pytest.fixture(scope="function")
def bob(db):
    return make_user(db, "bob")


@pytest.fixture(scope="function")
def alice_headers(alice):
    return auth_headers_for(alice)


@pytest.fixture(scope="function")
def bob_headers(bob):
    return auth_headers_for(bob)
