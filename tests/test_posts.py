"""
Tests for posts endpoints.
"""
from app.core.config import settings
from app.modules.posts.comments.models.comment import Comment
from app.modules.posts.likes.models.like import Like
from app.modules.posts.models.post import Post

from conftest import PNG_BYTES, make_comment, make_like, make_post, make_user


def _upload(client, headers, caption="hello", content=PNG_BYTES, content_type="image/png", filename="photo.png"):
    data = {"caption": caption} if caption is not None else {}
    return client.post(
        "/api/posts",
        headers=headers,
        data=data,
        files={"media": (filename, content, content_type)},
    )


class TestCreatePost:
    """Test POST /posts."""

    def test_create_post(self, client, db, storage, alice, alice_headers):
        response = _upload(client, alice_headers)
        assert response.status_code == 201
        data = response.json()
        assert data["caption"] == "hello"
        assert data["author"]["id"] == alice.id
        assert data["author"]["username"] == "alice"
        assert data["likes_count"] == 0
        assert data["comments_count"] == 0
        assert data["comments"] == []
        assert data["is_liked"] is False
        assert data["can_delete"] is True

        post = db.query(Post).filter(Post.id == data["id"]).one()
        assert post.media_path.startswith("posts/")
        assert post.media_path.endswith(".png")
        assert data["media_url"] == f"{settings.BASE_URL}/api/media/{post.media_path}"
        assert storage.open(post.media_path).body == PNG_BYTES

    def test_media_is_served(self, client, alice_headers):
        data = _upload(client, alice_headers).json()
        path = data["media_url"].split("/api/media/", 1)[1]

        response = client.get(f"/api/media/{path}")
        assert response.status_code == 200
        assert response.content == PNG_BYTES
        assert response.headers["content-type"] == "image/png"

    def test_caption_is_optional(self, client, alice_headers):
        response = _upload(client, alice_headers, caption=None)
        assert response.status_code == 201
        assert response.json()["caption"] is None

    def test_caption_at_limit(self, client, alice_headers):
        response = _upload(client, alice_headers, caption="x" * 1000)
        assert response.status_code == 201

    def test_caption_is_trimmed(self, client, alice_headers):
        response = _upload(client, alice_headers, caption=" " + "x" * 1000 + " ")
        assert response.status_code == 201
        assert response.json()["caption"] == "x" * 1000

    def test_caption_too_long(self, client, db, alice_headers):
        response = _upload(client, alice_headers, caption="x" * 1001)
        assert response.status_code == 422
        assert "caption" in response.json()["errors"]
        assert db.query(Post).count() == 0

    def test_media_required(self, client, alice_headers):
        response = client.post("/api/posts", headers=alice_headers, data={"caption": "no image"})
        assert response.status_code == 422
        assert "media" in response.json()["errors"]

    def test_unsupported_media_type(self, client, alice_headers):
        response = _upload(client, alice_headers, content=b"GIF89a", content_type="image/gif", filename="a.gif")
        assert response.status_code == 422
        assert "media" in response.json()["errors"]

    def test_media_too_large(self, client, alice_headers):
        response = _upload(client, alice_headers, content=b"\x00" * (settings.MAX_UPLOAD_SIZE + 1))
        assert response.status_code == 422
        assert "media" in response.json()["errors"]

    def test_create_post_unauthenticated(self, client):
        response = _upload(client, {})
        assert response.status_code == 401


class TestReadPosts:
    """Test GET /posts and GET /posts/{id}."""

    def test_get_posts_empty(self, client, alice_headers):
        response = client.get("/api/posts", headers=alice_headers)
        assert response.status_code == 200
        assert response.json() == {
            "data": [],
            "meta": {"current_page": 1, "last_page": 1, "per_page": 10, "total": 0},
        }

    def test_feed_counts_and_flags(self, client, db, alice, bob, alice_headers):
        own = make_post(db, alice, caption="mine")
        other = make_post(db, bob, caption="theirs")
        make_like(db, alice, other)
        make_like(db, bob, other)
        make_comment(db, bob, other)

        data = client.get("/api/posts", headers=alice_headers).json()["data"]
        by_id = {item["id"]: item for item in data}

        assert by_id[own.id]["can_delete"] is True
        assert by_id[own.id]["is_liked"] is False
        assert by_id[other.id]["can_delete"] is False
        assert by_id[other.id]["is_liked"] is True
        assert by_id[other.id]["likes_count"] == 2
        assert by_id[other.id]["comments_count"] == 1
        # The feed does not embed comments
        assert by_id[other.id]["comments"] == []
        assert by_id[other.id]["author"]["username"] == "bob"

    def test_pagination(self, client, db, alice, alice_headers):
        for i in range(11):
            make_post(db, alice, caption=f"post {i}")

        first = client.get("/api/posts", headers=alice_headers).json()
        second = client.get("/api/posts?page=2", headers=alice_headers).json()

        assert len(first["data"]) == 10
        assert first["meta"] == {"current_page": 1, "last_page": 2, "per_page": 10, "total": 11}
        assert len(second["data"]) == 1
        assert second["meta"]["current_page"] == 2
        assert first["data"][0]["caption"] == "post 10"
        assert second["data"][0]["caption"] == "post 0"

    def test_invalid_page(self, client, alice_headers):
        response = client.get("/api/posts?page=0", headers=alice_headers)
        assert response.status_code == 422

    def test_get_post_with_comments(self, client, db, alice, bob, alice_headers):
        post = make_post(db, alice)
        make_comment(db, bob, post, content="first")
        make_comment(db, alice, post, content="second")

        data = client.get(f"/api/posts/{post.id}", headers=alice_headers).json()

        assert data["comments_count"] == 2
        assert [c["content"] for c in data["comments"]] == ["first", "second"]
        assert [c["can_delete"] for c in data["comments"]] == [False, True]
        assert data["comments"][0]["author"]["username"] == "bob"

    def test_post_comments_are_bounded(self, client, db, alice, alice_headers, monkeypatch):
        monkeypatch.setattr(settings, "POST_COMMENTS_LIMIT", 2)
        post = make_post(db, alice)
        for i in range(3):
            make_comment(db, alice, post, content=f"c{i}")

        data = client.get(f"/api/posts/{post.id}", headers=alice_headers).json()
        assert data["comments_count"] == 3
        assert [c["content"] for c in data["comments"]] == ["c0", "c1"]

    def test_get_missing_post(self, client, alice_headers):
        response = client.get("/api/posts/missing", headers=alice_headers)
        assert response.status_code == 404
        assert response.json() == {"message": "Post not found"}

    def test_reads_require_token_by_default(self, client, db, alice):
        post = make_post(db, alice)
        assert client.get("/api/posts").status_code == 401
        assert client.get(f"/api/posts/{post.id}").status_code == 401

    def test_anonymous_reads(self, client, db, alice, monkeypatch):
        monkeypatch.setattr(settings, "ALLOW_ANONYMOUS_READS", True)
        post = make_post(db, alice)
        make_like(db, alice, post)
        make_comment(db, alice, post)

        feed = client.get("/api/posts").json()["data"]
        single = client.get(f"/api/posts/{post.id}").json()

        for view in (feed[0], single):
            assert view["is_liked"] is False
            assert view["can_delete"] is False
            assert view["likes_count"] == 1
        assert single["comments"][0]["can_delete"] is False

    def test_anonymous_reads_still_reject_bad_token(self, client, monkeypatch):
        monkeypatch.setattr(settings, "ALLOW_ANONYMOUS_READS", True)
        response = client.get("/api/posts", headers={"Authorization": "Bearer invalid"})
        assert response.status_code == 401


class TestDeletePost:
    """Test DELETE /posts/{id}."""

    def test_delete_cascades(self, client, db, storage, alice, bob, alice_headers):
        media_path = storage.store(PNG_BYTES, "posts", ".png")
        post = make_post(db, alice, media_path=media_path)
        post_id = post.id
        make_like(db, bob, post)
        make_comment(db, bob, post)

        response = client.delete(f"/api/posts/{post_id}", headers=alice_headers)

        assert response.status_code == 204
        assert db.query(Post).filter(Post.id == post_id).count() == 0
        assert db.query(Comment).filter(Comment.post_id == post_id).count() == 0
        assert db.query(Like).filter(Like.post_id == post_id).count() == 0
        assert storage.open(media_path) is None
        assert client.get(f"/api/posts/{post_id}", headers=alice_headers).status_code == 404

    def test_delete_forbidden_for_non_author(self, client, db, alice, bob, bob_headers):
        post = make_post(db, alice)
        make_comment(db, bob, post)

        response = client.delete(f"/api/posts/{post.id}", headers=bob_headers)

        assert response.status_code == 403
        assert response.json() == {"message": "This action is unauthorized."}
        assert db.query(Post).filter(Post.id == post.id).count() == 1
        assert db.query(Comment).filter(Comment.post_id == post.id).count() == 1

    def test_delete_missing_post(self, client, alice_headers):
        response = client.delete("/api/posts/missing", headers=alice_headers)
        assert response.status_code == 404

    def test_delete_requires_authentication(self, client, db, alice):
        post = make_post(db, alice)
        assert client.delete(f"/api/posts/{post.id}").status_code == 401
