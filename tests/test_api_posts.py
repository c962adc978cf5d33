"""
HTTP API постов: /api/v1/posts
"""
import inspect

import pytest

from blog.routes import comments, posts
from blog.schemas import Post
from blog.storage import POSTS_KEY, MemoryStorage
from blog.utils.exceptions import StorageError

POSTS = "/api/v1/posts"


def create(client, headers, **fields):
    payload = {"title": "Hello", "content": "Body text", "tags": "a, b ,b"}
    payload.update(fields)
    return client.post(POSTS, json=payload, headers=headers)


class TestListAndGet:

    def test_empty_list(self, client):
        r = client.get(POSTS)

        assert r.status_code == 200
        assert r.json() == []

    def test_newest_first(self, client, author):
        _, headers = author
        first = create(client, headers, title="First").json()
        second = create(client, headers, title="Second").json()

        ids = [p["id"] for p in client.get(POSTS).json()]

        assert ids == [second["id"], first["id"]]

    def test_get_by_id(self, client, author):
        _, headers = author
        post = create(client, headers).json()

        r = client.get(f"{POSTS}/{post['id']}")

        assert r.status_code == 200
        assert r.json() == post

    def test_missing_post_is_404_with_error_body(self, client):
        r = client.get(f"{POSTS}/missing")

        assert r.status_code == 404
        body = r.json()
        assert body["code"] == "not_found"
        assert body["detail"] == "Post not found"
        assert body["path"] == f"{POSTS}/missing"

    def test_filter_by_tag_and_query(self, client, author):
        _, headers = author
        python = create(client, headers, title="Python tricks", tags=["python"]).json()
        create(client, headers, title="Other", content="nothing", tags=["misc"])

        assert [p["id"] for p in client.get(POSTS, params={"tag": "python"}).json()] == [python["id"]]
        assert [p["id"] for p in client.get(POSTS, params={"q": "tricks"}).json()] == [python["id"]]


class TestCreate:

    def test_author_creates_post(self, client, author):
        viewer, headers = author

        r = create(client, headers, content="x" * 300)

        assert r.status_code == 201
        post = r.json()
        assert post["tags"] == ["a", "b", "b"]
        assert post["excerpt"] == "x" * 150 + "..."
        assert post["author"] == {"id": viewer.id, "username": viewer.username}
        assert post["createdAt"] == post["updatedAt"]

    def test_author_cannot_be_spoofed(self, client, author):
        viewer, headers = author

        post = create(client, headers, author={"id": "999", "username": "mallory"}).json()

        assert post["author"]["id"] == viewer.id

    def test_plain_user_is_forbidden(self, client, reader):
        _, headers = reader

        r = create(client, headers)

        assert r.status_code == 403
        assert r.json()["code"] == "permission_denied"
        assert client.get(POSTS).json() == []

    def test_anonymous_is_unauthorized(self, client):
        r = create(client, {})

        assert r.status_code == 401
        assert r.headers["www-authenticate"] == "Bearer"

    def test_invalid_token_is_unauthorized(self, client):
        r = create(client, {"Authorization": "Bearer not-a-jwt"})

        assert r.status_code == 401

    def test_blank_title_is_rejected(self, client, author):
        _, headers = author

        r = create(client, headers, title="   ")

        assert r.status_code == 422
        assert r.json()["code"] == "validation_error"


class TestUpdate:

    def test_owner_updates(self, client, author):
        _, headers = author
        post = create(client, headers).json()

        r = client.put(f"{POSTS}/{post['id']}", json={"title": "Edited"}, headers=headers)

        assert r.status_code == 200
        updated = r.json()
        assert updated["title"] == "Edited"
        assert updated["id"] == post["id"]
        assert updated["createdAt"] == post["createdAt"]
        assert Post.model_validate(updated).updated_at >= Post.model_validate(post).updated_at

    def test_admin_updates_any_post(self, client, author, admin):
        _, author_headers = author
        _, admin_headers = admin
        post = create(client, author_headers).json()

        r = client.put(f"{POSTS}/{post['id']}", json={"tags": ["moderated"]}, headers=admin_headers)

        assert r.status_code == 200
        assert r.json()["tags"] == ["moderated"]

    def test_other_user_is_forbidden(self, client, author, make_user):
        _, headers = author
        _, other_headers = make_user("other", "author")
        post = create(client, headers).json()

        r = client.put(f"{POSTS}/{post['id']}", json={"title": "Mine now"}, headers=other_headers)

        assert r.status_code == 403
        assert client.get(f"{POSTS}/{post['id']}").json()["title"] == "Hello"

    def test_missing_post_is_404(self, client, author):
        _, headers = author

        r = client.put(f"{POSTS}/missing", json={"title": "x"}, headers=headers)

        assert r.status_code == 404

    def test_stale_update_is_conflict(self, client, author):
        _, headers = author
        post = create(client, headers).json()
        client.put(f"{POSTS}/{post['id']}", json={"title": "First"}, headers=headers)

        r = client.put(
            f"{POSTS}/{post['id']}",
            json={"title": "Second", "expectedUpdatedAt": "2000-01-01T00:00:00+00:00"},
            headers=headers,
        )

        assert r.status_code == 409
        assert r.json()["code"] == "conflict"

    def test_current_expected_updated_at_is_accepted(self, client, author):
        _, headers = author
        post = create(client, headers).json()

        r = client.put(
            f"{POSTS}/{post['id']}",
            json={"title": "Checked", "expectedUpdatedAt": post["updatedAt"]},
            headers=headers,
        )

        assert r.status_code == 200
        assert r.json()["title"] == "Checked"

    def test_expected_updated_at_without_timezone_is_rejected(self, client, author):
        _, headers = author
        post = create(client, headers).json()
        naive = Post.model_validate(post).updated_at.replace(tzinfo=None).isoformat()

        r = client.put(
            f"{POSTS}/{post['id']}",
            json={"title": "Checked", "expectedUpdatedAt": naive},
            headers=headers,
        )

        assert r.status_code == 422
        assert r.json()["code"] == "validation_error"
        assert client.get(f"{POSTS}/{post['id']}").json()["title"] == "Hello"


class TestDelete:

    def test_owner_deletes(self, client, author):
        _, headers = author
        post = create(client, headers).json()

        r = client.delete(f"{POSTS}/{post['id']}", headers=headers)

        assert r.status_code == 204
        assert client.get(f"{POSTS}/{post['id']}").status_code == 404
        assert client.get(POSTS).json() == []

    def test_other_user_is_forbidden(self, client, author, reader):
        _, headers = author
        _, reader_headers = reader
        post = create(client, headers).json()

        r = client.delete(f"{POSTS}/{post['id']}", headers=reader_headers)

        assert r.status_code == 403

    def test_missing_post_is_404(self, client, admin):
        _, headers = admin

        assert client.delete(f"{POSTS}/missing", headers=headers).status_code == 404


def test_posts_are_persisted_through_storage(client, author):
    _, headers = author
    post = create(client, headers).json()

    records = client.app.state.storage.read(POSTS_KEY)

    assert [r["id"] for r in records] == [post["id"]]


class FlakyStorage(MemoryStorage):
    """Хранилище в памяти, у которого можно \"сломать\" запись."""

    def __init__(self):
        super().__init__()
        self.broken = False

    def write(self, key, records):
        if self.broken:
            raise StorageError()
        super().write(key, records)


class TestStorageUnavailable:

    @pytest.fixture
    def flaky(self, client):
        storage = FlakyStorage()
        client.app.state.storage = storage
        return storage

    @pytest.fixture
    def post(self, client, author, flaky):
        _, headers = author
        post = create(client, headers).json()
        flaky.broken = True
        return post

    def assert_unavailable(self, r):
        assert r.status_code == 503
        body = r.json()
        assert body["code"] == "storage_unavailable"
        assert body["detail"] == "Storage unavailable, please retry"

    def test_create_fails_and_keeps_collection(self, client, author, post):
        _, headers = author

        self.assert_unavailable(create(client, headers, title="Lost"))

        assert client.get(POSTS).json() == [post]

    def test_update_fails_and_keeps_post(self, client, author, post):
        _, headers = author

        r = client.put(f"{POSTS}/{post['id']}", json={"title": "Lost"}, headers=headers)

        self.assert_unavailable(r)
        assert client.get(f"{POSTS}/{post['id']}").json() == post

    def test_delete_fails_and_keeps_post(self, client, author, post):
        _, headers = author

        self.assert_unavailable(client.delete(f"{POSTS}/{post['id']}", headers=headers))

        assert client.get(POSTS).json() == [post]

    def test_broken_collection_is_unavailable_not_500(self, client, flaky):
        flaky.write(POSTS_KEY, [{"detail": "oops"}])

        self.assert_unavailable(client.get(POSTS))


@pytest.mark.parametrize("route", posts.router.routes + comments.router.routes, ids=lambda r: r.name)
def test_storage_routes_run_in_threadpool(route):
    """Блокирующий storage adapter не должен выполняться в event loop."""
    assert not inspect.iscoroutinefunction(route.endpoint)
