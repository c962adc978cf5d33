"""
BlogClient против настоящего приложения через TestClient.
"""
import pytest
import requests

from blog.client import ApiError, BlogClient, TransportError

# Пароль, который conftest.make_user выдает всем пользователям
PASSWORD = "secret123"


class BrokenSession:
    def request(self, *args, **kwargs):
        raise requests.ConnectionError("connection refused")


@pytest.fixture
def api(client):
    return BlogClient("http://testserver/api/v1", session=client)


@pytest.fixture
def author_api(api, author):
    viewer, _ = author
    api.login(viewer.email, PASSWORD)
    return api


class TestAuth:

    def test_register_stores_session(self, api):
        user = api.register("dana", "dana@blog.com", "password1")

        assert api.token
        assert api.user == user
        assert api.verify() == user

    def test_failed_login_raises(self, api):
        with pytest.raises(ApiError) as exc:
            api.login("nobody@blog.com", "password1")

        assert exc.value.status_code == 401

    def test_logout_clears_session(self, author_api):
        author_api.logout()

        assert author_api.token is None
        assert author_api.verify() is None


class TestPosts:

    def test_post_lifecycle(self, author_api):
        post = author_api.create_post("Title", "x" * 200, tags="one, two")

        assert post.excerpt == "x" * 150 + "..."
        assert author_api.list_posts() == [post]
        assert author_api.get_post(post.id) == post

        updated = author_api.update_post(post.id, title="New", expected_updated_at=post.updated_at)
        assert updated.title == "New"
        assert updated.created_at == post.created_at

        assert author_api.delete_post(post.id) is True
        assert author_api.get_post(post.id) is None
        assert author_api.delete_post(post.id) is False

    def test_stale_update_raises_conflict(self, author_api):
        post = author_api.create_post("Title", "Body")
        author_api.update_post(post.id, title="First")

        with pytest.raises(ApiError) as exc:
            author_api.update_post(post.id, title="Second", expected_updated_at=post.updated_at)

        assert exc.value.status_code == 409
        assert exc.value.code == "conflict"

    def test_update_missing_post_returns_none(self, author_api):
        assert author_api.update_post("missing", title="x") is None

    def test_reader_cannot_create(self, api, reader):
        viewer, _ = reader
        api.login(viewer.email, PASSWORD)

        with pytest.raises(ApiError) as exc:
            api.create_post("Title", "Body")

        assert exc.value.status_code == 403

    def test_search(self, author_api):
        post = author_api.create_post("Python", "Body", tags=["py"])
        author_api.create_post("Other", "Body")

        assert author_api.list_posts(tag="py") == [post]


class TestComments:

    def test_post_with_comments(self, author_api):
        post = author_api.create_post("Title", "Body")
        comment = author_api.add_comment(post.id, "First")
        reply = author_api.add_reply(post.id, comment.id, "Reply")

        fetched, comments = author_api.get_post_with_comments(post.id)

        assert fetched == post
        assert [c.id for c in comments] == [comment.id]
        assert comments[0].replies == [reply]


def test_transport_failure_raises():
    api = BlogClient("http://blog.invalid/api/v1", session=BrokenSession())

    with pytest.raises(TransportError):
        api.list_posts()
