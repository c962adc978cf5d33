"""
CommentRepository: порядок добавления, один уровень ответов, права.
"""
import pytest

from blog.schemas import UserResponse
from blog.services.comment_service import CommentRepository, group_by_post
from blog.storage import COMMENTS_KEY
from blog.utils.exceptions import PermissionDeniedError, StorageError

ALICE = UserResponse(id="u-alice", username="alice", email="alice@blog.com", role="user")
BOB = UserResponse(id="u-bob", username="bob", email="bob@blog.com", role="user")
CAROL = UserResponse(id="u-carol", username="carol", email="carol@blog.com", role="author")


@pytest.fixture
def repo(storage):
    return CommentRepository(storage)


class TestComments:

    def test_comments_are_listed_in_insertion_order(self, repo):
        first = repo.add("p1", ALICE, "First!")
        second = repo.add("p1", BOB, "Second")

        assert [c.id for c in repo.list_by_post("p1")] == [first.id, second.id]

    def test_comments_are_filtered_by_post(self, repo):
        repo.add("p1", ALICE, "On p1")
        other = repo.add("p2", ALICE, "On p2")

        assert [c.id for c in repo.list_by_post("p2")] == [other.id]
        assert repo.list_by_post("p3") == []

    def test_add_sets_fields(self, repo):
        comment = repo.add("p1", ALICE, "  Nice post  ")

        assert comment.id
        assert comment.post_id == "p1"
        assert comment.author == "alice"
        assert comment.text == "Nice post"
        assert comment.created_at is not None
        assert comment.replies == []

    def test_add_does_not_check_post_existence(self, repo):
        """Репозиторий допускает комментарии к несуществующему посту."""
        comment = repo.add("no-such-post", ALICE, "Orphan")

        assert repo.list_by_post("no-such-post") == [comment]

    def test_stored_record_uses_camel_case(self, repo, storage):
        repo.add("p1", ALICE, "Hi")

        record = storage.read(COMMENTS_KEY)[0]
        assert record["postId"] == "p1"
        assert "createdAt" in record

    def test_anonymous_cannot_comment(self, repo, storage):
        with pytest.raises(PermissionDeniedError):
            repo.add("p1", None, "hi")

        assert storage.read(COMMENTS_KEY) is None


class TestReplies:

    def test_replies_are_nested_under_parent_in_order(self, repo):
        parent = repo.add("p1", ALICE, "Question?")
        first = repo.add_reply("p1", parent.id, BOB, "Answer one")
        second = repo.add_reply("p1", parent.id, CAROL, "Answer two")

        comments = repo.list_by_post("p1")

        assert len(comments) == 1
        assert [r.id for r in comments[0].replies] == [first.id, second.id]
        assert [r.author for r in comments[0].replies] == ["bob", "carol"]
        assert first.replies == []

    def test_reply_to_unknown_comment_returns_none(self, repo):
        repo.add("p1", ALICE, "Hi")

        assert repo.add_reply("p1", "missing", BOB, "Hello?") is None

    def test_reply_to_comment_of_other_post_returns_none(self, repo):
        parent = repo.add("p1", ALICE, "Hi")

        assert repo.add_reply("p2", parent.id, BOB, "Wrong post") is None

    def test_reply_to_reply_is_not_possible(self, repo):
        parent = repo.add("p1", ALICE, "Hi")
        reply = repo.add_reply("p1", parent.id, BOB, "Hey")

        assert repo.add_reply("p1", reply.id, CAROL, "Too deep") is None
        assert len(repo.list_by_post("p1")[0].replies) == 1

    def test_anonymous_cannot_reply(self, repo):
        parent = repo.add("p1", ALICE, "Hi")

        with pytest.raises(PermissionDeniedError):
            repo.add_reply("p1", parent.id, None, "anon")

        assert repo.list_by_post("p1")[0].replies == []


def test_broken_records_raise_storage_error(storage):
    storage.write(COMMENTS_KEY, [{"id": "1"}])

    with pytest.raises(StorageError):
        CommentRepository(storage).list_by_post("p1")


def test_group_by_post_keeps_order(repo):
    a = repo.add("p1", ALICE, "a")
    b = repo.add("p2", ALICE, "b")
    c = repo.add("p1", ALICE, "c")

    index = group_by_post([a, b, c])

    assert index == {"p1": [a, c], "p2": [b]}
