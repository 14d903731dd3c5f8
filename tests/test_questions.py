"""
Tests for the question store and answer statistics.
"""

import anyio
import pytest

from spaced.core.errors import NotFoundError, ValidationError

pytestmark = pytest.mark.anyio


class TestQuestions:
    async def test_create_and_get(self, questions):
        created = await questions.create_question("2 + 2", "4")

        fetched = await questions.get_question(created.id)
        assert fetched.question == "2 + 2"
        assert fetched.answer == "4"
        assert fetched.nb_correct is None

    async def test_list_excludes_deleted(self, questions):
        keep = await questions.create_question("keep", "me")
        drop = await questions.create_question("drop", "me")
        await questions.delete_question(drop.id)

        assert [q.id for q in await questions.list_questions()] == [keep.id]

    async def test_get_missing(self, questions):
        with pytest.raises(NotFoundError):
            await questions.get_question("no-such-id")

    async def test_delete_twice(self, questions):
        q = await questions.create_question("2 + 2", "4")

        await questions.delete_question(q.id)
        with pytest.raises(NotFoundError):
            await questions.delete_question(q.id)
        with pytest.raises(NotFoundError):
            await questions.get_question(q.id)

    async def test_update(self, questions):
        q = await questions.create_question("2 + 2", "5")

        updated = await questions.update_question(q.id, "2 + 2", "4")
        assert updated.id == q.id
        assert updated.answer == "4"

    async def test_update_unknown(self, questions):
        with pytest.raises(ValidationError) as exc:
            await questions.update_question("no-such-id", "q", "a")
        assert exc.value.status_code == 400

    async def test_update_deleted(self, questions):
        q = await questions.create_question("2 + 2", "4")
        await questions.delete_question(q.id)

        with pytest.raises(ValidationError):
            await questions.update_question(q.id, "q", "a")

    async def test_empty_text(self, questions):
        with pytest.raises(ValidationError):
            await questions.create_question("", "a")
        with pytest.raises(ValidationError):
            await questions.create_question("q", "   ")


class TestStats:
    async def test_accumulation(self, questions, identities):
        alice = await identities.create_user("alice", "pw")
        q = await questions.create_question("2 + 2", "4")

        for _ in range(3):
            await questions.record_answer(alice.id, q.id, True)
        await questions.record_answer(alice.id, q.id, False)

        stats = await questions.get_stats(alice.id, q.id)
        assert (stats.nb_correct, stats.nb_wrong) == (3, 1)

    async def test_one_row_per_pair(self, questions, identities, db):
        alice = await identities.create_user("alice", "pw")
        q = await questions.create_question("2 + 2", "4")

        await questions.record_answer(alice.id, q.id, True)
        await questions.record_answer(alice.id, q.id, False)

        rows = await db.fetch_all("SELECT * FROM users_questions;")
        assert len(rows) == 1

    async def test_concurrent_submissions(self, questions, identities):
        alice = await identities.create_user("alice", "pw")
        q = await questions.create_question("2 + 2", "4")

        async with anyio.create_task_group() as tg:
            for i in range(20):
                tg.start_soon(questions.record_answer, alice.id, q.id, i % 2 == 0)

        stats = await questions.get_stats(alice.id, q.id)
        assert (stats.nb_correct, stats.nb_wrong) == (10, 10)

    async def test_unanswered_stats_are_zero(self, questions, identities):
        alice = await identities.create_user("alice", "pw")
        q = await questions.create_question("2 + 2", "4")

        stats = await questions.get_stats(alice.id, q.id)
        assert (stats.nb_correct, stats.nb_wrong) == (0, 0)

    async def test_answer_unknown_question(self, questions, identities):
        alice = await identities.create_user("alice", "pw")

        with pytest.raises(NotFoundError):
            await questions.record_answer(alice.id, "no-such-id", True)

    async def test_user_questions_are_per_user(self, questions, identities):
        alice = await identities.create_user("alice", "pw")
        bob = await identities.create_user("bob", "pw")
        q1 = await questions.create_question("2 + 2", "4")
        q2 = await questions.create_question("3 + 3", "6")

        await questions.record_answer(alice.id, q1.id, True)
        await questions.record_answer(bob.id, q1.id, False)

        mine = {q.id: (q.nb_correct, q.nb_wrong) for q in await questions.list_user_questions(alice.id)}
        assert mine == {q1.id: (1, 0), q2.id: (0, 0)}
