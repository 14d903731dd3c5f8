"""
Question store.

Questions are soft-deleted only. Per-user correctness statistics live in
`users_questions` and only ever grow.
"""

from __future__ import annotations

import logging

from spaced.core.errors import IntegrityError, NotFoundError, ValidationError
from spaced.core.models import Question, QuestionStat, Status
from spaced.storage import Database


class QuestionStore:
    """CRUD for questions plus answer statistics."""

    def __init__(self, db: Database, logger: logging.Logger | None = None):
        self.db = db
        self.log = logger or logging.getLogger(__name__)

    # -------------------------------------------------------------------------
    # Questions
    # -------------------------------------------------------------------------

    async def list_questions(self) -> list[Question]:
        rows = await self.db.fetch_all(
            "SELECT * FROM questions WHERE status = ?;", Status.AVAILABLE.value
        )
        self.log.debug(f"Questions: {len(rows)} available")
        return [Question.from_row(row) for row in rows]

    async def list_user_questions(self, user_id: str) -> list[Question]:
        """Available questions annotated with the user's statistics."""
        rows = await self.db.fetch_all(
            """
            SELECT questions.*,
                   COALESCE(uq.nb_correct, 0) AS nb_correct,
                   COALESCE(uq.nb_wrong, 0) AS nb_wrong
            FROM questions
            LEFT JOIN users_questions uq
                ON (uq.question_id = questions.id AND uq.user_id = ?)
            WHERE questions.status = ?;
            """,
            user_id, Status.AVAILABLE.value,
        )
        return [Question.from_row(row) for row in rows]

    async def get_question(self, question_id: str) -> Question:
        row = await self.db.fetch_one(
            "SELECT * FROM questions WHERE id = ? AND status = ?;",
            question_id, Status.AVAILABLE.value,
        )
        if row is None:
            raise NotFoundError("Question not found")
        return Question.from_row(row)

    async def create_question(self, question: str, answer: str) -> Question:
        _check_text(question, answer)
        item = Question(question=question, answer=answer)
        self.log.debug(f"Adding {item}")

        await self.db.execute(
            "INSERT INTO questions (id, status, question, answer) VALUES (?, ?, ?, ?);",
            item.id, item.status.value, item.question, item.answer,
        )
        self.log.info(f"Question inserted: {item.id}")
        return item

    async def update_question(self, question_id: str, question: str, answer: str) -> Question:
        """Replace the text of a live question. Unknown ids are a 400."""
        _check_text(question, answer)
        changes = await self.db.execute(
            "UPDATE questions SET question = ?, answer = ? WHERE id = ? AND status = ?;",
            question, answer, question_id, Status.AVAILABLE.value,
        )
        if changes == 0:
            raise ValidationError(f"Unknown question id {question_id}")
        if changes > 1:
            self.log.error(f"Update: {changes} question rows changed ({question_id})")
            raise IntegrityError(f"Update affected {changes} rows")
        return await self.get_question(question_id)

    async def delete_question(self, question_id: str) -> None:
        """Soft-delete a question. Exactly one live row must change."""
        changes = await self.db.execute(
            "UPDATE questions SET status = ? WHERE id = ? AND status = ?;",
            Status.DELETED.value, question_id, Status.AVAILABLE.value,
        )
        self.log.debug(f"Delete: {changes} row(s) marked as deleted ({question_id})")

        if changes == 0:
            raise NotFoundError("Question not found")
        if changes > 1:
            self.log.error(f"Delete: {changes} question rows marked as deleted ({question_id})")
            raise IntegrityError(f"Delete affected {changes} rows")

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    async def get_stats(self, user_id: str, question_id: str) -> QuestionStat:
        row = await self.db.fetch_one(
            "SELECT * FROM users_questions WHERE user_id = ? AND question_id = ?;",
            user_id, question_id,
        )
        if row is None:
            return QuestionStat(user_id=user_id, question_id=question_id)
        return QuestionStat.from_row(row)

    async def record_answer(self, user_id: str, question_id: str, correct: bool) -> None:
        """Count one answer with a single atomic upsert."""
        await self.get_question(question_id)

        correct_inc, wrong_inc = (1, 0) if correct else (0, 1)
        changes = await self.db.execute(
            """
            INSERT INTO users_questions (user_id, question_id, nb_correct, nb_wrong)
            VALUES (?, ?, ?, ?)
            ON CONFLICT (user_id, question_id) DO UPDATE SET
                nb_correct = nb_correct + excluded.nb_correct,
                nb_wrong = nb_wrong + excluded.nb_wrong;
            """,
            user_id, question_id, correct_inc, wrong_inc,
        )
        self.log.debug(f"updateStats: {changes} rows updated")

        if changes != 1:
            self.log.error(f"updateStats: {changes} rows updated")
            raise IntegrityError(f"Statistics update affected {changes} rows")


def _check_text(question: str, answer: str) -> None:
    if not question or not question.strip():
        raise ValidationError("Question must not be empty")
    if not answer or not answer.strip():
        raise ValidationError("Answer must not be empty")
