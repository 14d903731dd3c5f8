# =============================================================================
# Question API Routes
# =============================================================================
#
# Endpoints:
#   GET    /api/questions              - List available questions (user)
#   GET    /api/user/questions         - Questions with the caller's stats (user)
#   GET    /api/questions/{id}         - Get a question (user)
#   POST   /api/questions              - Create (admin)
#   PUT    /api/questions/{id}         - Update text (admin)
#   DELETE /api/questions/{id}         - Soft-delete (admin)
#   POST   /api/questions/{id}/submit  - Record an answer outcome (user)
#
# =============================================================================

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from spaced.api.resources import Operation, Resource, build_router, call_handler
from spaced.auth import ADMIN, USER, AuthContext, require
from spaced.core.models import Question
from spaced.services.questions import QuestionStore


class QuestionCreate(BaseModel):
    question: str
    answer: str


class QuestionUpdate(BaseModel):
    question: str
    answer: str


class AnswerSubmit(BaseModel):
    correct: bool


def questions_resource(questions: QuestionStore) -> Resource:
    async def list_questions(ctx: AuthContext) -> list[Question]:
        return await questions.list_questions()

    async def list_user_questions(ctx: AuthContext) -> list[Question]:
        return await questions.list_user_questions(ctx.user_id)

    async def get_question(ctx: AuthContext, question_id: str) -> Question:
        return await questions.get_question(question_id)

    async def create_question(ctx: AuthContext, body: QuestionCreate) -> Question:
        return await questions.create_question(body.question, body.answer)

    async def update_question(ctx: AuthContext, question_id: str, body: QuestionUpdate) -> Question:
        return await questions.update_question(question_id, body.question, body.answer)

    async def delete_question(ctx: AuthContext, question_id: str) -> None:
        await questions.delete_question(question_id)

    return Resource(
        name="questions",
        present=Question.present,
        list=list_questions,
        get=get_question,
        create=create_question,
        update=update_question,
        delete=delete_question,
        extra_list=list_user_questions,
        create_schema=QuestionCreate,
        update_schema=QuestionUpdate,
        permissions={
            Operation.LIST: USER,
            Operation.EXTRA_LIST: USER,
            Operation.GET: USER,
            Operation.CREATE: ADMIN,
            Operation.UPDATE: ADMIN,
            Operation.DELETE: ADMIN,
        },
    )


def build_questions_router(questions: QuestionStore) -> APIRouter:
    router = build_router(questions_resource(questions))

    @router.post("/questions/{id}/submit", status_code=204)
    async def submit_answer(
        id: str,
        body: AnswerSubmit,
        ctx: AuthContext = Depends(require(USER)),
    ):
        """Record whether the caller answered the question correctly."""
        await call_handler("questions", questions.record_answer, ctx.user_id, id, body.correct)
        return Response(status_code=204)

    return router
