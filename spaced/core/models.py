"""
Core data models.

Rows coming out of storage become entities only through the `from_row`
constructors below. Entities leave the API only through `present()`,
which projects them onto an explicit, safe subset of fields.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from spaced.core.utils import b64decode, generate_id


# =============================================================================
# Enums
# =============================================================================


class Status(str, Enum):
    """Row lifecycle status. Deletion is always soft."""

    AVAILABLE = "AVAILABLE"
    DELETED = "DELETED"


# =============================================================================
# Privilege
# =============================================================================


class PrivilegeView(BaseModel):
    id: str
    name: str


class Privilege(BaseModel):
    """A named capability ("admin", "user") a user may hold."""

    model_config = {"frozen": True}

    id: str
    name: str

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Privilege:
        return cls(id=row["id"], name=row["name"])

    def present(self) -> PrivilegeView:
        return PrivilegeView(id=self.id, name=self.name)

    def __str__(self) -> str:
        return f"[Privilege {self.name}, id {self.id}]"


# =============================================================================
# User
# =============================================================================


class UserView(BaseModel):
    """User data returned to clients (no secret fields)."""

    id: str
    username: str
    token: str | None = None


class User(BaseModel):
    """
    A user account.

    `token` and `privileges` are transient: they are attached by the
    session issuer when a request authenticates and are never written
    back to the users table.
    """

    id: str = Field(default_factory=generate_id)
    username: str
    salt: bytes = Field(repr=False)
    pwhash: bytes = Field(repr=False)
    status: Status = Status.AVAILABLE

    token: str | None = Field(default=None, repr=False)
    privileges: frozenset[Privilege] = frozenset()

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> User:
        return cls(
            id=row["id"],
            username=row["username"],
            salt=b64decode(row["salt"]),
            pwhash=b64decode(row["pwhash"]),
            status=Status(row["status"]),
        )

    @property
    def privilege_names(self) -> set[str]:
        return {p.name for p in self.privileges}

    def has_privilege(self, name: str) -> bool:
        return name in self.privilege_names

    def with_privileges(self, privileges: set[Privilege]) -> User:
        return self.model_copy(update={"privileges": frozenset(privileges)})

    def with_token(self, token: str) -> User:
        return self.model_copy(update={"token": token})

    def present(self) -> UserView:
        return UserView(id=self.id, username=self.username, token=self.token)

    def __str__(self) -> str:
        return f"[User {self.username}, id {self.id}]"


# =============================================================================
# Session
# =============================================================================


class Session(BaseModel):
    """Server-side record binding a bearer token to a user."""

    id: str = Field(default_factory=generate_id)
    user_id: str
    status: Status = Status.AVAILABLE
    token: str = Field(repr=False)
    created_at: str


# =============================================================================
# Question
# =============================================================================


class QuestionView(BaseModel):
    id: str
    question: str
    answer: str
    nb_correct: int | None = None
    nb_wrong: int | None = None


class Question(BaseModel):
    """
    A question/answer pair.

    `nb_correct` and `nb_wrong` are only populated when the question was
    loaded together with a user's statistics.
    """

    id: str = Field(default_factory=generate_id)
    status: Status = Status.AVAILABLE
    question: str
    answer: str
    nb_correct: int | None = None
    nb_wrong: int | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Question:
        return cls(
            id=row["id"],
            status=Status(row["status"]),
            question=row["question"],
            answer=row["answer"],
            nb_correct=row.get("nb_correct"),
            nb_wrong=row.get("nb_wrong"),
        )

    def present(self) -> QuestionView:
        return QuestionView(
            id=self.id,
            question=self.question,
            answer=self.answer,
            nb_correct=self.nb_correct,
            nb_wrong=self.nb_wrong,
        )

    def __str__(self) -> str:
        return f"{self.question} => {self.answer}"


class QuestionStat(BaseModel):
    """Correctness counters for one (user, question) pair."""

    user_id: str
    question_id: str
    nb_correct: int = 0
    nb_wrong: int = 0

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> QuestionStat:
        return cls(
            user_id=row["user_id"],
            question_id=row["question_id"],
            nb_correct=row["nb_correct"],
            nb_wrong=row["nb_wrong"],
        )
