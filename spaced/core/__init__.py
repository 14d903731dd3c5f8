"""
Core types: entities, errors and shared helpers.
"""

from spaced.core.errors import (
    DomainError,
    ValidationError,
    NotFoundError,
    AuthenticationError,
    AuthorizationError,
    IntegrityError,
)
from spaced.core.models import (
    Status,
    User,
    UserView,
    Privilege,
    PrivilegeView,
    Session,
    Question,
    QuestionView,
    QuestionStat,
)

__all__ = [
    # Errors
    "DomainError",
    "ValidationError",
    "NotFoundError",
    "AuthenticationError",
    "AuthorizationError",
    "IntegrityError",
    # Models
    "Status",
    "User",
    "UserView",
    "Privilege",
    "PrivilegeView",
    "Session",
    "Question",
    "QuestionView",
    "QuestionStat",
]
