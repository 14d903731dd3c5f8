"""
Domain services.
"""

from spaced.services.questions import QuestionStore

__all__ = ["QuestionStore"]
