"""
Exceptions raised by the study core.

Every error is local to one request; callers decide whether to retry.
"""

from __future__ import annotations


class StudyError(Exception):
    """Base class for all study errors."""
    http_status = 500


class NotFoundError(StudyError):
    """Card or deck does not exist, or is not owned by the caller."""
    http_status = 404

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class InvalidInputError(StudyError):
    """Request rejected before any computation."""
    http_status = 400


class GradingError(StudyError):
    """The AI grader failed or returned unusable output."""
    http_status = 502


class ConflictError(StudyError):
    """The card was reviewed concurrently; the caller should refetch and retry."""
    http_status = 409

    def __init__(self, card_id: str):
        self.card_id = card_id
        super().__init__(f"Card was reviewed concurrently: {card_id}")


class PersistenceError(StudyError):
    """Database failure; the surrounding transaction was rolled back."""
    http_status = 500
