"""
Assignment Engine Errors
"""

from typing import List, Optional


class AssignmentError(Exception):
    """Base class for every error raised by the assignment engine."""


class NoMentorsAvailable(AssignmentError):
    """Raised when an assignment is attempted with zero candidate mentors."""

    def __init__(self, message: str = "No active mentors available for assignment"):
        super().__init__(message)


class InconsistentSnapshot(AssignmentError):
    """A mentee in the roster references a mentor that is not in the roster."""

    def __init__(self, mentee_id: int, mentor_id: Optional[int], message: Optional[str] = None):
        self.mentee_id = mentee_id
        self.mentor_id = mentor_id
        super().__init__(
            message
            or f"Mentee {mentee_id} references mentor {mentor_id}, which is not in the roster snapshot"
        )


class PersistenceWriteFailed(AssignmentError):
    """
    Writing one mentee's mentor pointer failed.

    `applied` holds the decisions that were written before the failure; they
    stay written.
    """

    def __init__(self, mentee_id: int, applied: Optional[List] = None):
        self.mentee_id = mentee_id
        self.applied = list(applied or [])
        super().__init__(
            f"Failed to persist mentor assignment for mentee {mentee_id} "
            f"({len(self.applied)} earlier assignment(s) already applied)"
        )
