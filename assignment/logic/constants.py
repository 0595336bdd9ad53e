"""
Assignment Engine Constants

Semester range, strategy names and notification templates used by the
assignment engine.
"""

from enum import Enum
from typing import List

# =============================================================================
# SEMESTERS
# =============================================================================

MIN_SEMESTER = 1
MAX_SEMESTER = 8
SEMESTERS: List[int] = list(range(MIN_SEMESTER, MAX_SEMESTER + 1))

# Number of semester buckets used by the semester-affinity strategy
SEMESTER_BUCKETS = 8

# =============================================================================
# STRATEGIES
# =============================================================================

class AssignmentStrategy(str, Enum):
    """Policies the batch dispatcher can apply to new mentees."""
    EQUAL = "equal"          # Round robin by batch position
    SEMESTER = "semester"    # Semester buckets, random pick within bucket
    BALANCED = "balanced"    # Greedy, semester-diversity aware
    MANUAL = "manual"        # Leave unassigned


def parse_strategy(value) -> AssignmentStrategy:
    """Parse a strategy name, raising ValueError on unknown values."""
    if isinstance(value, AssignmentStrategy):
        return value
    text = str(value or "").strip().lower()
    try:
        return AssignmentStrategy(text)
    except ValueError:
        allowed = ", ".join(s.value for s in AssignmentStrategy)
        raise ValueError(f"Unknown assignment strategy '{value}' (expected one of: {allowed})")


# =============================================================================
# NOTIFICATIONS
# =============================================================================

ROLE_ADMIN = "admin"
ROLE_MENTOR = "mentor"

REASSIGNMENT_TARGET_ROLES: List[str] = [ROLE_ADMIN, ROLE_MENTOR]
REASSIGNMENT_MESSAGE = "{count} mentee(s) were automatically reassigned to new mentors."
IMPORT_MESSAGE = "{count} mentees imported and automatically assigned to mentors"

ENGINE_VERSION = "1.0.0"
