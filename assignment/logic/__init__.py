"""
Assignment Logic Module

Provides the mentee assignment & rebalancing engine.
"""

from .contracts import (
    MentorSnapshot,
    MenteeSnapshot,
    RosterSnapshot,
    MentorLoad,
    AssignmentDecision,
    RebalanceResult,
    BatchAssignmentResult,
    ImportSummary,
)
from .constants import AssignmentStrategy, parse_strategy
from .errors import (
    AssignmentError,
    NoMentorsAvailable,
    InconsistentSnapshot,
    PersistenceWriteFailed,
)
from .load_index import LoadIndex, build_load_index
from .balanced import assign_balanced
from .strategies import select_strategy
from .engine import AssignmentEngine, ROSTER_LOCK
from .memory import InMemoryRoster

__all__ = [
    # Main engine
    "AssignmentEngine",
    "ROSTER_LOCK",
    "build_load_index",
    "LoadIndex",
    "assign_balanced",
    "select_strategy",
    "InMemoryRoster",

    # Contracts
    "MentorSnapshot",
    "MenteeSnapshot",
    "RosterSnapshot",
    "MentorLoad",
    "AssignmentDecision",
    "RebalanceResult",
    "BatchAssignmentResult",
    "ImportSummary",

    # Enums
    "AssignmentStrategy",
    "parse_strategy",

    # Errors
    "AssignmentError",
    "NoMentorsAvailable",
    "InconsistentSnapshot",
    "PersistenceWriteFailed",
]
