"""
Data Contracts for the Assignment Engine

Defines the roster snapshot the engine reads (input), the per-mentee
decisions it produces, and the result objects returned to callers.
"""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from .constants import AssignmentStrategy, ENGINE_VERSION, MAX_SEMESTER, MIN_SEMESTER


# =============================================================================
# INPUT CONTRACTS
# =============================================================================

class MentorSnapshot(BaseModel):
    """A mentor as seen by one engine invocation."""
    id: int
    is_active: bool = True
    name: Optional[str] = None


class MenteeSnapshot(BaseModel):
    """A mentee as seen by one engine invocation."""
    id: int
    semester: int = Field(ge=MIN_SEMESTER, le=MAX_SEMESTER)
    mentor_id: Optional[int] = None  # None means unassigned
    is_active: bool = True


class RosterSnapshot(BaseModel):
    """
    Read-once view of mentors and mentees.

    Mentors include inactive ones so a mentee still pointing at a
    deactivated mentor can be told apart from a dangling reference.
    """
    mentors: List[MentorSnapshot] = Field(default_factory=list)
    mentees: List[MenteeSnapshot] = Field(default_factory=list)

    def mentor_ids(self) -> set:
        return {m.id for m in self.mentors}

    def active_mentors(self) -> List[MentorSnapshot]:
        return [m for m in self.mentors if m.is_active]

    def active_mentees(self) -> List[MenteeSnapshot]:
        return [m for m in self.mentees if m.is_active]

    def mentees_of(self, mentor_id: int) -> List[MenteeSnapshot]:
        """Active mentees currently pointing at `mentor_id`."""
        return [m for m in self.mentees if m.is_active and m.mentor_id == mentor_id]


# =============================================================================
# OUTPUT CONTRACTS
# =============================================================================

class MentorLoad(BaseModel):
    """Total and per-semester mentee counts for one mentor."""
    mentor_id: int
    total_load: int = 0
    semester_load: Dict[int, int] = Field(default_factory=dict)


class AssignmentDecision(BaseModel):
    """Where one mentee goes. `to_mentor_id` of None is an explicit unassignment."""
    mentee_id: int
    semester: int
    from_mentor_id: Optional[int] = None
    to_mentor_id: Optional[int] = None


class RebalanceResult(BaseModel):
    """Outcome of redistributing a departing mentor's mentees."""
    mentor_id: int
    moved_count: int = 0
    unassigned_count: int = 0
    ok: bool = True
    notified: bool = False
    decisions: List[AssignmentDecision] = Field(default_factory=list)
    engine_version: str = ENGINE_VERSION


class BatchAssignmentResult(BaseModel):
    """Outcome of assigning a batch of mentees with one strategy."""
    strategy: AssignmentStrategy
    assigned_count: int = 0
    unassigned_count: int = 0
    mentor_count: int = 0
    decisions: List[AssignmentDecision] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    engine_version: str = ENGINE_VERSION

    def mapping(self) -> Dict[int, Optional[int]]:
        """mentee id -> mentor id"""
        return {d.mentee_id: d.to_mentor_id for d in self.decisions}


class ImportSummary(BaseModel):
    """Outcome of a bulk mentee import followed by batch assignment."""
    success: int = 0
    failed: int = 0
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    created_ids: List[int] = Field(default_factory=list)
    assignment: Optional[BatchAssignmentResult] = None
    assignment_error: Optional[str] = None

    @property
    def message(self) -> str:
        return f"{self.success} students imported successfully, {self.failed} failed"
