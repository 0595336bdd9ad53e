"""
Load Index

In-memory mentor -> (total mentee count, count per semester) map, built fresh
for every engine invocation from a roster snapshot.
"""

from typing import Dict, Iterable, List, Optional

from .contracts import MenteeSnapshot, MentorLoad, MentorSnapshot
from .errors import InconsistentSnapshot


class LoadIndex:
    """
    Mutable load bookkeeping owned by a single engine invocation.

    Semesters never seen for a mentor read as zero.
    """

    def __init__(self, mentor_ids: Iterable[int] = ()):
        self._totals: Dict[int, int] = {}
        self._semesters: Dict[int, Dict[int, int]] = {}
        for mentor_id in mentor_ids:
            self.add_mentor(mentor_id)

    def add_mentor(self, mentor_id: int) -> None:
        if mentor_id not in self._totals:
            self._totals[mentor_id] = 0
            self._semesters[mentor_id] = {}

    def total_load(self, mentor_id: int) -> int:
        return self._totals[mentor_id]

    def semester_load(self, mentor_id: int, semester: int) -> int:
        return self._semesters[mentor_id].get(semester, 0)

    def record(self, mentor_id: int, semester: int) -> None:
        """Count one more mentee of `semester` against `mentor_id`."""
        self._totals[mentor_id] += 1
        per_semester = self._semesters[mentor_id]
        per_semester[semester] = per_semester.get(semester, 0) + 1

    def mentor_ids(self) -> List[int]:
        return sorted(self._totals)

    def copy(self) -> "LoadIndex":
        clone = LoadIndex()
        clone._totals = dict(self._totals)
        clone._semesters = {k: dict(v) for k, v in self._semesters.items()}
        return clone

    def loads(self) -> List[MentorLoad]:
        return [
            MentorLoad(
                mentor_id=mentor_id,
                total_load=self._totals[mentor_id],
                semester_load=dict(sorted(self._semesters[mentor_id].items())),
            )
            for mentor_id in self.mentor_ids()
        ]

    def total(self) -> int:
        return sum(self._totals.values())

    def __contains__(self, mentor_id) -> bool:
        return mentor_id in self._totals

    def __len__(self) -> int:
        return len(self._totals)

    def __repr__(self) -> str:
        return f"LoadIndex({self._totals!r})"


def build_load_index(
    mentors: Iterable[MentorSnapshot],
    mentees: Iterable[MenteeSnapshot],
    exclude_mentor_id: Optional[int] = None,
    skip_mentee_ids: Iterable[int] = (),
) -> LoadIndex:
    """
    Build the load index for every active mentor.

    Args:
        mentors: Roster mentors, active and inactive
        mentees: Roster mentees
        exclude_mentor_id: Mentor being removed; neither indexed nor counted
        skip_mentee_ids: Mentees about to be (re)placed; validated but not counted

    Returns:
        LoadIndex keyed by exactly the active mentor ids (minus the excluded one)

    Raises:
        InconsistentSnapshot: a mentee points at a mentor id absent from `mentors`
    """
    mentors = list(mentors)
    known_ids = {m.id for m in mentors}
    skip = set(skip_mentee_ids)
    index = LoadIndex(
        m.id for m in mentors if m.is_active and m.id != exclude_mentor_id
    )

    for mentee in mentees:
        if not mentee.is_active or mentee.mentor_id is None:
            continue
        if mentee.mentor_id not in known_ids:
            raise InconsistentSnapshot(mentee.id, mentee.mentor_id)
        if mentee.id in skip:
            continue
        if mentee.mentor_id == exclude_mentor_id or mentee.mentor_id not in index:
            # departing or inactive mentor
            continue
        index.record(mentee.mentor_id, mentee.semester)

    return index
