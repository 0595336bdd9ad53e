"""
Balanced Assignment

Greedy, semester-diversity aware placement of mentees onto mentors.

For each mentee (lowest semester first, input order within a semester):
1. Mentors with no mentee from that semester yet are preferred
2. Among the preferred set (or all candidates if it is empty) the mentor
   with the smallest total load wins, ties going to the smallest mentor id
3. The load index is updated before the next mentee is placed
"""

from typing import Iterable, List, Sequence

from .contracts import AssignmentDecision, MenteeSnapshot
from .errors import NoMentorsAvailable
from .load_index import LoadIndex


def order_by_semester(mentees: Iterable[MenteeSnapshot]) -> List[MenteeSnapshot]:
    """Semester ascending, original order within a semester."""
    return sorted(mentees, key=lambda m: m.semester)


def pick_mentor(index: LoadIndex, candidate_ids: Sequence[int], semester: int) -> int:
    """
    Choose the mentor for one mentee of `semester`.

    Args:
        index: Current load index
        candidate_ids: Mentors allowed to receive the mentee
        semester: The mentee's semester

    Returns:
        Chosen mentor id
    """
    need_semester = [
        mentor_id for mentor_id in candidate_ids
        if index.semester_load(mentor_id, semester) == 0
    ]
    pool = need_semester or candidate_ids
    return min(pool, key=lambda mentor_id: (index.total_load(mentor_id), mentor_id))


def assign_balanced(
    index: LoadIndex,
    mentees: Iterable[MenteeSnapshot],
    candidate_ids: Iterable[int],
) -> List[AssignmentDecision]:
    """
    Assign every mentee to one candidate mentor.

    Args:
        index: Load index, mutated in place as decisions are made
        mentees: Mentees needing a mentor
        candidate_ids: Active mentors allowed to receive mentees

    Returns:
        One decision per mentee, in processing order

    Raises:
        NoMentorsAvailable: `candidate_ids` is empty
    """
    candidates = sorted(set(candidate_ids))
    if not candidates:
        raise NoMentorsAvailable()

    for mentor_id in candidates:
        index.add_mentor(mentor_id)

    decisions: List[AssignmentDecision] = []
    for mentee in order_by_semester(mentees):
        target = pick_mentor(index, candidates, mentee.semester)
        index.record(target, mentee.semester)
        decisions.append(
            AssignmentDecision(
                mentee_id=mentee.id,
                semester=mentee.semester,
                from_mentor_id=mentee.mentor_id,
                to_mentor_id=target,
            )
        )

    return decisions
