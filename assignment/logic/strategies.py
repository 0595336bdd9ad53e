"""
Assignment Strategies

Dispatch table for the batch assignment policies. Every strategy has the
same signature:

    strategy(mentees, candidate_ids, index, rng) -> List[AssignmentDecision]

`equal`, `balanced` and `manual` are deterministic. `semester` draws from
`rng`; pass a seeded random.Random to reproduce a run.
"""

import random
from typing import Callable, Dict, List, Optional, Sequence

from .balanced import assign_balanced
from .constants import AssignmentStrategy, SEMESTER_BUCKETS, parse_strategy
from .contracts import AssignmentDecision, MenteeSnapshot
from .errors import NoMentorsAvailable
from .load_index import LoadIndex

StrategyFn = Callable[
    [Sequence[MenteeSnapshot], Sequence[int], LoadIndex, random.Random],
    List[AssignmentDecision],
]


def _prepare(candidate_ids: Sequence[int], index: LoadIndex) -> List[int]:
    candidates = sorted(candidate_ids)
    if not candidates:
        raise NoMentorsAvailable()
    for mentor_id in candidates:
        index.add_mentor(mentor_id)
    return candidates


def _decision(mentee: MenteeSnapshot, to_mentor_id: Optional[int]) -> AssignmentDecision:
    return AssignmentDecision(
        mentee_id=mentee.id,
        semester=mentee.semester,
        from_mentor_id=mentee.mentor_id,
        to_mentor_id=to_mentor_id,
    )


def assign_equal(
    mentees: Sequence[MenteeSnapshot],
    candidate_ids: Sequence[int],
    index: LoadIndex,
    rng: random.Random,
) -> List[AssignmentDecision]:
    """Round robin over mentors (sorted by id) by position in the batch."""
    candidates = _prepare(candidate_ids, index)
    decisions = []
    for position, mentee in enumerate(mentees):
        target = candidates[position % len(candidates)]
        index.record(target, mentee.semester)
        decisions.append(_decision(mentee, target))
    return decisions


def semester_bucket(candidates: Sequence[int], semester: int) -> List[int]:
    """Mentors whose position maps onto the semester's bucket."""
    slot = (semester - 1) % SEMESTER_BUCKETS
    return [
        mentor_id for position, mentor_id in enumerate(candidates)
        if position % SEMESTER_BUCKETS == slot
    ]


def assign_semester_affinity(
    mentees: Sequence[MenteeSnapshot],
    candidate_ids: Sequence[int],
    index: LoadIndex,
    rng: random.Random,
) -> List[AssignmentDecision]:
    """Random pick within the semester bucket, any mentor if the bucket is empty."""
    candidates = _prepare(candidate_ids, index)
    decisions = []
    for mentee in mentees:
        bucket = semester_bucket(candidates, mentee.semester) or candidates
        target = rng.choice(bucket)
        index.record(target, mentee.semester)
        decisions.append(_decision(mentee, target))
    return decisions


def assign_balanced_strategy(
    mentees: Sequence[MenteeSnapshot],
    candidate_ids: Sequence[int],
    index: LoadIndex,
    rng: random.Random,
) -> List[AssignmentDecision]:
    return assign_balanced(index, mentees, candidate_ids)


def assign_manual(
    mentees: Sequence[MenteeSnapshot],
    candidate_ids: Sequence[int],
    index: LoadIndex,
    rng: random.Random,
) -> List[AssignmentDecision]:
    """Leave every mentee unassigned."""
    return [_decision(mentee, None) for mentee in mentees]


STRATEGIES: Dict[AssignmentStrategy, StrategyFn] = {
    AssignmentStrategy.EQUAL: assign_equal,
    AssignmentStrategy.SEMESTER: assign_semester_affinity,
    AssignmentStrategy.BALANCED: assign_balanced_strategy,
    AssignmentStrategy.MANUAL: assign_manual,
}


def select_strategy(strategy) -> StrategyFn:
    """
    Look up the strategy function for a name or AssignmentStrategy.

    Raises:
        ValueError: unknown strategy name
    """
    return STRATEGIES[parse_strategy(strategy)]


def needs_mentors(strategy) -> bool:
    return parse_strategy(strategy) != AssignmentStrategy.MANUAL
