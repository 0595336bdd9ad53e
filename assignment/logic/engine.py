"""
Assignment Engine

Single entry point for every mentor-assignment decision in the service.

Both call sites that move mentees around go through here:
1. Mentor removal - redistribute exactly the departing mentor's mentees
2. Batch assignment - place new or unassigned mentees with a chosen strategy

Each invocation reads the roster once, decides entirely in memory, then
applies one idempotent write per mentee. Invocations are serialized on a
process-wide roster lock so no decision is made against a stale snapshot.
"""

import logging
import random
import threading
from typing import Iterable, List, Optional, Protocol, Sequence

from .balanced import assign_balanced, order_by_semester
from .constants import (
    AssignmentStrategy,
    REASSIGNMENT_MESSAGE,
    REASSIGNMENT_TARGET_ROLES,
    parse_strategy,
)
from .contracts import (
    AssignmentDecision,
    BatchAssignmentResult,
    MenteeSnapshot,
    MentorLoad,
    RebalanceResult,
    RosterSnapshot,
)
from .errors import InconsistentSnapshot, NoMentorsAvailable, PersistenceWriteFailed
from .load_index import build_load_index
from .strategies import needs_mentors, select_strategy

logger = logging.getLogger(__name__)

# One lock for the whole roster; roster sizes are small enough that
# per-mentee granularity buys nothing.
ROSTER_LOCK = threading.RLock()


# =============================================================================
# COLLABORATORS
# =============================================================================

class RosterProvider(Protocol):
    def load_roster(self) -> RosterSnapshot: ...


class AssignmentWriter(Protocol):
    def set_mentor(self, mentee_id: int, mentor_id: Optional[int]) -> None: ...


class ChangeNotifier(Protocol):
    def notify(self, message: str, target_roles: List[str], is_urgent: bool = False) -> None: ...


# =============================================================================
# ENGINE
# =============================================================================

class AssignmentEngine:
    """
    Orchestrates snapshot -> load index -> strategy -> writes -> notification.

    The engine never owns a transaction. A write failure stops the run and
    surfaces as PersistenceWriteFailed; decisions written before it stay
    applied and a later run reconciles the rest.
    """

    def __init__(
        self,
        roster_provider: RosterProvider,
        writer: AssignmentWriter,
        notifier: Optional[ChangeNotifier] = None,
        rng: Optional[random.Random] = None,
    ):
        self.roster_provider = roster_provider
        self.writer = writer
        self.notifier = notifier
        self.rng = rng or random.Random()

    # -------------------------------------------------------------------------
    # Mentor removal
    # -------------------------------------------------------------------------

    def rebalance_after_mentor_removal(self, mentor_id: int) -> RebalanceResult:
        """
        Redistribute the active mentees of a mentor who is leaving.

        Args:
            mentor_id: Mentor being deactivated or deleted

        Returns:
            RebalanceResult. With no other active mentor the mentees are
            explicitly unassigned and `ok` is False.
        """
        with ROSTER_LOCK:
            roster = self.roster_provider.load_roster()
            mentees = roster.mentees_of(mentor_id)
            if not mentees:
                logger.info(f"Mentor {mentor_id} has no active mentees, nothing to rebalance")
                return RebalanceResult(mentor_id=mentor_id)

            logger.info(f"🔁 Rebalancing {len(mentees)} mentee(s) away from mentor {mentor_id}")

            index = build_load_index(
                roster.mentors, roster.active_mentees(), exclude_mentor_id=mentor_id
            )

            try:
                decisions = assign_balanced(index, mentees, index.mentor_ids())
            except NoMentorsAvailable:
                logger.warning(
                    f"No active mentors left to take over from mentor {mentor_id}; "
                    f"unassigning {len(mentees)} mentee(s)"
                )
                decisions = _unassign_all(order_by_semester(mentees))
                self._apply(decisions)
                return RebalanceResult(
                    mentor_id=mentor_id,
                    moved_count=0,
                    unassigned_count=len(decisions),
                    ok=False,
                    decisions=decisions,
                )

            self._apply(decisions)

            moved = len(decisions)
            notified = False
            if moved and self.notifier is not None:
                self.notifier.notify(
                    REASSIGNMENT_MESSAGE.format(count=moved),
                    list(REASSIGNMENT_TARGET_ROLES),
                    is_urgent=True,
                )
                notified = True

            logger.info(f"✅ Moved {moved} mentee(s) from mentor {mentor_id}")
            return RebalanceResult(
                mentor_id=mentor_id,
                moved_count=moved,
                ok=True,
                notified=notified,
                decisions=decisions,
            )

    # -------------------------------------------------------------------------
    # Batch assignment
    # -------------------------------------------------------------------------

    def assign_batch(
        self,
        mentee_ids: Iterable[int],
        strategy=AssignmentStrategy.BALANCED,
    ) -> BatchAssignmentResult:
        """
        Assign the given mentees with one strategy.

        The mentees must already exist in the roster (the import path creates
        them unassigned first). Loads are computed over the full roster, not
        just the batch.

        Raises:
            ValueError: unknown strategy
            InconsistentSnapshot: a batch id is not in the roster
        """
        strategy = parse_strategy(strategy)
        with ROSTER_LOCK:
            roster = self.roster_provider.load_roster()
            by_id = {m.id: m for m in roster.mentees}
            batch: List[MenteeSnapshot] = []
            # repeated ids collapse to their first occurrence
            for mentee_id in dict.fromkeys(mentee_ids):
                if mentee_id not in by_id:
                    raise InconsistentSnapshot(
                        mentee_id, None, f"Mentee {mentee_id} is not in the roster snapshot"
                    )
                batch.append(by_id[mentee_id])
            return self._assign(roster, batch, strategy)

    def assign_unassigned(self, strategy=AssignmentStrategy.BALANCED) -> BatchAssignmentResult:
        """
        Assign every active mentee that has no usable mentor.

        Picks up mentees with a null mentor and mentees still pointing at an
        inactive mentor, which is also how partially applied runs recover.
        """
        strategy = parse_strategy(strategy)
        with ROSTER_LOCK:
            roster = self.roster_provider.load_roster()
            active_ids = {m.id for m in roster.active_mentors()}
            batch = [
                m for m in roster.active_mentees()
                if m.mentor_id is None or m.mentor_id not in active_ids
            ]
            return self._assign(roster, batch, strategy)

    def current_loads(self) -> List[MentorLoad]:
        """Load of every active mentor as of now."""
        with ROSTER_LOCK:
            roster = self.roster_provider.load_roster()
            return build_load_index(roster.mentors, roster.active_mentees()).loads()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _assign(
        self,
        roster: RosterSnapshot,
        batch: Sequence[MenteeSnapshot],
        strategy: AssignmentStrategy,
    ) -> BatchAssignmentResult:
        warnings: List[str] = []
        inactive = [m.id for m in batch if not m.is_active]
        if inactive:
            warnings.append(f"Skipped {len(inactive)} inactive mentee(s)")
            batch = [m for m in batch if m.is_active]

        index = build_load_index(
            roster.mentors,
            roster.active_mentees(),
            skip_mentee_ids=[m.id for m in batch],
        )
        candidates = index.mentor_ids()

        if not batch:
            return BatchAssignmentResult(
                strategy=strategy,
                mentor_count=len(candidates) if needs_mentors(strategy) else 0,
                warnings=warnings,
            )

        logger.info(
            f"🎯 Assigning {len(batch)} mentee(s) across {len(candidates)} mentor(s) "
            f"using '{strategy.value}' strategy"
        )

        strategy_fn = select_strategy(strategy)
        try:
            decisions = strategy_fn(batch, candidates, index, self.rng)
        except NoMentorsAvailable:
            logger.warning(f"No active mentors available; leaving {len(batch)} mentee(s) unassigned")
            warnings.append("No active mentors available; mentees left unassigned")
            decisions = _unassign_all(batch)
            candidates = []

        self._apply(decisions)

        assigned = sum(1 for d in decisions if d.to_mentor_id is not None)
        return BatchAssignmentResult(
            strategy=strategy,
            assigned_count=assigned,
            unassigned_count=len(decisions) - assigned,
            mentor_count=len(candidates) if needs_mentors(strategy) else 0,
            decisions=decisions,
            warnings=warnings,
        )

    def _apply(self, decisions: Sequence[AssignmentDecision]) -> None:
        applied: List[AssignmentDecision] = []
        for decision in decisions:
            try:
                self.writer.set_mentor(decision.mentee_id, decision.to_mentor_id)
            except Exception as exc:
                logger.error(
                    f"❌ Failed to write mentor {decision.to_mentor_id} for mentee "
                    f"{decision.mentee_id} after {len(applied)} write(s): {exc}"
                )
                raise PersistenceWriteFailed(decision.mentee_id, applied) from exc
            applied.append(decision)


def _unassign_all(mentees: Iterable[MenteeSnapshot]) -> List[AssignmentDecision]:
    return [
        AssignmentDecision(
            mentee_id=m.id,
            semester=m.semester,
            from_mentor_id=m.mentor_id,
            to_mentor_id=None,
        )
        for m in mentees
    ]

