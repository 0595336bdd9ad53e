"""
Engine Runner

Wires the assignment engine to a database session:
1. Builds SQL-backed roster provider, writer and notifier
2. Runs one engine operation
3. Returns the engine result

This is a pure orchestration layer - NO assignment decisions here.
"""

import logging
import os
import random
from typing import Any, Dict, Iterable, List, Optional
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.models import Mentee, Mentor

from .adapter import SqlAssignmentWriter, SqlChangeNotifier, SqlRosterProvider
from .constants import (
    AssignmentStrategy,
    IMPORT_MESSAGE,
    MAX_SEMESTER,
    MIN_SEMESTER,
    REASSIGNMENT_TARGET_ROLES,
    parse_strategy,
)
from .contracts import BatchAssignmentResult, ImportSummary, MentorLoad, RebalanceResult
from .engine import AssignmentEngine
from .errors import AssignmentError

logger = logging.getLogger(__name__)

SEMESTER_AFFINITY_SEED = os.getenv("SEMESTER_AFFINITY_SEED")

REQUIRED_IMPORT_FIELDS = ("name", "usn", "semester", "section")
MENTOR_ID_FIELDS = ("mentor_id", "mentorId", "MentorId")


def _make_rng() -> random.Random:
    """Seeded RNG for the semester strategy; the seed is logged so a run can be replayed."""
    if SEMESTER_AFFINITY_SEED:
        seed = int(SEMESTER_AFFINITY_SEED)
    else:
        seed = random.SystemRandom().randrange(2 ** 32)
    logger.debug(f"Semester-affinity RNG seed: {seed}")
    return random.Random(seed)


def build_engine(db: Session, rng: Optional[random.Random] = None) -> AssignmentEngine:
    return AssignmentEngine(
        roster_provider=SqlRosterProvider(db),
        writer=SqlAssignmentWriter(db),
        notifier=SqlChangeNotifier(db),
        rng=rng or _make_rng(),
    )


def run_rebalance(db: Session, mentor_id: int) -> RebalanceResult:
    """Redistribute the mentees of a mentor being deactivated or deleted."""
    return build_engine(db).rebalance_after_mentor_removal(mentor_id)


def run_assign_batch(
    db: Session,
    mentee_ids: Iterable[int],
    strategy=AssignmentStrategy.BALANCED,
) -> BatchAssignmentResult:
    return build_engine(db).assign_batch(list(mentee_ids), strategy)


def run_assign_unassigned(
    db: Session,
    strategy=AssignmentStrategy.BALANCED,
) -> BatchAssignmentResult:
    """'Assign all unassigned mentees' admin action / reconciliation pass."""
    return build_engine(db).assign_unassigned(strategy)


def get_mentor_loads(db: Session) -> List[MentorLoad]:
    return build_engine(db).current_loads()


# =============================================================================
# BULK IMPORT
# =============================================================================

def _parse_semester(value: Any) -> int:
    try:
        semester = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValueError(f"Invalid semester '{value}'")
    if not MIN_SEMESTER <= semester <= MAX_SEMESTER:
        raise ValueError(f"Semester must be between {MIN_SEMESTER} and {MAX_SEMESTER}, got {semester}")
    return semester


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _explicit_mentor(db: Session, row: Dict[str, Any], row_no: int, summary: ImportSummary) -> Optional[int]:
    """Mentor named on the row, if it exists and is active; otherwise a row warning and None."""
    raw = next((row.get(f) for f in MENTOR_ID_FIELDS if _clean(row.get(f)) is not None), None)
    if raw is None:
        return None
    try:
        mentor_id = int(str(raw).strip())
    except ValueError:
        summary.warnings.append(f"Row {row_no}: Invalid mentor id '{raw}', left unassigned")
        return None
    active = db.execute(
        select(Mentor.is_active).where(Mentor.id == mentor_id)
    ).scalar_one_or_none()
    if not active:
        summary.warnings.append(
            f"Row {row_no}: Mentor {mentor_id} not found or inactive, left unassigned"
        )
        return None
    return mentor_id


def import_mentees(
    db: Session,
    rows: List[Dict[str, Any]],
    strategy=AssignmentStrategy.EQUAL,
) -> ImportSummary:
    """
    Create mentees from already-parsed spreadsheet rows, then assign them.

    Rows are numbered from 2 in error messages, matching the sheet row
    under a header line. A row naming an active mentor keeps that mentor;
    only the still-unassigned mentees go through the strategy. A failing
    assignment does not undo the import; it is reported in
    `assignment_error` and the next "assign all" run picks the mentees up.

    Raises:
        ValueError: unknown strategy
    """
    strategy = parse_strategy(strategy)
    summary = ImportSummary()
    seen_usns = set()
    pending: List[int] = []

    for i, row in enumerate(rows):
        row_no = i + 2
        missing = [f for f in REQUIRED_IMPORT_FIELDS if _clean(row.get(f)) is None]
        if missing:
            summary.failed += 1
            summary.errors.append(f"Row {row_no}: Missing required fields")
            continue

        usn = _clean(row.get("usn")).upper()
        try:
            semester = _parse_semester(row.get("semester"))
        except ValueError as e:
            summary.failed += 1
            summary.errors.append(f"Row {row_no}: {e}")
            continue

        existing = db.execute(select(Mentee.id).where(Mentee.usn == usn)).scalar_one_or_none()
        if existing is not None or usn in seen_usns:
            summary.failed += 1
            summary.errors.append(f"Row {row_no}: Student with USN {usn} already exists")
            continue

        mentor_id = _explicit_mentor(db, row, row_no, summary)
        mentee = Mentee(
            usn=usn,
            name=_clean(row.get("name")),
            email=_clean(row.get("email")),
            semester=semester,
            section=_clean(row.get("section")),
            mentor_id=mentor_id,
            mobile_number=_clean(row.get("mobile_number")),
            parent_mobile_number=_clean(row.get("parent_mobile_number")),
        )
        try:
            db.add(mentee)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            summary.failed += 1
            summary.errors.append(f"Row {row_no}: {e}")
            logger.error(f"Failed to create mentee from row {row_no}: {e}")
            continue

        seen_usns.add(usn)
        summary.success += 1
        summary.created_ids.append(mentee.id)
        if mentor_id is None:
            pending.append(mentee.id)

    logger.info(f"📦 Imported {summary.success} mentee(s), {summary.failed} row(s) failed")

    if not pending:
        return summary

    engine = build_engine(db)
    try:
        summary.assignment = engine.assign_batch(pending, strategy)
    except AssignmentError as e:
        logger.error(f"Assignment after import failed: {e}")
        summary.assignment_error = str(e)
        return summary

    if strategy != AssignmentStrategy.MANUAL and summary.assignment.assigned_count:
        engine.notifier.notify(
            IMPORT_MESSAGE.format(count=summary.success),
            list(REASSIGNMENT_TARGET_ROLES),
            is_urgent=False,
        )

    return summary
