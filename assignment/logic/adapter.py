"""
Data Adapter for the Assignment Engine

Reads the mentor/mentee tables into a RosterSnapshot and applies engine
decisions back to them.

- NO assignment logic
- One UPDATE + commit per mentee (no batch transaction)
"""

import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from models.models import Mentee, Mentor, Notification

from .contracts import MenteeSnapshot, MentorSnapshot, RosterSnapshot

logger = logging.getLogger(__name__)


class SqlRosterProvider:
    """Reads all mentors (active or not) and all active mentees."""

    def __init__(self, db: Session):
        self.db = db

    def load_roster(self) -> RosterSnapshot:
        mentors = self.db.execute(select(Mentor).order_by(Mentor.id)).scalars().all()
        mentees = self.db.execute(
            select(Mentee).where(Mentee.is_active.is_(True)).order_by(Mentee.id)
        ).scalars().all()

        return RosterSnapshot(
            mentors=[
                MentorSnapshot(id=m.id, is_active=bool(m.is_active), name=m.name)
                for m in mentors
            ],
            mentees=[
                MenteeSnapshot(
                    id=m.id,
                    semester=m.semester,
                    mentor_id=m.mentor_id,
                    is_active=bool(m.is_active),
                )
                for m in mentees
            ],
        )


class SqlAssignmentWriter:
    """Applies one mentor pointer per call and commits it on its own."""

    def __init__(self, db: Session):
        self.db = db

    def set_mentor(self, mentee_id: int, mentor_id: Optional[int]) -> None:
        try:
            result = self.db.execute(
                update(Mentee)
                .where(Mentee.id == mentee_id)
                .values(mentor_id=mentor_id, updated_at=datetime.utcnow())
            )
            if result.rowcount == 0:
                raise LookupError(f"Mentee {mentee_id} not found")
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise


class SqlChangeNotifier:
    """Stores the aggregate alert as a notifications row."""

    def __init__(self, db: Session):
        self.db = db

    def notify(self, message: str, target_roles: List[str], is_urgent: bool = False) -> None:
        self.db.add(
            Notification(
                message=message,
                target_roles=list(target_roles),
                is_urgent=is_urgent,
                is_read=False,
            )
        )
        self.db.commit()
        logger.info(f"📣 Notification queued for {target_roles}: {message}")


def detach_mentees(db: Session, mentor_id: int) -> int:
    """
    Null the mentor pointer of every mentee (active or not) still on `mentor_id`.

    Used right before a mentor row is deleted.
    """
    result = db.execute(
        update(Mentee)
        .where(Mentee.mentor_id == mentor_id)
        .values(mentor_id=None, updated_at=datetime.utcnow())
    )
    db.commit()
    return result.rowcount or 0
