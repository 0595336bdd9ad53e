from datetime import datetime
from sqlalchemy.orm import Session
from sqlalchemy import select
from models.models import Mentor, Notification

def get_mentor(db: Session, mentor_id: int) -> Mentor | None:
    return db.execute(select(Mentor).where(Mentor.id == mentor_id)).scalar_one_or_none()

def list_mentors(db: Session) -> list[Mentor]:
    return list(db.execute(select(Mentor).order_by(Mentor.id)).scalars().all())

def create_mentor(db: Session, *, name: str, email: str | None = None, department: str | None = None,
                  specialization: str | None = None, mobile_number: str | None = None) -> Mentor:
    mentor = Mentor(
        name=name,
        email=email.lower() if email else None,
        department=department,
        specialization=specialization,
        mobile_number=mobile_number,
        is_active=True,
    )
    db.add(mentor)
    db.commit()
    db.refresh(mentor)
    return mentor

def update_mentor(db: Session, mentor: Mentor, **fields) -> Mentor:
    for key, value in fields.items():
        if value is not None:
            setattr(mentor, key, value)
    mentor.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(mentor)
    return mentor

def set_mentor_active(db: Session, mentor: Mentor, is_active: bool) -> None:
    mentor.is_active = is_active
    mentor.updated_at = datetime.utcnow()
    db.commit()

def delete_mentor(db: Session, mentor: Mentor) -> None:
    db.delete(mentor)
    db.commit()

def list_notifications(db: Session, limit: int = 50) -> list[Notification]:
    stmt = select(Notification).order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit)
    return list(db.execute(stmt).scalars().all())
