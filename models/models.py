from datetime import datetime
from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text

from models.base import Base


class UserRole:
    ADMIN = "admin"
    MENTOR = "mentor"
    MENTEE = "mentee"


class Mentor(Base):
    __tablename__ = "mentors"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=True)
    department = Column(String(255))
    specialization = Column(String(255))
    mobile_number = Column(String(32))
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=False), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=False), default=datetime.utcnow, nullable=False)


class Mentee(Base):
    __tablename__ = "mentees"
    id = Column(Integer, primary_key=True, autoincrement=True)
    usn = Column(String(64), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    email = Column(String(255))
    semester = Column(Integer, nullable=False)
    section = Column(String(16), nullable=False)
    # plain FK; mentors reach their mentees by reverse lookup only
    mentor_id = Column(Integer, ForeignKey("mentors.id"), nullable=True, index=True)
    mobile_number = Column(String(32))
    parent_mobile_number = Column(String(32))
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=False), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=False), default=datetime.utcnow, nullable=False)


class Notification(Base):
    __tablename__ = "notifications"
    id = Column(Integer, primary_key=True, autoincrement=True)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    is_urgent = Column(Boolean, default=False, nullable=False)
    target_roles = Column(JSON, nullable=False)
    target_user_id = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=False), default=datetime.utcnow, nullable=False)


class ErrorLog(Base):
    __tablename__ = "error_logs"
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=True)
    action = Column(String(128), nullable=False)
    error_message = Column(Text, nullable=False)
    stack_trace = Column(Text)
    created_at = Column(DateTime(timezone=False), default=datetime.utcnow, nullable=False)
