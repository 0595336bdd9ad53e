from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Any, Dict, List, Optional


class MentorCreate(BaseModel):
    name: str
    email: EmailStr | None = None
    department: str | None = None
    specialization: str | None = None
    mobile_number: str | None = None


class MentorUpdate(BaseModel):
    name: str | None = None
    email: EmailStr | None = None
    department: str | None = None
    specialization: str | None = None
    mobile_number: str | None = None
    is_active: bool | None = None


class MentorOut(BaseModel):
    id: int
    name: str
    email: EmailStr | None
    department: str | None
    specialization: str | None
    mobile_number: str | None
    is_active: bool
    created_at: datetime
    class Config:
        from_attributes = True


class MenteeImportRequest(BaseModel):
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    assignment_method: Optional[str] = None


class NotificationOut(BaseModel):
    id: int
    message: str
    is_read: bool
    is_urgent: bool
    target_roles: List[str]
    created_at: datetime
    class Config:
        from_attributes = True
