"""
Assignment API Routes

Admin endpoints that create, update and remove mentors, import mentees and
trigger the assignment engine. Every mentee -> mentor decision is delegated
to assignment.logic; nothing here picks a mentor.
"""

import os
from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db import get_db
from models.schemas import MenteeImportRequest, MentorCreate, MentorOut, MentorUpdate, NotificationOut
from utils.crud_mentor import (
    create_mentor,
    delete_mentor,
    get_mentor,
    list_mentors,
    list_notifications,
    set_mentor_active,
    update_mentor,
)
from utils.error_log import log_error
from .logic.adapter import detach_mentees
from .logic.constants import ENGINE_VERSION, parse_strategy
from .logic.errors import AssignmentError
from .logic.runner import get_mentor_loads, import_mentees, run_assign_unassigned, run_rebalance


DEFAULT_ASSIGNMENT_STRATEGY = os.getenv("DEFAULT_ASSIGNMENT_STRATEGY", "equal")

router = APIRouter(prefix="/api/admin", tags=["assignment"])


def _reassign_safely(db: Session, mentor_id: int, action: str) -> Dict[str, Any]:
    """
    Run the rebalance for a departing mentor without letting a failure
    block the mentor update/delete that triggered it.
    """
    try:
        result = run_rebalance(db, mentor_id)
        return result.model_dump(mode="json")
    except (AssignmentError, SQLAlchemyError) as e:
        log_error(db, action, e)
        return {"mentor_id": mentor_id, "ok": False, "error": str(e)}


def _server_error(db: Session, action: str, e: Exception) -> JSONResponse:
    log_error(db, action, e)
    return JSONResponse(status_code=500, content={"success": False, "message": str(e)})


# =============================================================================
# MENTEE ASSIGNMENT
# =============================================================================

@router.post("/mentees/assign", summary="Assign all unassigned mentees")
def assign_unassigned_mentees(db_session=Depends(get_db)):
    """
    Run the balanced assignment over every active mentee without a usable
    mentor (never assigned, or still on a deactivated mentor).
    """
    db: Session
    with db_session as db:
        try:
            result = run_assign_unassigned(db)
        except (AssignmentError, SQLAlchemyError) as e:
            return _server_error(db, "assign_mentees", e)

        if not result.decisions:
            message = "No unassigned mentees found. All mentees are already assigned to mentors."
        elif result.assigned_count == 0:
            message = "No active mentors available; mentees remain unassigned."
        else:
            message = (
                f"Successfully assigned {result.assigned_count} mentees to {result.mentor_count} "
                f"mentors with balanced distribution across semesters."
            )
        return {"success": True, "message": message, "result": result.model_dump(mode="json")}


@router.post("/mentees/import", summary="Import mentees and assign mentors")
def import_mentee_rows(request: MenteeImportRequest, db_session=Depends(get_db)):
    """
    Create mentees from parsed spreadsheet rows and assign them.

    **Request Body:**
    - `rows`: list of `{name, usn, semester, section, mentor_id?, email?, mobile_number?, parent_mobile_number?}`
    - `assignment_method`: `equal` | `semester` | `balanced` | `manual`
    """
    try:
        strategy = parse_strategy(request.assignment_method or DEFAULT_ASSIGNMENT_STRATEGY)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not request.rows:
        raise HTTPException(status_code=400, detail="No rows supplied")

    db: Session
    with db_session as db:
        try:
            summary = import_mentees(db, request.rows, strategy)
        except SQLAlchemyError as e:
            return _server_error(db, "upload_students", e)

        if summary.failed > 0:
            log_error(
                db,
                "upload_students_partial",
                f"{summary.success} students imported successfully, {summary.failed} failed",
                details="\n".join(summary.errors),
            )
        if summary.assignment_error:
            log_error(db, "assign_imported_mentees", summary.assignment_error)

        return {
            "message": summary.message,
            "results": {
                "success": summary.success,
                "failed": summary.failed,
                "errors": summary.errors,
                "warnings": summary.warnings,
            },
            "assignment": summary.assignment.model_dump(mode="json") if summary.assignment else None,
            "assignment_error": summary.assignment_error,
        }


# =============================================================================
# MENTORS
# =============================================================================

@router.get("/mentors", response_model=list[MentorOut], summary="List mentors")
def get_mentors(db_session=Depends(get_db)):
    db: Session
    with db_session as db:
        return [MentorOut.model_validate(m) for m in list_mentors(db)]


@router.get("/mentors/loads", summary="Current mentee load per active mentor")
def get_loads(db_session=Depends(get_db)):
    db: Session
    with db_session as db:
        try:
            loads = get_mentor_loads(db)
        except AssignmentError as e:
            return _server_error(db, "get_mentor_loads", e)
        return {"loads": [l.model_dump(mode="json") for l in loads]}


@router.post("/mentors", response_model=MentorOut, status_code=201, summary="Create mentor")
def add_mentor(payload: MentorCreate, db_session=Depends(get_db)):
    db: Session
    with db_session as db:
        try:
            mentor = create_mentor(
                db,
                name=payload.name,
                email=payload.email,
                department=payload.department,
                specialization=payload.specialization,
                mobile_number=payload.mobile_number,
            )
        except SQLAlchemyError as e:
            log_error(db, "create_mentor", e)
            raise HTTPException(status_code=400, detail="Could not create mentor")
        return MentorOut.model_validate(mentor)


@router.put("/mentors/{mentor_id}", summary="Update mentor")
def edit_mentor(mentor_id: int, payload: MentorUpdate, db_session=Depends(get_db)):
    """
    Update a mentor. Deactivating an active mentor hands their mentees to
    the remaining active mentors.
    """
    db: Session
    with db_session as db:
        mentor = get_mentor(db, mentor_id)
        if not mentor:
            raise HTTPException(status_code=404, detail="Mentor not found")

        was_active = bool(mentor.is_active)
        try:
            mentor = update_mentor(
                db,
                mentor,
                name=payload.name,
                email=payload.email.lower() if payload.email else None,
                department=payload.department,
                specialization=payload.specialization,
                mobile_number=payload.mobile_number,
                is_active=payload.is_active,
            )
        except SQLAlchemyError as e:
            return _server_error(db, "update_mentor", e)

        reassignment: Optional[Dict[str, Any]] = None
        if was_active and payload.is_active is False:
            reassignment = _reassign_safely(db, mentor_id, "reassign_mentees")

        response = MentorOut.model_validate(mentor).model_dump(mode="json")
        response["reassignment"] = reassignment
        return response


@router.delete("/mentors/{mentor_id}", summary="Delete mentor")
def remove_mentor(mentor_id: int, db_session=Depends(get_db)):
    """
    Delete a mentor after redistributing their mentees. Any mentee the
    rebalance could not move is left unassigned for the next "assign all" run.
    """
    db: Session
    with db_session as db:
        mentor = get_mentor(db, mentor_id)
        if not mentor:
            raise HTTPException(status_code=404, detail="Mentor not found")

        try:
            set_mentor_active(db, mentor, False)
            reassignment = _reassign_safely(db, mentor_id, "reassign_mentees")
            detached = detach_mentees(db, mentor_id)
            delete_mentor(db, mentor)
        except SQLAlchemyError as e:
            return _server_error(db, "delete_mentor", e)

        return {
            "message": "Mentor deleted successfully",
            "reassignment": reassignment,
            "detached": detached,
        }


# =============================================================================
# NOTIFICATIONS
# =============================================================================

@router.get("/notifications", response_model=list[NotificationOut], summary="List notifications")
def get_notifications(limit: int = Query(default=50, ge=1, le=200), db_session=Depends(get_db)):
    db: Session
    with db_session as db:
        return [NotificationOut.model_validate(n) for n in list_notifications(db, limit)]


# =============================================================================
# HEALTH CHECK
# =============================================================================

@router.get("/assignment/health", summary="Assignment engine health check")
def health_check():
    """Check if the assignment engine is operational."""
    return {"status": "ok", "engine": "assignment", "version": ENGINE_VERSION}
