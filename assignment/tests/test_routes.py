"""
End-to-end tests for the admin assignment endpoints over an in-memory
SQLite database.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))
os.environ.setdefault("DATABASE_URL", "sqlite://")

from contextlib import contextmanager

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from db import get_db
from main import app
from assignment.logic.adapter import SqlAssignmentWriter
from models.base import Base
from models.models import ErrorLog, Mentee, Notification


@pytest.fixture
def client_and_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    @contextmanager
    def _session():
        db = TestingSession()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def _override_get_db():
        return _session()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as client:
        yield client, TestingSession
    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)


def _mentor_map(Session):
    with Session() as db:
        return {m.usn: m.mentor_id for m in db.execute(select(Mentee)).scalars()}


def _create_mentors(client, count):
    ids = []
    for i in range(count):
        response = client.post("/api/admin/mentors", json={"name": f"Mentor {i + 1}"})
        assert response.status_code == 201
        ids.append(response.json()["id"])
    return ids


ROWS = [
    {"name": "Asha", "usn": "1si21cs001", "semester": 5, "section": "A"},
    {"name": "Ravi", "usn": "1si21cs002", "semester": "5", "section": "B"},
    {"name": "Meera", "usn": "1si22cs003", "semester": 3, "section": "A"},
    {"name": "No Usn", "semester": 3, "section": "A"},
    {"name": "Dup", "usn": "1SI21CS001", "semester": 1, "section": "A"},
]


def test_import_assigns_with_balanced_strategy(client_and_session):
    client, Session = client_and_session
    _create_mentors(client, 3)

    response = client.post(
        "/api/admin/mentees/import",
        json={"rows": ROWS, "assignment_method": "balanced"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["results"]["success"] == 3
    assert body["results"]["failed"] == 2
    assert body["results"]["errors"] == [
        "Row 5: Missing required fields",
        "Row 6: Student with USN 1SI21CS001 already exists",
    ]
    assert body["assignment"]["assigned_count"] == 3
    assert body["assignment"]["mentor_count"] == 3
    # semester 3 first, then the two semester-5 mentees spread out
    assert _mentor_map(Session) == {"1SI22CS003": 1, "1SI21CS001": 2, "1SI21CS002": 3}

    with Session() as db:
        messages = [n.message for n in db.execute(select(Notification)).scalars()]
        partial = db.execute(
            select(ErrorLog).where(ErrorLog.action == "upload_students_partial")
        ).scalars().all()
    assert messages == ["3 mentees imported and automatically assigned to mentors"]
    assert len(partial) == 1


def test_import_rejects_unknown_strategy_and_empty_rows(client_and_session):
    client, _ = client_and_session

    assert client.post(
        "/api/admin/mentees/import", json={"rows": ROWS, "assignment_method": "lottery"}
    ).status_code == 400
    assert client.post(
        "/api/admin/mentees/import", json={"rows": [], "assignment_method": "equal"}
    ).status_code == 400


def test_deactivating_a_mentor_reassigns_their_mentees(client_and_session):
    client, Session = client_and_session
    _create_mentors(client, 3)
    client.post("/api/admin/mentees/import", json={"rows": ROWS, "assignment_method": "balanced"})

    response = client.put("/api/admin/mentors/2", json={"is_active": False})

    assert response.status_code == 200
    body = response.json()
    assert body["is_active"] is False
    assert body["reassignment"]["moved_count"] == 1
    assert body["reassignment"]["ok"] is True
    assert _mentor_map(Session)["1SI21CS001"] == 1

    notifications = client.get("/api/admin/notifications").json()
    assert notifications[0]["message"] == "1 mentee(s) were automatically reassigned to new mentors."
    assert notifications[0]["is_urgent"] is True
    assert notifications[0]["target_roles"] == ["admin", "mentor"]

    loads = client.get("/api/admin/mentors/loads").json()["loads"]
    assert [(l["mentor_id"], l["total_load"]) for l in loads] == [(1, 2), (3, 1)]


def test_updating_an_inactive_mentor_again_does_not_reassign(client_and_session):
    client, _ = client_and_session
    _create_mentors(client, 2)
    client.put("/api/admin/mentors/1", json={"is_active": False})

    response = client.put("/api/admin/mentors/1", json={"is_active": False, "department": "CSE"})

    assert response.json()["reassignment"] is None
    assert response.json()["department"] == "CSE"


def test_deleting_mentors_down_to_none_then_reconciling(client_and_session):
    client, Session = client_and_session
    _create_mentors(client, 2)
    client.post("/api/admin/mentees/import", json={"rows": ROWS[:3], "assignment_method": "equal"})
    assert _mentor_map(Session) == {"1SI21CS001": 1, "1SI21CS002": 2, "1SI22CS003": 1}

    response = client.delete("/api/admin/mentors/1")
    assert response.status_code == 200
    assert response.json()["reassignment"]["moved_count"] == 2
    assert set(_mentor_map(Session).values()) == {2}

    response = client.delete("/api/admin/mentors/2")
    body = response.json()
    assert body["reassignment"]["ok"] is False
    assert body["reassignment"]["unassigned_count"] == 3
    assert set(_mentor_map(Session).values()) == {None}
    assert client.get("/api/admin/mentors").json() == []

    response = client.post("/api/admin/mentees/assign")
    assert response.json()["result"]["assigned_count"] == 0
    assert response.json()["message"].startswith("No active mentors available")

    _create_mentors(client, 1)
    response = client.post("/api/admin/mentees/assign")
    body = response.json()
    assert body["success"] is True
    assert body["result"]["assigned_count"] == 3
    assert None not in _mentor_map(Session).values()

    response = client.post("/api/admin/mentees/assign")
    assert response.json()["message"].startswith("No unassigned mentees found")


def test_unknown_mentor_returns_404(client_and_session):
    client, _ = client_and_session
    assert client.put("/api/admin/mentors/42", json={"is_active": False}).status_code == 404
    assert client.delete("/api/admin/mentors/42").status_code == 404


def test_health_check(client_and_session):
    client, _ = client_and_session
    response = client.get("/api/admin/assignment/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_import_keeps_explicit_mentor_and_assigns_the_rest(client_and_session):
    client, Session = client_and_session
    _create_mentors(client, 3)
    rows = [
        {"name": "Asha", "usn": "u1", "semester": 1, "section": "A", "mentor_id": 3},
        {"name": "Ravi", "usn": "u2", "semester": 2, "section": "A", "mentorId": 99},
        {"name": "Meera", "usn": "u3", "semester": 3, "section": "A"},
    ]

    response = client.post("/api/admin/mentees/import", json={"rows": rows, "assignment_method": "equal"})

    body = response.json()
    assert body["results"]["success"] == 3
    assert body["results"]["warnings"] == ["Row 3: Mentor 99 not found or inactive, left unassigned"]
    assert body["assignment"]["assigned_count"] == 2
    assert _mentor_map(Session) == {"U1": 3, "U2": 1, "U3": 2}


def test_import_manual_keeps_explicit_mentor_only(client_and_session):
    client, Session = client_and_session
    _create_mentors(client, 2)
    client.put("/api/admin/mentors/2", json={"is_active": False})
    rows = [
        {"name": "Asha", "usn": "u1", "semester": 1, "section": "A", "mentor_id": "1"},
        {"name": "Ravi", "usn": "u2", "semester": 2, "section": "A", "mentor_id": 2},
    ]

    body = client.post(
        "/api/admin/mentees/import", json={"rows": rows, "assignment_method": "manual"}
    ).json()

    assert body["results"]["warnings"] == ["Row 3: Mentor 2 not found or inactive, left unassigned"]
    assert _mentor_map(Session) == {"U1": 1, "U2": None}


def _failing_set_mentor(self, mentee_id, mentor_id):
    raise RuntimeError("database unavailable")


def test_delete_goes_ahead_when_reassignment_fails(client_and_session, monkeypatch):
    client, Session = client_and_session
    _create_mentors(client, 2)
    client.post("/api/admin/mentees/import", json={"rows": ROWS[:3], "assignment_method": "equal"})
    monkeypatch.setattr(SqlAssignmentWriter, "set_mentor", _failing_set_mentor)

    response = client.delete("/api/admin/mentors/1")

    assert response.status_code == 200
    body = response.json()
    assert body["reassignment"]["ok"] is False
    assert "database unavailable" in body["reassignment"]["error"]
    assert body["detached"] == 2
    assert [m["id"] for m in client.get("/api/admin/mentors").json()] == [2]
    assert _mentor_map(Session) == {"1SI21CS001": None, "1SI21CS002": 2, "1SI22CS003": None}
    with Session() as db:
        logged = db.execute(
            select(ErrorLog).where(ErrorLog.action == "reassign_mentees")
        ).scalars().all()
    assert len(logged) == 1


def test_deactivation_goes_ahead_when_reassignment_fails(client_and_session, monkeypatch):
    client, Session = client_and_session
    _create_mentors(client, 2)
    client.post("/api/admin/mentees/import", json={"rows": ROWS[:3], "assignment_method": "equal"})
    monkeypatch.setattr(SqlAssignmentWriter, "set_mentor", _failing_set_mentor)

    response = client.put("/api/admin/mentors/1", json={"is_active": False})

    assert response.status_code == 200
    assert response.json()["is_active"] is False
    assert response.json()["reassignment"]["ok"] is False
    with Session() as db:
        assert db.execute(
            select(ErrorLog).where(ErrorLog.action == "reassign_mentees")
        ).scalars().all()

    # mentees still on the inactive mentor are picked up by the next "assign all"
    monkeypatch.undo()
    response = client.post("/api/admin/mentees/assign")
    assert response.json()["result"]["assigned_count"] == 2
    assert set(_mentor_map(Session).values()) == {2}
