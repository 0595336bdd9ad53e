"""
In-memory roster

Dict-backed RosterProvider / AssignmentWriter / ChangeNotifier, used to run
the engine without a database (tests, dry runs).
"""

from typing import Dict, List, Optional, Tuple

from .contracts import MenteeSnapshot, MentorSnapshot, RosterSnapshot


class InMemoryRoster:
    def __init__(self):
        self.mentors: Dict[int, MentorSnapshot] = {}
        self.mentees: Dict[int, MenteeSnapshot] = {}
        self.notifications: List[Tuple[str, List[str], bool]] = []
        self.writes: List[Tuple[int, Optional[int]]] = []

    # ---- seeding helpers -------------------------------------------------

    def add_mentor(self, mentor_id: int, is_active: bool = True, name: Optional[str] = None) -> MentorSnapshot:
        mentor = MentorSnapshot(id=mentor_id, is_active=is_active, name=name)
        self.mentors[mentor_id] = mentor
        return mentor

    def add_mentee(
        self,
        mentee_id: int,
        semester: int,
        mentor_id: Optional[int] = None,
        is_active: bool = True,
    ) -> MenteeSnapshot:
        mentee = MenteeSnapshot(id=mentee_id, semester=semester, mentor_id=mentor_id, is_active=is_active)
        self.mentees[mentee_id] = mentee
        return mentee

    def deactivate_mentor(self, mentor_id: int) -> None:
        self.mentors[mentor_id] = self.mentors[mentor_id].model_copy(update={"is_active": False})

    def mentor_of(self, mentee_id: int) -> Optional[int]:
        return self.mentees[mentee_id].mentor_id

    def mentees_of(self, mentor_id: int) -> List[int]:
        return sorted(m.id for m in self.mentees.values() if m.mentor_id == mentor_id)

    # ---- engine collaborators --------------------------------------------

    def load_roster(self) -> RosterSnapshot:
        return RosterSnapshot(
            mentors=[self.mentors[k] for k in sorted(self.mentors)],
            mentees=[self.mentees[k] for k in sorted(self.mentees)],
        )

    def set_mentor(self, mentee_id: int, mentor_id: Optional[int]) -> None:
        if mentee_id not in self.mentees:
            raise KeyError(f"Mentee {mentee_id} not found")
        self.mentees[mentee_id] = self.mentees[mentee_id].model_copy(update={"mentor_id": mentor_id})
        self.writes.append((mentee_id, mentor_id))

    def notify(self, message: str, target_roles: List[str], is_urgent: bool = False) -> None:
        self.notifications.append((message, list(target_roles), is_urgent))
