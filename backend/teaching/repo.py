"""
Class-teacher repository contract and an in-memory implementation.

The in-memory repo backs local development when Postgres is unreachable and
serves as the test double for route tests. It applies the same primary-class
tie-break as the SQL implementation: newest `created_at` wins, then `id`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol
import logging
from uuid import uuid4


logger = logging.getLogger("mali.teaching")


class ClassTeacherRepoProtocol(Protocol):
    def find_primary_class_id(self, *, teacher_id: str) -> Optional[str]:
        ...

    def list_classes_for_teacher(self, *, teacher_id: str) -> List[dict]:
        ...

    def get_class_for_teacher(self, *, teacher_id: str, class_id: str) -> Optional[dict]:
        ...

    def is_team_owner(self, *, user_id: str, team_id: int) -> bool:
        ...


@dataclass
class ClassRecord:
    id: str
    name: str
    calendar_year: int
    is_active: bool = True


@dataclass
class ClassTeacherRecord:
    class_id: str
    teacher_id: str
    is_primary: bool = False
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class InMemoryClassTeacherRepo:
    def __init__(self) -> None:
        self.classes: Dict[str, ClassRecord] = {}
        self.assignments: List[ClassTeacherRecord] = []
        # team_owners[team_id] = {user_id, ...}
        self.team_owners: Dict[int, set[str]] = {}

    # --- Seeding helpers (dev/tests) -------------------------------------------

    def add_class(self, *, name: str, calendar_year: int, class_id: str | None = None, is_active: bool = True) -> ClassRecord:
        rec = ClassRecord(id=class_id or str(uuid4()), name=name, calendar_year=calendar_year, is_active=is_active)
        self.classes[rec.id] = rec
        return rec

    def assign_teacher(
        self,
        *,
        class_id: str,
        teacher_id: str,
        is_primary: bool = False,
        created_at: datetime | None = None,
    ) -> ClassTeacherRecord:
        rec = ClassTeacherRecord(class_id=class_id, teacher_id=teacher_id, is_primary=is_primary)
        if created_at is not None:
            rec.created_at = created_at
        self.assignments.append(rec)
        return rec

    def add_team_owner(self, *, team_id: int, user_id: str) -> None:
        self.team_owners.setdefault(int(team_id), set()).add(user_id)

    # --- Protocol ---------------------------------------------------------------

    def find_primary_class_id(self, *, teacher_id: str) -> Optional[str]:
        matches = [a for a in self.assignments if a.teacher_id == teacher_id and a.is_primary]
        if not matches:
            return None
        matches.sort(key=lambda a: a.id)
        matches.sort(key=lambda a: a.created_at, reverse=True)
        if len(matches) > 1:
            logger.warning("Teacher %s has %d primary classes; using newest", teacher_id, len(matches))
        return matches[0].class_id

    def list_classes_for_teacher(self, *, teacher_id: str) -> List[dict]:
        out: List[dict] = []
        for a in self.assignments:
            if a.teacher_id != teacher_id:
                continue
            cls = self.classes.get(a.class_id)
            if cls is None or not cls.is_active:
                continue
            out.append(
                {
                    "id": cls.id,
                    "name": cls.name,
                    "calendar_year": cls.calendar_year,
                    "is_primary": bool(a.is_primary),
                }
            )
        out.sort(key=lambda c: c["name"])
        out.sort(key=lambda c: c["calendar_year"], reverse=True)
        out.sort(key=lambda c: c["is_primary"], reverse=True)
        return out

    def get_class_for_teacher(self, *, teacher_id: str, class_id: str) -> Optional[dict]:
        for c in self.list_classes_for_teacher(teacher_id=teacher_id):
            if c["id"] == class_id:
                return c
        return None

    def is_team_owner(self, *, user_id: str, team_id: int) -> bool:
        return user_id in self.team_owners.get(int(team_id), set())


__all__ = [
    "ClassTeacherRepoProtocol",
    "ClassRecord",
    "ClassTeacherRecord",
    "InMemoryClassTeacherRepo",
]
