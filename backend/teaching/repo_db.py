"""
Postgres-backed repository for class/teacher assignments.

Design:
- Minimal psycopg3 usage; each call opens a short-lived connection.
- Read-only: the dashboard never mutates `class_teachers`, `classes` or
  `team_members` through this repo.
- Returns plain dicts to keep the web adapter independent of an ORM.
"""
from __future__ import annotations

from typing import List, Optional
import logging
import os

try:
    import psycopg
    HAVE_PSYCOPG = True
except Exception:  # pragma: no cover - optional in some dev envs
    psycopg = None  # type: ignore
    HAVE_PSYCOPG = False


logger = logging.getLogger("mali.teaching")


DSN_ENV_VARS = ("DATABASE_URL", "POSTGRES_URL", "SUPABASE_DB_URL")


def configured_dsn() -> Optional[str]:
    """First non-empty DSN from the environment, in `DSN_ENV_VARS` order."""
    for key in DSN_ENV_VARS:
        value = (os.getenv(key) or "").strip()
        if value:
            return value
    return None


def _dsn() -> str:
    dsn = configured_dsn()
    if dsn:
        return dsn
    raise RuntimeError("Database DSN unavailable for DBClassTeacherRepo")


_CLASS_COLUMNS_SQL = """
    c.id::text,
    c.name,
    c.calendar_year,
    coalesce(ct.is_primary, false)
"""


def _class_row_to_dict(row) -> dict:
    return {
        "id": row[0],
        "name": row[1],
        "calendar_year": int(row[2]) if row[2] is not None else None,
        "is_primary": bool(row[3]),
    }


class DBClassTeacherRepo:
    def __init__(self, dsn: Optional[str] = None) -> None:
        """Initialize the repository; connections are opened per call, not eagerly."""
        if not HAVE_PSYCOPG:
            raise RuntimeError("psycopg3 is required for DBClassTeacherRepo")
        self._dsn = dsn or _dsn()

    def find_primary_class_id(self, *, teacher_id: str) -> Optional[str]:
        """Return the class id of the teacher's primary assignment, or None.

        More than one primary row violates the data invariant; the newest row
        wins and a warning records how many rows competed.
        """
        with psycopg.connect(self._dsn) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    select class_id::text, count(*) over ()
                    from public.class_teachers
                    where teacher_id = %s and is_primary is true
                    order by created_at desc, id
                    limit 1
                    """,
                    (teacher_id,),
                )
                row = cur.fetchone()
        if not row:
            return None
        if int(row[1] or 0) > 1:
            logger.warning("Teacher %s has %d primary classes; using newest", teacher_id, int(row[1]))
        return str(row[0])

    def list_classes_for_teacher(self, *, teacher_id: str) -> List[dict]:
        with psycopg.connect(self._dsn) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    select {_CLASS_COLUMNS_SQL}
                    from public.class_teachers ct
                    join public.classes c on c.id = ct.class_id
                    where ct.teacher_id = %s and coalesce(c.is_active, true)
                    order by coalesce(ct.is_primary, false) desc, c.calendar_year desc, c.name
                    """,
                    (teacher_id,),
                )
                rows = cur.fetchall() or []
        return [_class_row_to_dict(r) for r in rows]

    def get_class_for_teacher(self, *, teacher_id: str, class_id: str) -> Optional[dict]:
        with psycopg.connect(self._dsn) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    select {_CLASS_COLUMNS_SQL}
                    from public.class_teachers ct
                    join public.classes c on c.id = ct.class_id
                    where ct.teacher_id = %s and c.id = %s::uuid and coalesce(c.is_active, true)
                    limit 1
                    """,
                    (teacher_id, class_id),
                )
                row = cur.fetchone()
        return _class_row_to_dict(row) if row else None

    def is_team_owner(self, *, user_id: str, team_id: int) -> bool:
        with psycopg.connect(self._dsn) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    select 1
                    from public.team_members
                    where user_id = %s and team_id = %s and role = 'owner'
                    limit 1
                    """,
                    (user_id, int(team_id)),
                )
                row = cur.fetchone()
        return row is not None


__all__ = ["DBClassTeacherRepo", "HAVE_PSYCOPG"]
