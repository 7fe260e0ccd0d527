"""
Class redirect resolution: pure outcome tests (no HTTP).

Covers the three terminal outcomes and the tie-break when a teacher has more
than one class flagged as primary.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from backend.teaching.class_redirect import (
    Destination,
    NoPrimaryClass,
    PrimaryClassFound,
    SignInRequired,
    resolve_class_redirect,
)


CLASS_A = "5b0f3f7e-4a0c-4d7e-9a55-0c1f6f0a2b11"
CLASS_B = "9d2a8c41-7f3e-4f0b-8b6a-3e5d2c1b0a99"


def _resolve(destination, *, token, sessions, repo):
    return resolve_class_redirect(destination, access_token=token, sessions=sessions, classes=repo)


@pytest.mark.parametrize("token", [None, "", "unknown-token"])
def test_unauthenticated_redirects_to_sign_in_without_db_lookup(sessions, repo, token):
    outcome = _resolve(Destination.GRADING, token=token, sessions=sessions, repo=repo)
    assert isinstance(outcome, SignInRequired)
    assert outcome.location == "/sign-in"
    assert repo.primary_lookups == []


def test_no_primary_class_redirects_to_class_selection(sessions, repo):
    sessions.add_user("tok", "teacher-1")
    cls = repo.add_class(name="7A", calendar_year=2025, class_id=CLASS_A)
    repo.assign_teacher(class_id=cls.id, teacher_id="teacher-1", is_primary=False)

    outcome = _resolve(Destination.PLANNING, token="tok", sessions=sessions, repo=repo)

    assert isinstance(outcome, NoPrimaryClass)
    assert outcome.location == "/dashboard/classes?error=no_primary_class"
    assert repo.primary_lookups == ["teacher-1"]


@pytest.mark.parametrize(
    "destination, expected",
    [
        (Destination.GRADING, f"/dashboard/grading/{CLASS_A}"),
        (Destination.PLANNING, f"/dashboard/planning/{CLASS_A}"),
        ("grading", f"/dashboard/grading/{CLASS_A}"),
    ],
)
def test_primary_class_redirects_to_destination(sessions, repo, destination, expected):
    sessions.add_user("tok", "teacher-1")
    repo.add_class(name="7A", calendar_year=2025, class_id=CLASS_A)
    repo.assign_teacher(class_id=CLASS_A, teacher_id="teacher-1", is_primary=True)

    outcome = _resolve(destination, token="tok", sessions=sessions, repo=repo)

    assert isinstance(outcome, PrimaryClassFound)
    assert outcome.class_id == CLASS_A
    assert outcome.location == expected


def test_other_teachers_primary_class_is_ignored(sessions, repo):
    sessions.add_user("tok", "teacher-1")
    repo.add_class(name="7A", calendar_year=2025, class_id=CLASS_A)
    repo.assign_teacher(class_id=CLASS_A, teacher_id="teacher-2", is_primary=True)

    outcome = _resolve(Destination.GRADING, token="tok", sessions=sessions, repo=repo)

    assert isinstance(outcome, NoPrimaryClass)


def test_multiple_primary_classes_prefer_most_recent(sessions, repo, caplog):
    sessions.add_user("tok", "teacher-1")
    now = datetime.now(timezone.utc)
    repo.assign_teacher(class_id=CLASS_A, teacher_id="teacher-1", is_primary=True, created_at=now - timedelta(days=30))
    repo.assign_teacher(class_id=CLASS_B, teacher_id="teacher-1", is_primary=True, created_at=now)

    with caplog.at_level("WARNING", logger="mali.teaching"):
        outcome = _resolve(Destination.GRADING, token="tok", sessions=sessions, repo=repo)

    assert outcome.location == f"/dashboard/grading/{CLASS_B}"
    assert any("2 primary classes" in r.getMessage() for r in caplog.records)


def test_unknown_destination_is_rejected(sessions, repo):
    with pytest.raises(ValueError):
        _resolve("reports", token="tok", sessions=sessions, repo=repo)
