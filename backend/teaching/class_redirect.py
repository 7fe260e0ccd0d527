"""
Class redirect resolution: send a teacher to grading/planning for their primary class.

Flow:
    session resolver -> primary-class lookup -> outcome

The outcome is a plain value (`SignInRequired`, `NoPrimaryClass` or
`PrimaryClassFound`) carrying the redirect location. The web adapter turns it
into an HTTP redirect; this module performs no I/O of its own beyond the two
injected lookups and never writes data.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union
from urllib.parse import quote
import logging

from backend.identity_access.sessions import SessionResolverProtocol
from .repo import ClassTeacherRepoProtocol


logger = logging.getLogger("mali.teaching")

SIGN_IN_PATH = "/sign-in"
CLASS_SELECTION_PATH = "/dashboard/classes"
NO_PRIMARY_CLASS_ERROR = "no_primary_class"


class Destination(str, Enum):
    GRADING = "grading"
    PLANNING = "planning"


@dataclass(frozen=True)
class SignInRequired:
    @property
    def location(self) -> str:
        return SIGN_IN_PATH


@dataclass(frozen=True)
class NoPrimaryClass:
    teacher_id: str

    @property
    def location(self) -> str:
        return f"{CLASS_SELECTION_PATH}?error={NO_PRIMARY_CLASS_ERROR}"


@dataclass(frozen=True)
class PrimaryClassFound:
    destination: Destination
    class_id: str

    @property
    def location(self) -> str:
        return f"/dashboard/{self.destination.value}/{quote(self.class_id, safe='')}"


ClassRedirectOutcome = Union[SignInRequired, NoPrimaryClass, PrimaryClassFound]


def resolve_class_redirect(
    destination: Union[Destination, str],
    *,
    access_token: Optional[str],
    sessions: SessionResolverProtocol,
    classes: ClassTeacherRepoProtocol,
) -> ClassRedirectOutcome:
    """Decide where the current user should land for `destination`.

    Raises ValueError for destinations other than grading/planning. The class
    lookup runs only after a user has been resolved.
    """
    dest = Destination(destination)
    user = sessions.resolve(access_token)
    if user is None:
        return SignInRequired()
    class_id = classes.find_primary_class_id(teacher_id=user.id)
    if not class_id:
        logger.warning("User %s has no primary class assigned", user.id)
        return NoPrimaryClass(teacher_id=user.id)
    return PrimaryClassFound(destination=dest, class_id=class_id)


__all__ = [
    "CLASS_SELECTION_PATH",
    "ClassRedirectOutcome",
    "Destination",
    "NO_PRIMARY_CLASS_ERROR",
    "NoPrimaryClass",
    "PrimaryClassFound",
    "SIGN_IN_PATH",
    "SignInRequired",
    "resolve_class_redirect",
]
