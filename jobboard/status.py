"""Status vocabularies and the transition tables that govern them."""

import logging
from enum import Enum as PyEnum
from typing import Dict, FrozenSet, Iterable

from .errors import BusinessRuleViolation

logger = logging.getLogger(__name__)


class RoleStatus(str, PyEnum):
    DRAFT = "draft"
    PUBLISHED = "published"
    CLOSED = "closed"


class ApplicationStatus(str, PyEnum):
    NEW = "new"
    REVIEWING = "reviewing"
    INTERVIEW = "interview"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class LocationType(str, PyEnum):
    ONSITE = "onsite"
    REMOTE = "remote"
    HYBRID = "hybrid"


class EmploymentType(str, PyEnum):
    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    CONTRACT = "contract"
    INTERNSHIP = "internship"


class ExperienceLevel(str, PyEnum):
    ENTRY = "entry"
    MID = "mid"
    SENIOR = "senior"
    LEAD = "lead"


class SenderType(str, PyEnum):
    HIRING_MANAGER = "hiring-manager"
    CANDIDATE = "candidate"


MESSAGING_STATUSES = frozenset({ApplicationStatus.INTERVIEW.value, ApplicationStatus.ACCEPTED.value})


def messaging_available(status: str) -> bool:
    """True when an application at ``status`` may carry thread messages."""
    return status in MESSAGING_STATUSES


class TransitionTable:
    """Allowed-edges table for a status field.

    Rewriting the current status is always allowed. ``check`` only raises
    when ``enforce`` is set; otherwise disallowed edges are logged and let
    through.
    """

    def __init__(self, name: str, edges: Dict[str, Iterable[str]]):
        self.name = name
        self.edges: Dict[str, FrozenSet[str]] = {k: frozenset(v) for k, v in edges.items()}

    def allowed_targets(self, current: str) -> FrozenSet[str]:
        return self.edges.get(current, frozenset())

    def allows(self, current: str, target: str) -> bool:
        return current == target or target in self.allowed_targets(current)

    def check(self, current: str, target: str, enforce: bool) -> None:
        if self.allows(current, target):
            return
        if enforce:
            raise BusinessRuleViolation(
                f"Cannot move {self.name} from '{current}' to '{target}'",
                details={"current": current, "target": target,
                         "allowed": sorted(self.allowed_targets(current))},
            )
        logger.info("Unguarded %s transition %s -> %s", self.name, current, target)


APPLICATION_TRANSITIONS = TransitionTable(
    "application",
    {
        ApplicationStatus.NEW.value: [
            ApplicationStatus.REVIEWING.value,
            ApplicationStatus.INTERVIEW.value,
            ApplicationStatus.ACCEPTED.value,
            ApplicationStatus.REJECTED.value,
        ],
        ApplicationStatus.REVIEWING.value: [
            ApplicationStatus.INTERVIEW.value,
            ApplicationStatus.ACCEPTED.value,
            ApplicationStatus.REJECTED.value,
        ],
        ApplicationStatus.INTERVIEW.value: [
            ApplicationStatus.ACCEPTED.value,
            ApplicationStatus.REJECTED.value,
        ],
        ApplicationStatus.ACCEPTED.value: [ApplicationStatus.REJECTED.value],
        ApplicationStatus.REJECTED.value: [],
    },
)

ROLE_TRANSITIONS = TransitionTable(
    "role",
    {
        RoleStatus.DRAFT.value: [RoleStatus.PUBLISHED.value],
        RoleStatus.PUBLISHED.value: [RoleStatus.CLOSED.value],
        RoleStatus.CLOSED.value: [RoleStatus.PUBLISHED.value],
    },
)
