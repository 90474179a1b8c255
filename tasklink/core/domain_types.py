"""Domain Types: sentinels, enums, and small value helpers shared by core and shell.

Invariants:
    - User and task ids are canonical UUID strings (lower-case, hyphenated)
    - The unassigned sentinel for assignedUserName is the single literal UNASSIGNED_NAME
    - An empty string in assignedUser means "no owner"; None never reaches the store

Design Decisions:
    - PendingDelta as frozen dataclass: hashable, comparable in tests
    - String ids over UUID objects: ids travel through JSON columns and query
      strings unchanged (ADR: store-native opaque ids rendered as strings)
"""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID


# ─── Sentinels ───────────────────────────────────────────────────

NO_OWNER = ""
UNASSIGNED_NAME = "unassigned"


# ─── Enums ───────────────────────────────────────────────────────

class SortDirection(int, Enum):
    ASCENDING = 1
    DESCENDING = -1


class PendingAction(str, Enum):
    ADD = "add"
    REMOVE = "remove"


@dataclass(frozen=True)
class PendingDelta:
    """One change to one user's pending set."""
    user_id: str
    task_id: str
    action: PendingAction


# ─── Value Helpers ───────────────────────────────────────────────

def canonical_id(value: object) -> str | None:
    """Return the canonical form of an id, or None if it is malformed."""
    if not isinstance(value, str) or not value:
        return None
    try:
        return str(UUID(value))
    except ValueError:
        return None


def normalize_email(value: object) -> str:
    """Trim and lower-case an email; non-strings normalize to empty."""
    if not isinstance(value, str):
        return ""
    return value.strip().lower()
