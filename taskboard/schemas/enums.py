"""Enumerations shared by the task, section and project schemas.

Importance, urgency and length are tri-state on the backend (nullable
columns). They are modelled here with an explicit ``UNSET`` member so that
"not categorized yet" is a real case and never a stray ``None``.
"""

from enum import Enum
from typing import Any, Optional


class Importance(str, Enum):
    UNSET = "unset"
    NORMAL = "normal"
    IMPORTANT = "important"
    VERY_IMPORTANT = "very_important"

    @classmethod
    def coerce(cls, value: Any) -> "Importance":
        if value is None:
            return cls.UNSET
        return cls(value)

    def to_value(self) -> Optional[str]:
        return None if self is Importance.UNSET else self.value


class Urgency(str, Enum):
    UNSET = "unset"
    NO = "no"
    YES = "yes"

    @classmethod
    def coerce(cls, value: Any) -> "Urgency":
        if value is None:
            return cls.UNSET
        if isinstance(value, bool):
            return cls.YES if value else cls.NO
        return cls(value)

    def to_value(self) -> Optional[bool]:
        if self is Urgency.UNSET:
            return None
        return self is Urgency.YES


class Length(str, Enum):
    UNSET = "unset"
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"

    @classmethod
    def coerce(cls, value: Any) -> "Length":
        if value is None:
            return cls.UNSET
        return cls(value)

    def to_value(self) -> Optional[str]:
        return None if self is Length.UNSET else self.value


class RecurrenceRule(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class ProjectViewMode(str, Enum):
    STANDARD = "standard"  # tâches dans les sections "main"
    CUSTOM = "custom"  # sections privées sous le contexte project-{id}


class CollaboratorRole(str, Enum):
    OWNER = "owner"
    EDITOR = "editor"


class ViewType(str, Enum):
    HOME = "home"
    ALL = "all"
    TODAY = "today"
    UPCOMING = "upcoming"
    PRIORITY = "priority"
    URGENT_IMPORTANT = "urgent_important"
    FOCUS = "focus"
    JOURNAL = "journal"
    PROJECT = "project"
    SHOPPING = "shopping"
    REMINDERS = "reminders"


class EntityKind(str, Enum):
    TASK = "task"
    SECTION = "section"
    PROJECT = "project"
    REMINDER = "reminder"


class ChangeOperation(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    REORDER = "reorder"


MAIN_CONTEXT = "main"
SHOPPING_CONTEXT = "shopping"


def project_context(project_id: str) -> str:
    return f"project-{project_id}"
