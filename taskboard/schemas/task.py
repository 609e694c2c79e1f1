"""Pydantic schemas for task request/response validation."""

from pydantic import BaseModel, ConfigDict, Field, field_validator, field_serializer
from datetime import date, datetime, timezone
from typing import Optional, List, Any

from taskboard.schemas.enums import Importance, Urgency, Length, RecurrenceRule


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Schemas tâches

class Task(BaseModel):
    """Une ligne de la table tasks."""

    id: str
    name: str
    section_id: str
    project_id: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    due_date: Optional[date] = None
    strict_due_date: bool = False
    notes: Optional[str] = None
    importance: Importance = Importance.UNSET
    urgent: Urgency = Urgency.UNSET
    length: Length = Length.UNSET
    position: int = 0
    completed_at: Optional[datetime] = None
    archived: bool = False
    recurrence_rule: Optional[RecurrenceRule] = None
    user_id: str
    created_at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(from_attributes=True)

    @field_validator("importance", mode="before")
    @classmethod
    def _load_importance(cls, value: Any) -> Importance:
        return Importance.coerce(value)

    @field_validator("urgent", mode="before")
    @classmethod
    def _load_urgent(cls, value: Any) -> Urgency:
        return Urgency.coerce(value)

    @field_validator("length", mode="before")
    @classmethod
    def _load_length(cls, value: Any) -> Length:
        return Length.coerce(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _load_tags(cls, value: Any) -> List[str]:
        return value or []

    # sérialisation au format du backend (colonnes nullable)
    @field_serializer("importance")
    def _dump_importance(self, value: Importance) -> Optional[str]:
        return value.to_value()

    @field_serializer("urgent")
    def _dump_urgent(self, value: Urgency) -> Optional[bool]:
        return value.to_value()

    @field_serializer("length")
    def _dump_length(self, value: Length) -> Optional[str]:
        return value.to_value()

    def to_row(self) -> dict:
        return self.model_dump(mode="json")


class TaskCreate(BaseModel):
    name: str
    section_id: str
    project_id: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    due_date: Optional[date] = None
    strict_due_date: bool = False
    notes: Optional[str] = None
    importance: Optional[Importance] = Importance.NORMAL
    urgent: Optional[bool] = False
    length: Optional[Length] = None
    position: Optional[int] = None  # None -> fin de section
    recurrence_rule: Optional[RecurrenceRule] = None


class TaskUpdate(BaseModel):
    """Schema for updating an existing task."""

    name: Optional[str] = None
    section_id: Optional[str] = None
    project_id: Optional[str] = None
    tags: Optional[List[str]] = None
    due_date: Optional[date] = None
    strict_due_date: Optional[bool] = None
    notes: Optional[str] = None
    importance: Optional[Importance] = None
    urgent: Optional[bool] = None
    length: Optional[Length] = None
    position: Optional[int] = None
    recurrence_rule: Optional[RecurrenceRule] = None


class ParsedTaskInput(BaseModel):
    """Résultat du parseur quick-add."""

    name: str
    importance: Importance = Importance.NORMAL
    urgent: bool = False
    project: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    due_date: Optional[date] = None


class QuickAddRequest(BaseModel):
    raw_input: str
    section_id: str


class ParseRequest(BaseModel):
    text: str


class ReorderTasksRequest(BaseModel):
    section_id: str
    ordered_ids: List[str]


class MoveTaskRequest(BaseModel):
    section_id: str
    position: int
