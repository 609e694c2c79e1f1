from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import Optional

from taskboard.schemas.task import utcnow

# Schemas rappels (pas de section, pas de tags)

class Reminder(BaseModel):
    id: str
    name: str
    due_date: Optional[date] = None
    completed: bool = False
    user_id: str
    created_at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(from_attributes=True)

    def to_row(self) -> dict:
        return self.model_dump(mode="json")

class ReminderCreate(BaseModel):
    name: str
    due_date: Optional[date] = None

class ReminderUpdate(BaseModel):
    name: Optional[str] = None
    due_date: Optional[date] = None
    completed: Optional[bool] = None
