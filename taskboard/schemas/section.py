from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import Optional, List, Any

from taskboard.schemas.enums import MAIN_CONTEXT
from taskboard.schemas.task import utcnow

# Schemas pour les sections

class Section(BaseModel):
    id: str
    name: str
    position: int = 0
    context: str = MAIN_CONTEXT  # "main", "shopping" ou "project-{id}"
    user_id: str
    created_at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(from_attributes=True)

    @field_validator("context", mode="before")
    @classmethod
    def _default_context(cls, value: Any) -> str:
        # anciennes lignes sans contexte
        return value or MAIN_CONTEXT

    def to_row(self) -> dict:
        return self.model_dump(mode="json")

class SectionCreate(BaseModel):
    name: str
    context: str = MAIN_CONTEXT

class SectionUpdate(BaseModel):
    name: Optional[str] = None
    position: Optional[int] = None
    context: Optional[str] = None

class ReorderSectionsRequest(BaseModel):
    ordered_ids: List[str]
