from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import Optional, List, Any

from taskboard.schemas.enums import ProjectViewMode, CollaboratorRole
from taskboard.schemas.task import utcnow

DEFAULT_PROJECT_COLOR = "#6366f1"

# Schemas pour les projets

class Collaborator(BaseModel):
    user_id: str
    email: Optional[str] = None
    role: CollaboratorRole = CollaboratorRole.EDITOR

class CollaboratorCreate(BaseModel):
    user_id: str
    email: Optional[str] = None

class Project(BaseModel):
    id: str
    name: str
    color: str = DEFAULT_PROJECT_COLOR
    view_mode: ProjectViewMode = ProjectViewMode.STANDARD
    user_id: str
    collaborators: List[Collaborator] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(from_attributes=True)

    @field_validator("view_mode", mode="before")
    @classmethod
    def _default_view_mode(cls, value: Any) -> Any:
        return value or ProjectViewMode.STANDARD

    @field_validator("color", mode="before")
    @classmethod
    def _default_color(cls, value: Any) -> Any:
        return value or DEFAULT_PROJECT_COLOR

    @field_validator("collaborators", mode="before")
    @classmethod
    def _default_collaborators(cls, value: Any) -> Any:
        return value or []

    def to_row(self) -> dict:
        return self.model_dump(mode="json")

class ProjectCreate(BaseModel):
    name: str
    color: Optional[str] = None
    view_mode: ProjectViewMode = ProjectViewMode.STANDARD

class ProjectUpdate(BaseModel):
    name: Optional[str] = None
    color: Optional[str] = None
    view_mode: Optional[ProjectViewMode] = None
    collaborators: Optional[List[Collaborator]] = None
