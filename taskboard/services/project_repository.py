"""Project repository"""

from typing import Any, Dict, List, Optional

from taskboard.core.exceptions import InvalidEntityError
from taskboard.schemas.enums import CollaboratorRole, EntityKind, ProjectViewMode
from taskboard.schemas.project import Collaborator, Project, DEFAULT_PROJECT_COLOR
from taskboard.services.repository import EntityRepository, locked, new_id


class ProjectRepository(EntityRepository):
    entity = EntityKind.PROJECT
    model = Project
    order_by = "created_at"

    def create_project(self, name: str, color: Optional[str] = None,
                       view_mode: ProjectViewMode = ProjectViewMode.STANDARD) -> Optional[Project]:
        if not name or not name.strip():
            raise InvalidEntityError("Project name cannot be empty")

        project = Project(
            id=new_id(),
            name=name.strip(),
            color=color or DEFAULT_PROJECT_COLOR,
            view_mode=view_mode,
            user_id=self.owner_id,
        )
        return self._insert(project)

    def update_project(self, project_id: str, updates: Dict[str, Any]) -> Optional[Project]:
        return self._update(project_id, updates)

    def delete_project(self, project_id: str) -> Optional[Project]:
        return self._delete(project_id)

    @locked
    def get_or_create_project(self, name: str) -> Optional[Project]:
        # correspondance exacte, insensible à la casse
        normalized = name.lower().strip()
        existing = next((p for p in self.items if p.name.lower() == normalized), None)
        if existing:
            return existing
        return self.create_project(name)

    # ---------- partage ----------
    def get_collaborators(self, project_id: str) -> List[Collaborator]:
        project = self.get(project_id)
        return list(project.collaborators) if project else []

    @locked
    def add_collaborator(self, project_id: str, user_id: str, email: Optional[str] = None) -> Optional[Project]:
        """Ajoute un éditeur au projet (une seule fois par utilisateur)."""
        if not user_id or not user_id.strip():
            raise InvalidEntityError("Collaborator user id cannot be empty")
        project = self.get(project_id)
        if project is None:
            return None
        user_id = user_id.strip()
        if user_id == project.user_id:
            raise InvalidEntityError("The project owner cannot be added as a collaborator")
        if any(c.user_id == user_id for c in project.collaborators):
            raise InvalidEntityError(f"User {user_id} already collaborates on this project")

        collaborator = Collaborator(user_id=user_id, email=email, role=CollaboratorRole.EDITOR)
        return self._update(project_id, {"collaborators": [*project.collaborators, collaborator]})

    @locked
    def remove_collaborator(self, project_id: str, user_id: str) -> Optional[Project]:
        project = self.get(project_id)
        if project is None or not any(c.user_id == user_id for c in project.collaborators):
            return None
        remaining = [c for c in project.collaborators if c.user_id != user_id]
        return self._update(project_id, {"collaborators": remaining})
