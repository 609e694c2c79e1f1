"""Task repository"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence
import logging

from taskboard.core.exceptions import InvalidEntityError
from taskboard.schemas.enums import ChangeOperation, EntityKind, Importance, Length
from taskboard.schemas.project import Project
from taskboard.schemas.section import Section
from taskboard.schemas.task import Task, TaskCreate
from taskboard.services.recurrence import next_due_date
from taskboard.services.repository import EntityRepository, locked, new_id
from taskboard.services.task_parser import parse_quick_add, match_project

logger = logging.getLogger(__name__)

# section cible quand l'importance change
PRIORITY_SECTIONS = {
    Importance.VERY_IMPORTANT: "High Priority",
    Importance.IMPORTANT: "Medium Priority",
}
DEFAULT_PRIORITY_SECTION = "Low Priority"


def _check_name(name: Optional[str]) -> None:
    if not name or not name.strip():
        raise InvalidEntityError("Task name cannot be empty")


class TaskRepository(EntityRepository):
    entity = EntityKind.TASK
    model = Task
    order_by = "position"

    def filters(self) -> Dict[str, Any]:
        # les tâches archivées (terminées) ne sont pas listées
        return {**super().filters(), "archived": False}

    def _next_position(self, section_id: str) -> int:
        positions = [t.position for t in self.items if t.section_id == section_id]
        return max(positions, default=-1) + 1

    @locked
    def create_task(self, raw_input: str, section_id: str, projects: Sequence[Project]) -> Optional[Task]:
        """Création via la syntaxe quick-add."""
        parsed = parse_quick_add(raw_input)
        _check_name(parsed.name)

        project_id = None
        if parsed.project:
            matched = match_project(projects, parsed.project)
            if matched:
                project_id = matched.id
            else:
                logger.info(f"No project matching '{parsed.project}'")

        task = Task(
            id=new_id(),
            name=parsed.name,
            section_id=section_id,
            project_id=project_id,
            tags=parsed.tags,
            due_date=parsed.due_date,
            importance=parsed.importance,
            urgent=parsed.urgent,
            length=Length.MEDIUM,
            position=self._next_position(section_id),
            user_id=self.owner_id,
        )
        return self._insert(task)

    @locked
    def create_task_direct(self, new_task: TaskCreate) -> Optional[Task]:
        _check_name(new_task.name)
        position = new_task.position
        if position is None:
            position = self._next_position(new_task.section_id)

        task = Task(
            id=new_id(),
            user_id=self.owner_id,
            position=position,
            **new_task.model_dump(exclude={"position"}),
        )
        return self._insert(task)

    @locked
    def update_task(self, task_id: str, updates: Dict[str, Any]) -> Optional[Task]:
        if "name" in updates:
            _check_name(updates["name"])
        return self._update(task_id, updates)

    @locked
    def update_task_routed(self, task_id: str, updates: Dict[str, Any], sections: Sequence[Section]) -> Optional[Task]:
        """Comme update_task, mais un changement d'importance déplace la tâche
        dans la section High / Medium / Low Priority correspondante (si elle existe)."""
        if updates.get("importance") is not None:
            importance = Importance.coerce(updates["importance"])
            target_name = PRIORITY_SECTIONS.get(importance, DEFAULT_PRIORITY_SECTION)
            target = next((s for s in sections if s.name == target_name), None)
            if target:
                updates = {
                    **updates,
                    "section_id": target.id,
                    "position": self._next_position(target.id),
                }
        return self.update_task(task_id, updates)

    def delete_task(self, task_id: str) -> Optional[Task]:
        """Supprime la ligne (différent de l'archivage). Retourne la tâche pour un éventuel undo."""
        return self._delete(task_id)

    @locked
    def undo_delete_task(self, task: Task) -> Optional[Task]:
        restored = task.model_copy(update={"archived": False, "completed_at": None})
        return self._insert(restored)

    @locked
    def complete_task(self, task_id: str) -> bool:
        task = self.get(task_id)
        if task is None:
            return False

        # completed_at et archived dans la même écriture
        changes = {"completed_at": datetime.now(timezone.utc), "archived": True}
        completed = task.model_copy(update=changes)
        self._remove(task_id)
        row = completed.to_row()
        self._mirror_put(row)

        row_changes = {key: row[key] for key in changes}
        ok = self._persist(ChangeOperation.UPDATE, task_id, row_changes,
                           lambda: self.remote_store.update(self.entity, task_id, row_changes))
        if not ok:
            return False

        if task.recurrence_rule:
            self._spawn_next_occurrence(task)
        return True

    def _spawn_next_occurrence(self, task: Task) -> Optional[Task]:
        next_due = next_due_date(task.due_date.isoformat() if task.due_date else None, task.recurrence_rule)
        if not next_due:
            return None

        successor = Task(
            id=new_id(),
            name=task.name,
            section_id=task.section_id,
            project_id=task.project_id,
            tags=list(task.tags),
            due_date=next_due,
            strict_due_date=task.strict_due_date,
            notes=task.notes,
            importance=task.importance,
            urgent=task.urgent,
            length=task.length,
            position=task.position,
            recurrence_rule=task.recurrence_rule,
            user_id=self.owner_id,
        )
        created = self._insert(successor)
        if created is None:
            logger.error(f"Failed to create next occurrence of task {task.id}")
        return created

    @locked
    def undo_complete_task(self, task_id: str) -> bool:
        changes = {"completed_at": None, "archived": False}

        cached = self._cached_row(task_id)
        if cached:
            restored = Task.model_validate({**cached, **changes})
            self._replace(restored)
            self._mirror_put(restored.to_row())

        ok = self._persist(ChangeOperation.UPDATE, task_id, changes,
                           lambda: self.remote_store.update(self.entity, task_id, changes))
        if ok and self.connectivity.is_online:
            self.refresh()
        return ok

    @locked
    def reorder_tasks(self, section_id: str, ordered_ids: List[str]) -> bool:
        # seules les tâches de la section sont repositionnées
        in_section = {t.id for t in self.items if t.section_id == section_id}
        return self._reorder(ordered_ids, scope_id=section_id, known=in_section)

    @locked
    def move_task_to_section(self, task_id: str, section_id: str, position: int) -> Optional[Task]:
        return self._update(task_id, {"section_id": section_id, "position": position})
