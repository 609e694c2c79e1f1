from pydantic import BaseModel
from typing import List, Optional, Sequence

from taskboard.schemas.enums import (
    Importance,
    Urgency,
    ViewType,
    ProjectViewMode,
    MAIN_CONTEXT,
    SHOPPING_CONTEXT,
    project_context,
)
from taskboard.schemas.project import Project
from taskboard.schemas.section import Section
from taskboard.schemas.task import Task


TODAY_MARKERS = ("must finish today", "work on today")
PRIORITY_MARKER = "priority"

# vues qui n'affichent pas de tâches (journal, rappels, accueil)
NON_TASK_VIEWS = {ViewType.JOURNAL, ViewType.REMINDERS, ViewType.HOME}

IMPORTANCE_ORDER = {
    Importance.VERY_IMPORTANT: 0,
    Importance.IMPORTANT: 1,
    Importance.NORMAL: 2,
    Importance.UNSET: 2,
}


class FilterCriteria(BaseModel):
    view: ViewType = ViewType.ALL
    search: Optional[str] = None
    project_id: Optional[str] = None


def _is_today_section(section: Section) -> bool:
    name = section.name.lower()
    return any(marker in name for marker in TODAY_MARKERS)


def _is_priority_section(section: Section) -> bool:
    return PRIORITY_MARKER in section.name.lower()


def _focus_key(task: Task):
    # projets groupés, sans projet en dernier, puis urgent, puis importance
    return (
        task.project_id is None,
        task.project_id or "",
        task.urgent is not Urgency.YES,
        IMPORTANCE_ORDER[task.importance],
    )


def _apply_view(tasks: List[Task], sections: Sequence[Section], criteria: FilterCriteria) -> List[Task]:
    view = criteria.view

    if view in NON_TASK_VIEWS:
        return []

    if view == ViewType.TODAY:
        section_ids = {s.id for s in sections if _is_today_section(s) and not _is_priority_section(s)}
        return [t for t in tasks if t.section_id in section_ids]

    if view == ViewType.UPCOMING:
        excluded = {s.id for s in sections if _is_today_section(s)}
        return [t for t in tasks if t.section_id not in excluded]

    if view == ViewType.PRIORITY:
        return [t for t in tasks if t.importance is Importance.VERY_IMPORTANT]

    if view == ViewType.URGENT_IMPORTANT:
        return [
            t for t in tasks
            if t.urgent is Urgency.YES and t.importance is Importance.VERY_IMPORTANT
        ]

    if view == ViewType.PROJECT:
        if criteria.project_id:
            return [t for t in tasks if t.project_id == criteria.project_id]
        return tasks

    if view == ViewType.FOCUS:
        # sorted() est stable: l'ordre d'origine est conservé à égalité
        return sorted(tasks, key=_focus_key)

    if view == ViewType.SHOPPING:
        section_ids = {s.id for s in sections if s.context == SHOPPING_CONTEXT}
        return [t for t in tasks if t.section_id in section_ids]

    return tasks


def _matches_search(task: Task, term: str, project_names: dict) -> bool:
    if term in task.name.lower():
        return True
    if task.notes and term in task.notes.lower():
        return True
    if any(term in tag.lower() for tag in task.tags):
        return True
    if task.project_id:
        project_name = project_names.get(task.project_id)
        if project_name and term in project_name:
            return True
    return False


def filter_tasks(
    tasks: Sequence[Task],
    projects: Sequence[Project],
    sections: Sequence[Section],
    criteria: FilterCriteria,
) -> List[Task]:
    """Tâches visibles pour une vue + recherche. Les entrées ne sont jamais modifiées."""
    result = _apply_view(list(tasks), sections, criteria)

    if criteria.search and criteria.search.strip():
        term = criteria.search.lower().strip()
        project_names = {p.id: p.name.lower() for p in projects}
        result = [t for t in result if _matches_search(t, term, project_names)]

    # dédoublonnage par id, au cas où la collection en contiendrait
    seen_ids = set()
    unique_tasks = []
    for task in result:
        if task.id not in seen_ids:
            seen_ids.add(task.id)
            unique_tasks.append(task)

    return unique_tasks


def filter_sections(
    sections: Sequence[Section],
    view: ViewType,
    project: Optional[Project] = None,
) -> List[Section]:
    """Sections visibles pour une vue, selon leur contexte."""
    if view == ViewType.SHOPPING:
        return [s for s in sections if s.context == SHOPPING_CONTEXT]

    if view == ViewType.PROJECT and project and project.view_mode == ProjectViewMode.CUSTOM:
        context = project_context(project.id)
        return [s for s in sections if s.context == context]

    visible = [s for s in sections if s.context == MAIN_CONTEXT]

    if view == ViewType.TODAY:
        visible = [s for s in visible if not _is_priority_section(s)]

    return visible
