"""
Import CSV (export Asana & co) -> tâches
"""

from datetime import date, datetime
from dateutil.parser import parse as parse_date
from pydantic import BaseModel, Field
from typing import Dict, List, Optional, Sequence, Tuple, TYPE_CHECKING
import csv
import io
import logging

from taskboard.schemas.enums import Importance, MAIN_CONTEXT
from taskboard.schemas.project import Project
from taskboard.schemas.task import Task, TaskCreate

if TYPE_CHECKING:
    from taskboard.services.workspace import Workspace

logger = logging.getLogger(__name__)

NAME_HEADERS = ("task name", "name", "title")
DUE_DATE_HEADERS = ("due date", "due", "deadline")
PROJECT_HEADERS = ("projects", "project")
TAGS_HEADERS = ("tags", "labels")
NOTES_HEADERS = ("notes", "description", "desc")
SECTION_HEADERS = ("section/column", "section", "column", "list")

DATE_FORMATS = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%Y-%m-%d %H:%M:%S",
)


class ColumnMapping(BaseModel):
    name: str = ""
    due_date: Optional[str] = None
    project: Optional[str] = None
    tags: Optional[str] = None
    notes: Optional[str] = None
    section: Optional[str] = None


class ImportedTask(BaseModel):
    name: str
    importance: Importance = Importance.NORMAL
    tags: List[str] = Field(default_factory=list)
    due_date: Optional[date] = None
    notes: Optional[str] = None
    project_id: Optional[str] = None
    new_project: Optional[str] = None  # projet à créer
    new_section: Optional[str] = None  # section nommée dans le CSV


def parse_csv_text(text: str) -> Tuple[List[str], List[Dict[str, str]]]:
    reader = csv.DictReader(io.StringIO(text))
    headers = list(reader.fieldnames or [])
    rows = []
    for row in reader:
        # lignes vides ignorées
        if any(isinstance(v, str) and v.strip() for v in row.values()):
            rows.append(row)
    return headers, rows


def _find_header(headers: Sequence[str], candidates: Sequence[str]) -> Optional[str]:
    for header in headers:
        if header.lower().strip() in candidates:
            return header
    return None


def detect_columns(headers: Sequence[str]) -> ColumnMapping:
    """Devine le mapping des colonnes à partir des en-têtes."""
    return ColumnMapping(
        name=_find_header(headers, NAME_HEADERS) or "",
        due_date=_find_header(headers, DUE_DATE_HEADERS),
        project=_find_header(headers, PROJECT_HEADERS),
        tags=_find_header(headers, TAGS_HEADERS),
        notes=_find_header(headers, NOTES_HEADERS),
        section=_find_header(headers, SECTION_HEADERS),
    )


def parse_flexible_date(value: str) -> Optional[date]:
    if not value or not value.strip():
        return None

    trimmed = value.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(trimmed, fmt).date()
        except ValueError:
            continue

    try:
        return parse_date(trimmed).date()
    except (ValueError, OverflowError):
        return None


def extract_importance(name: str) -> Tuple[str, Importance]:
    trimmed = name.strip()
    if trimmed.startswith("**"):
        return trimmed[2:].strip(), Importance.VERY_IMPORTANT
    if trimmed.startswith("*"):
        return trimmed[1:].strip(), Importance.IMPORTANT
    return trimmed, Importance.NORMAL


def _cell(row: Dict[str, str], column: Optional[str]) -> str:
    if not column:
        return ""
    value = row.get(column)
    return value if isinstance(value, str) else ""


def transform_rows(rows: Sequence[Dict[str, str]], mapping: ColumnMapping,
                   existing_projects: Sequence[Project]) -> List[ImportedTask]:
    tasks = []

    for row in rows:
        raw_name = _cell(row, mapping.name)
        if not raw_name.strip():
            continue

        # "Backlog:" -> en-tête de section, pas une tâche
        if raw_name.strip().endswith(":"):
            continue

        name, importance = extract_importance(raw_name)

        tags = [t.strip().lower() for t in _cell(row, mapping.tags).split(",") if t.strip()]

        project_id = None
        new_project = None
        project_name = _cell(row, mapping.project).strip()
        if project_name:
            existing = next((p for p in existing_projects if p.name.lower() == project_name.lower()), None)
            if existing:
                project_id = existing.id
            else:
                new_project = project_name

        tasks.append(ImportedTask(
            name=name,
            importance=importance,
            tags=tags,
            due_date=parse_flexible_date(_cell(row, mapping.due_date)),
            notes=_cell(row, mapping.notes) or None,
            project_id=project_id,
            new_project=new_project,
            new_section=_cell(row, mapping.section).strip() or None,
        ))

    return tasks


def import_tasks(workspace: "Workspace", rows: Sequence[Dict[str, str]], mapping: ColumnMapping,
                 default_section_id: str) -> List[Task]:
    """Crée projets et sections manquants puis les tâches, à la suite dans chaque section."""
    with workspace.lock:
        return _create_imported(workspace, transform_rows(rows, mapping, workspace.projects.list()), default_section_id)


def _create_imported(workspace: "Workspace", tasks: Sequence[ImportedTask], default_section_id: str) -> List[Task]:
    project_ids: Dict[str, str] = {}
    section_ids: Dict[str, str] = {}
    created = []

    for item in tasks:
        project_id = item.project_id
        if item.new_project:
            key = item.new_project.lower()
            if key not in project_ids:
                project = workspace.projects.get_or_create_project(item.new_project)
                if project:
                    project_ids[key] = project.id
            project_id = project_ids.get(key)

        section_id = default_section_id
        if item.new_section:
            key = item.new_section.lower()
            if key not in section_ids:
                existing = next(
                    (s for s in workspace.sections.get_sections_by_context(MAIN_CONTEXT) if s.name.lower() == key),
                    None,
                )
                section = existing or workspace.sections.create_section(item.new_section)
                if section:
                    section_ids[key] = section.id
            section_id = section_ids.get(key, default_section_id)

        task = workspace.tasks.create_task_direct(TaskCreate(
            name=item.name,
            section_id=section_id,
            project_id=project_id,
            tags=item.tags,
            due_date=item.due_date,
            notes=item.notes,
            importance=item.importance,
        ))
        if task:
            created.append(task)
        else:
            logger.warning(f"Import of '{item.name}' failed")

    return created
