from fastapi import APIRouter, Depends, HTTPException, status
from typing import List, Optional

from taskboard.core.dependencies import get_workspace
from taskboard.core.exceptions import InvalidEntityError
from taskboard.schemas.enums import ViewType
from taskboard.schemas.task import (
    Task,
    TaskCreate,
    TaskUpdate,
    ParsedTaskInput,
    ParseRequest,
    QuickAddRequest,
    ReorderTasksRequest,
    MoveTaskRequest,
)
from taskboard.routers.errors import ensure_exists, remote_failure
from taskboard.services.task_filter import FilterCriteria, filter_tasks
from taskboard.services.task_parser import parse_quick_add
from taskboard.services.workspace import Workspace

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=List[Task])
def list_tasks(
    view: ViewType = ViewType.ALL,
    search: Optional[str] = None,
    project_id: Optional[str] = None,
    ws: Workspace = Depends(get_workspace),
):
    criteria = FilterCriteria(view=view, search=search, project_id=project_id)
    return filter_tasks(ws.tasks.list(), ws.projects.list(), ws.sections.list(), criteria)


@router.post("/parse", response_model=ParsedTaskInput)
def parse_task(request: ParseRequest):
    """Aperçu du quick-add, sans rien créer."""
    return parse_quick_add(request.text)


@router.post("/quick-add", response_model=Task, status_code=status.HTTP_201_CREATED)
def quick_add(request: QuickAddRequest, ws: Workspace = Depends(get_workspace)):
    """Crée une tâche depuis la syntaxe quick-add.

    - `!` / `*` / `*!` : importance et urgence
    - `#tag`, `p:projet`, `@due(tomorrow)`
    """
    ensure_exists(ws.sections, request.section_id, "Section")
    try:
        task = ws.tasks.create_task(request.raw_input, request.section_id, ws.projects.list())
    except InvalidEntityError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if task is None:
        raise remote_failure(ws.tasks)
    return task


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
def create_task(task_data: TaskCreate, ws: Workspace = Depends(get_workspace)):
    ensure_exists(ws.sections, task_data.section_id, "Section")
    try:
        task = ws.tasks.create_task_direct(task_data)
    except InvalidEntityError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if task is None:
        raise remote_failure(ws.tasks)
    return task


# réordonner avant /{task_id} pour ne pas capturer "reorder"
@router.post("/reorder")
def reorder_tasks(request: ReorderTasksRequest, ws: Workspace = Depends(get_workspace)):
    ensure_exists(ws.sections, request.section_id, "Section")
    if not ws.tasks.reorder_tasks(request.section_id, request.ordered_ids):
        raise remote_failure(ws.tasks)
    return {"message": "Tasks reordered"}


@router.post("/restore", response_model=Task, status_code=status.HTTP_201_CREATED)
def restore_task(task: Task, ws: Workspace = Depends(get_workspace)):
    # undo d'une suppression: le client renvoie la tâche supprimée
    ensure_exists(ws.sections, task.section_id, "Section")
    restored = ws.tasks.undo_delete_task(task)
    if restored is None:
        raise remote_failure(ws.tasks)
    return restored


@router.put("/{task_id}", response_model=Task)
def update_task(task_id: str, task_data: TaskUpdate, route_by_importance: bool = False,
                ws: Workspace = Depends(get_workspace)):
    ensure_exists(ws.tasks, task_id, "Task")
    updates = task_data.model_dump(exclude_unset=True)
    if updates.get("section_id"):
        ensure_exists(ws.sections, updates["section_id"], "Section")

    try:
        if route_by_importance:
            task = ws.tasks.update_task_routed(task_id, updates, ws.sections.list())
        else:
            task = ws.tasks.update_task(task_id, updates)
    except InvalidEntityError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if task is None:
        raise remote_failure(ws.tasks)
    return task


@router.delete("/{task_id}", response_model=Task)
def delete_task(task_id: str, ws: Workspace = Depends(get_workspace)):
    ensure_exists(ws.tasks, task_id, "Task")
    deleted = ws.tasks.delete_task(task_id)
    if deleted is None:
        raise remote_failure(ws.tasks)
    return deleted


@router.post("/{task_id}/complete")
def complete_task(task_id: str, ws: Workspace = Depends(get_workspace)):
    ensure_exists(ws.tasks, task_id, "Task")
    if not ws.tasks.complete_task(task_id):
        raise remote_failure(ws.tasks)
    return {"message": "Task completed"}


@router.post("/{task_id}/uncomplete")
def uncomplete_task(task_id: str, ws: Workspace = Depends(get_workspace)):
    if not ws.tasks.undo_complete_task(task_id):
        raise remote_failure(ws.tasks)
    return {"message": "Task restored"}


@router.post("/{task_id}/move", response_model=Task)
def move_task(task_id: str, request: MoveTaskRequest, ws: Workspace = Depends(get_workspace)):
    ensure_exists(ws.tasks, task_id, "Task")
    ensure_exists(ws.sections, request.section_id, "Section")
    task = ws.tasks.move_task_to_section(task_id, request.section_id, request.position)
    if task is None:
        raise remote_failure(ws.tasks)
    return task
