from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from taskboard.core.dependencies import get_workspace
from taskboard.core.exceptions import InvalidEntityError
from taskboard.schemas.project import Collaborator, CollaboratorCreate, Project, ProjectCreate, ProjectUpdate
from taskboard.routers.errors import ensure_exists, not_found, remote_failure
from taskboard.services.task_parser import match_project
from taskboard.services.workspace import Workspace

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=List[Project])
def list_projects(ws: Workspace = Depends(get_workspace)):
    return ws.projects.list()


@router.get("/match", response_model=Project)
def find_project(q: str, ws: Workspace = Depends(get_workspace)):
    # même résolution que p:nom dans le quick-add
    project = match_project(ws.projects.list(), q)
    if not project:
        raise not_found("Project")
    return project


@router.post("", response_model=Project, status_code=status.HTTP_201_CREATED)
def create_project(project_data: ProjectCreate, ws: Workspace = Depends(get_workspace)):
    try:
        project = ws.projects.create_project(project_data.name, project_data.color, project_data.view_mode)
    except InvalidEntityError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if project is None:
        raise remote_failure(ws.projects)
    return project


@router.get("/{project_id}", response_model=Project)
def get_project(project_id: str, ws: Workspace = Depends(get_workspace)):
    return ensure_exists(ws.projects, project_id, "Project")


@router.put("/{project_id}", response_model=Project)
def update_project(project_id: str, project_data: ProjectUpdate, ws: Workspace = Depends(get_workspace)):
    ensure_exists(ws.projects, project_id, "Project")
    project = ws.projects.update_project(project_id, project_data.model_dump(exclude_unset=True))
    if project is None:
        raise remote_failure(ws.projects)
    return project


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(project_id: str, ws: Workspace = Depends(get_workspace)):
    ensure_exists(ws.projects, project_id, "Project")
    if ws.projects.delete_project(project_id) is None:
        raise remote_failure(ws.projects)
    return None


# ========== COLLABORATEURS ==========
@router.get("/{project_id}/collaborators", response_model=List[Collaborator])
def list_collaborators(project_id: str, ws: Workspace = Depends(get_workspace)):
    ensure_exists(ws.projects, project_id, "Project")
    return ws.projects.get_collaborators(project_id)


@router.post("/{project_id}/collaborators", response_model=Project, status_code=status.HTTP_201_CREATED)
def add_collaborator(project_id: str, data: CollaboratorCreate, ws: Workspace = Depends(get_workspace)):
    ensure_exists(ws.projects, project_id, "Project")
    try:
        project = ws.projects.add_collaborator(project_id, data.user_id, data.email)
    except InvalidEntityError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if project is None:
        raise remote_failure(ws.projects)
    return project


@router.delete("/{project_id}/collaborators/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_collaborator(project_id: str, user_id: str, ws: Workspace = Depends(get_workspace)):
    ensure_exists(ws.projects, project_id, "Project")
    with ws.lock:
        if not any(c.user_id == user_id for c in ws.projects.get_collaborators(project_id)):
            raise not_found("Collaborator")
        if ws.projects.remove_collaborator(project_id, user_id) is None:
            raise remote_failure(ws.projects)
    return None
