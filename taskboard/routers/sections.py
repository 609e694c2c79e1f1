from fastapi import APIRouter, Depends, HTTPException, status
from typing import List, Optional

from taskboard.core.dependencies import get_workspace
from taskboard.core.exceptions import InvalidEntityError
from taskboard.schemas.enums import ViewType
from taskboard.schemas.section import Section, SectionCreate, SectionUpdate, ReorderSectionsRequest
from taskboard.routers.errors import ensure_exists, remote_failure
from taskboard.services.task_filter import filter_sections
from taskboard.services.workspace import Workspace

router = APIRouter(prefix="/sections", tags=["sections"])


@router.get("", response_model=List[Section])
def list_sections(view: Optional[ViewType] = None, project_id: Optional[str] = None,
                  ws: Workspace = Depends(get_workspace)):
    sections = ws.sections.list()
    if view is None:
        return sections
    project = ws.projects.get(project_id) if project_id else None
    return filter_sections(sections, view, project)


@router.post("", response_model=Section, status_code=status.HTTP_201_CREATED)
def create_section(section_data: SectionCreate, ws: Workspace = Depends(get_workspace)):
    try:
        section = ws.sections.create_section(section_data.name, section_data.context)
    except InvalidEntityError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if section is None:
        raise remote_failure(ws.sections)
    return section


@router.post("/reorder")
def reorder_sections(request: ReorderSectionsRequest, ws: Workspace = Depends(get_workspace)):
    if not ws.sections.reorder_sections(request.ordered_ids):
        raise remote_failure(ws.sections)
    return {"message": "Sections reordered"}


@router.get("/{section_id}", response_model=Section)
def get_section(section_id: str, ws: Workspace = Depends(get_workspace)):
    return ensure_exists(ws.sections, section_id, "Section")


@router.put("/{section_id}", response_model=Section)
def update_section(section_id: str, section_data: SectionUpdate, ws: Workspace = Depends(get_workspace)):
    ensure_exists(ws.sections, section_id, "Section")
    try:
        section = ws.sections.update_section(section_id, section_data.model_dump(exclude_unset=True))
    except InvalidEntityError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if section is None:
        raise remote_failure(ws.sections)
    return section


@router.delete("/{section_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_section(section_id: str, ws: Workspace = Depends(get_workspace)):
    ensure_exists(ws.sections, section_id, "Section")
    with ws.lock:
        # une section non vide ne peut pas être supprimée
        if any(t.section_id == section_id for t in ws.tasks.list()):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Section is not empty")
        if ws.sections.delete_section(section_id) is None:
            raise remote_failure(ws.sections)
    return None
