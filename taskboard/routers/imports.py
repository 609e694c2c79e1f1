from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from typing import List, Optional

from taskboard.core.dependencies import get_workspace
from taskboard.schemas.task import Task
from taskboard.services.csv_import import ColumnMapping, detect_columns, import_tasks, parse_csv_text
from taskboard.services.workspace import Workspace

router = APIRouter(prefix="/import", tags=["import"])


# Schéma pour l'import d'un export CSV
class CsvImportRequest(BaseModel):
    text: str
    section_id: str
    mapping: Optional[ColumnMapping] = None  # sinon détecté depuis les en-têtes


class CsvImportResponse(BaseModel):
    imported: int
    tasks: List[Task]


@router.post("/csv", response_model=CsvImportResponse, status_code=status.HTTP_201_CREATED)
def import_csv(request: CsvImportRequest, ws: Workspace = Depends(get_workspace)):
    if ws.sections.get(request.section_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Section not found")

    headers, rows = parse_csv_text(request.text)
    mapping = request.mapping or detect_columns(headers)
    if not mapping.name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No task name column found")

    created = import_tasks(ws, rows, mapping, request.section_id)
    return CsvImportResponse(imported=len(created), tasks=created)
