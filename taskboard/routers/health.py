from fastapi import APIRouter, Depends

from taskboard.core.dependencies import get_workspace
from taskboard.services.workspace import Workspace

router = APIRouter()

@router.get("/z")
def healthz(ws: Workspace = Depends(get_workspace)):
    # l'API répond même hors-ligne; "online" = backend distant joignable
    return {"status": "ok", "online": ws.connectivity.is_online}
