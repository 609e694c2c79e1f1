from fastapi import APIRouter, Body, Depends
from typing import Optional

from taskboard.core.dependencies import get_workspace
from taskboard.schemas.enums import EntityKind
from taskboard.schemas.pending_change import SyncResult, SyncStatus, ConnectivityRequest
from taskboard.services.workspace import Workspace

router = APIRouter(prefix="/sync", tags=["sync"])


def _status(ws: Workspace) -> SyncStatus:
    return SyncStatus(online=ws.connectivity.is_online, pending=ws.offline_store.count_pending_changes())


@router.get("/status", response_model=SyncStatus)
def sync_status(ws: Workspace = Depends(get_workspace)):
    return _status(ws)


@router.post("", response_model=SyncResult)
def sync_now(ws: Workspace = Depends(get_workspace)):
    """Rejoue la file d'attente hors-ligne (FIFO), puis recharge si quelque chose est passé."""
    result = ws.sync_now()
    if result["synced"]:
        ws.refresh_all()
    return result


@router.post("/connectivity", response_model=SyncStatus)
def set_connectivity(request: ConnectivityRequest, ws: Workspace = Depends(get_workspace)):
    # retour en ligne -> synchro + refresh (voir Workspace)
    ws.connectivity.set_online(request.online)
    return _status(ws)


@router.post("/notify/{entity}")
def notify_change(entity: EntityKind, row: Optional[dict] = Body(None), ws: Workspace = Depends(get_workspace)):
    # webhook du backend: "quelque chose a changé" dans une table
    notified = ws.remote_store.notify(entity, row)
    return {"notified": notified}
