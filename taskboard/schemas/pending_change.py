"""Pydantic schemas for the offline queue and sync reports."""

from pydantic import BaseModel, ConfigDict
from typing import Optional, Any

from taskboard.schemas.enums import EntityKind, ChangeOperation


class PendingChangeCreate(BaseModel):
    entity: EntityKind
    operation: ChangeOperation
    entity_id: str
    data: Optional[Any] = None


class PendingChange(PendingChangeCreate):
    id: str
    timestamp: int  # epoch ms

    model_config = ConfigDict(from_attributes=True)


class SyncResult(BaseModel):
    success: bool
    synced: int
    failed: int


class SyncStatus(BaseModel):
    online: bool
    pending: int


class ConnectivityRequest(BaseModel):
    online: bool
