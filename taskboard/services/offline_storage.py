"""Local mirror of the entity collections plus the pending-change queue.

Backed by SQLAlchemy (SQLite by default) so that both survive a restart.
Every call opens its own short session; nothing here touches the network.
Substrate errors (``SQLAlchemyError``) are left to the caller, which treats
the cache as empty and carries on online-only.
"""

from sqlalchemy.orm import Session, sessionmaker
from typing import Callable, List, Optional
import time
import uuid

from taskboard.models.cached_entity import CachedEntity
from taskboard.models.pending_change import PendingChangeRecord
from taskboard.schemas.enums import EntityKind
from taskboard.schemas.pending_change import PendingChange, PendingChangeCreate


def _now_ms() -> int:
    return int(time.time() * 1000)


class OfflineStore:
    def __init__(self, session_factory: sessionmaker, clock: Callable[[], int] = _now_ms):
        self.session_factory = session_factory
        self.clock = clock

    def _session(self) -> Session:
        return self.session_factory()

    # ---------- cache ----------
    def cache_all(self, entity: EntityKind, items: List[dict]) -> None:
        """Remplace entièrement le miroir local d'un type d'entité."""
        kind = EntityKind(entity).value
        with self._session() as db:
            db.query(CachedEntity).filter(CachedEntity.entity == kind).delete()
            for item in items:
                db.add(CachedEntity(entity=kind, id=str(item["id"]), data=item))
            db.commit()

    def get(self, entity: EntityKind, entity_id: str) -> Optional[dict]:
        with self._session() as db:
            row = db.get(CachedEntity, (EntityKind(entity).value, entity_id))
            return dict(row.data) if row else None

    def get_all(self, entity: EntityKind) -> List[dict]:
        with self._session() as db:
            rows = db.query(CachedEntity).filter(
                CachedEntity.entity == EntityKind(entity).value
            ).all()
            return [dict(row.data) for row in rows]

    def put(self, entity: EntityKind, item: dict) -> None:
        kind = EntityKind(entity).value
        with self._session() as db:
            row = db.get(CachedEntity, (kind, str(item["id"])))
            if row:
                row.data = item
            else:
                db.add(CachedEntity(entity=kind, id=str(item["id"]), data=item))
            db.commit()

    def delete(self, entity: EntityKind, entity_id: str) -> None:
        with self._session() as db:
            db.query(CachedEntity).filter(
                CachedEntity.entity == EntityKind(entity).value,
                CachedEntity.id == entity_id
            ).delete()
            db.commit()

    # ---------- file d'attente ----------
    def enqueue_change(self, change: PendingChangeCreate) -> PendingChange:
        timestamp = self.clock()
        entity = EntityKind(change.entity).value
        record = PendingChangeRecord(
            # suffixe aléatoire: deux changements dans la même ms restent distincts
            id=f"{entity}-{change.entity_id}-{timestamp}-{uuid.uuid4().hex[:6]}",
            entity=entity,
            operation=change.operation.value,
            entity_id=change.entity_id,
            data=change.data,
            timestamp=timestamp,
        )
        with self._session() as db:
            db.add(record)
            db.commit()
            db.refresh(record)
            return PendingChange.model_validate(record)

    def list_pending_changes(self) -> List[PendingChange]:
        with self._session() as db:
            records = db.query(PendingChangeRecord).order_by(PendingChangeRecord.seq).all()
            return [PendingChange.model_validate(r) for r in records]

    def remove_pending_change(self, change_id: str) -> None:
        with self._session() as db:
            db.query(PendingChangeRecord).filter(PendingChangeRecord.id == change_id).delete()
            db.commit()

    def count_pending_changes(self) -> int:
        with self._session() as db:
            return db.query(PendingChangeRecord).count()

    def has_pending_changes(self) -> bool:
        return self.count_pending_changes() > 0
