"""Base repository: optimistic local state, offline mirror, queue or remote call.

Mutation protocol shared by every entity kind:

1. compute the new row locally (merge of the partial update)
2. apply it to ``items`` right away (optimistic update)
3. mirror it into the OfflineStore
4. offline: enqueue a PendingChange and stop there
5. online: call the remote store; on failure record ``error`` and refresh
   from the remote (no field-by-field rollback)

Routes run in a threadpool: every public read-modify-write runs under
``lock`` (one RLock shared by the repositories of a Workspace).
"""

from sqlalchemy.exc import SQLAlchemyError
from pydantic import BaseModel
from typing import Any, Callable, Collection, Dict, List, Optional, Type
import functools
import logging
import threading
import uuid

from taskboard.core.exceptions import RemoteStoreError
from taskboard.schemas.enums import ChangeOperation, EntityKind
from taskboard.schemas.pending_change import PendingChangeCreate
from taskboard.services.offline_storage import OfflineStore
from taskboard.services.remote_store import RemoteStore, sort_rows
from taskboard.services.sync_service import Connectivity

logger = logging.getLogger(__name__)


def new_id() -> str:
    return str(uuid.uuid4())


def locked(method):
    """Exécute la méthode sous le verrou du dépôt."""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self.lock:
            return method(self, *args, **kwargs)
    return wrapper


class EntityRepository:
    entity: EntityKind
    model: Type[BaseModel]
    order_by: Optional[str] = "position"

    def __init__(self, remote_store: RemoteStore, offline_store: OfflineStore,
                 connectivity: Connectivity, owner_id: str, lock: Optional[threading.RLock] = None):
        self.remote_store = remote_store
        self.offline_store = offline_store
        self.connectivity = connectivity
        self.owner_id = owner_id
        self.items: List[Any] = []
        self.loading = True
        self.error: Optional[Exception] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self.lock = lock or threading.RLock()

    # ---------- cycle de vie ----------
    @locked
    def start(self) -> None:
        """Premier chargement + abonnement aux changements distants."""
        self.refresh()
        if self._unsubscribe is None:
            self._unsubscribe = self.remote_store.subscribe(self.entity, self.owner_id, self.refresh)

    def stop(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    # ---------- lecture ----------
    def filters(self) -> Dict[str, Any]:
        return {"user_id": self.owner_id}

    def _load(self, rows: List[dict]) -> List[Any]:
        return [self.model.model_validate(row) for row in rows]

    def _load_cached(self) -> List[Any]:
        try:
            rows = self.offline_store.get_all(self.entity)
        except SQLAlchemyError as e:
            # cache illisible -> considéré vide
            logger.warning(f"Offline cache unavailable for {self.entity.value}: {e}")
            return []
        wanted = self.filters()
        rows = [r for r in rows if all(r.get(k) == v for k, v in wanted.items())]
        if self.order_by:
            rows = sort_rows(rows, self.order_by)
        return self._load(rows)

    @locked
    def refresh(self) -> List[Any]:
        """Rechargement complet (pas de fusion incrémentale)."""
        if not self.connectivity.is_online:
            self.items = self._load_cached()
            self.loading = False
            return self.list()

        try:
            rows = self.remote_store.select(self.entity, self.filters(), self.order_by)
            self.items = self._load(rows)
            self.error = None
        except RemoteStoreError as e:
            logger.warning(f"Fetching {self.entity.value} failed, using offline cache: {e}")
            self.error = e
            self.items = self._load_cached()
            self.loading = False
            return self.list()

        try:
            self.offline_store.cache_all(self.entity, [item.to_row() for item in self.items])
        except SQLAlchemyError as e:
            logger.warning(f"Could not cache {self.entity.value}: {e}")

        self.loading = False
        return self.list()

    @locked
    def list(self) -> List[Any]:
        return list(self.items)

    @locked
    def get(self, entity_id: str) -> Optional[Any]:
        return next((item for item in self.items if item.id == entity_id), None)

    # ---------- miroir local ----------
    def _cached_row(self, entity_id: str) -> Optional[dict]:
        try:
            return self.offline_store.get(self.entity, entity_id)
        except SQLAlchemyError as e:
            logger.warning(f"Offline cache unavailable for {self.entity.value}: {e}")
            return None

    def _mirror_put(self, row: dict) -> None:
        try:
            self.offline_store.put(self.entity, row)
        except SQLAlchemyError as e:
            logger.warning(f"Could not mirror {self.entity.value} {row.get('id')}: {e}")

    def _mirror_delete(self, entity_id: str) -> None:
        try:
            self.offline_store.delete(self.entity, entity_id)
        except SQLAlchemyError as e:
            logger.warning(f"Could not mirror delete of {self.entity.value} {entity_id}: {e}")

    def _replace(self, item: Any) -> None:
        for index, current in enumerate(self.items):
            if current.id == item.id:
                self.items[index] = item
                return
        self.items.append(item)

    def _remove(self, entity_id: str) -> None:
        self.items = [item for item in self.items if item.id != entity_id]

    # ---------- écriture ----------
    def _persist(self, operation: ChangeOperation, entity_id: str, data: Any,
                 remote_call: Callable[[], Any]) -> bool:
        if not self.connectivity.is_online:
            try:
                self.offline_store.enqueue_change(PendingChangeCreate(
                    entity=self.entity, operation=operation, entity_id=entity_id, data=data
                ))
            except SQLAlchemyError as e:
                logger.error(f"Could not queue {operation.value} of {self.entity.value} {entity_id}: {e}")
                self.error = e
                return False
            logger.info(f"Offline: queued {operation.value} of {self.entity.value} {entity_id}")
            return True

        try:
            remote_call()
            return True
        except RemoteStoreError as e:
            logger.warning(f"{operation.value} of {self.entity.value} {entity_id} failed: {e}")
            # le refresh remet error à None s'il réussit
            self.refresh()
            self.error = e
            return False

    @locked
    def _insert(self, item: Any) -> Optional[Any]:
        row = item.to_row()
        self.items.append(item)
        self._mirror_put(row)
        ok = self._persist(ChangeOperation.CREATE, item.id, row,
                           lambda: self.remote_store.insert(self.entity, row))
        return item if ok else None

    @locked
    def _update(self, entity_id: str, updates: Dict[str, Any]) -> Optional[Any]:
        current = self.get(entity_id)
        if current is None:
            return None

        merged = self.model.model_validate({**current.model_dump(), **updates})
        self._replace(merged)
        row = merged.to_row()
        self._mirror_put(row)

        changes = {key: row[key] for key in updates if key in row}
        ok = self._persist(ChangeOperation.UPDATE, entity_id, changes,
                           lambda: self.remote_store.update(self.entity, entity_id, changes))
        return merged if ok else None

    @locked
    def _delete(self, entity_id: str) -> Optional[Any]:
        current = self.get(entity_id)
        if current is None:
            return None

        self._remove(entity_id)
        self._mirror_delete(entity_id)
        ok = self._persist(ChangeOperation.DELETE, entity_id, None,
                           lambda: self.remote_store.delete(self.entity, entity_id))
        return current if ok else None

    @locked
    def _reorder(self, ordered_ids: List[str], scope_id: str, known: Collection[str]) -> bool:
        """Positions = index dans la liste complète, envoyées en un seul appel groupé.

        Les ids absents de ``known`` sont ignorés mais gardent leur rang,
        les autres ne sont pas renumérotés.
        """
        positions = [{"id": entity_id, "position": index}
                     for index, entity_id in enumerate(ordered_ids) if entity_id in known]
        if not positions:
            return True

        index_of = {p["id"]: p["position"] for p in positions}
        reordered = []
        for item in self.items:
            if item.id in index_of:
                item = item.model_copy(update={"position": index_of[item.id]})
                self._mirror_put(item.to_row())
            reordered.append(item)
        self.items = sorted(reordered, key=lambda item: item.position)

        return self._persist(ChangeOperation.REORDER, scope_id, positions,
                             lambda: self.remote_store.set_positions(self.entity, positions))
