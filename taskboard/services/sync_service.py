"""
Service de synchronisation - rejoue la file d'attente hors-ligne sur le backend
"""

from typing import Callable, List
import logging

from taskboard.core.exceptions import RemoteStoreError
from taskboard.schemas.enums import ChangeOperation
from taskboard.schemas.pending_change import PendingChange
from taskboard.services.offline_storage import OfflineStore
from taskboard.services.remote_store import RemoteStore, TABLES

logger = logging.getLogger(__name__)


class SyncCoordinator:
    """Vide la file FIFO des changements en attente.

    Un échec laisse l'entrée dans la file et n'arrête pas le drain.
    Avec `strict_entity_order`, les changements suivants d'une entité dont un
    changement plus ancien a échoué ne sont pas tentés (ils restent en file).
    """

    def __init__(self, offline_store: OfflineStore, remote_store: RemoteStore,
                 strict_entity_order: bool = False):
        self.offline_store = offline_store
        self.remote_store = remote_store
        self.strict_entity_order = strict_entity_order

    def _process_change(self, change: PendingChange) -> bool:
        if change.entity not in TABLES:
            return False

        try:
            if change.operation == ChangeOperation.CREATE:
                self.remote_store.insert(change.entity, change.data)
            elif change.operation == ChangeOperation.UPDATE:
                self.remote_store.update(change.entity, change.entity_id, change.data)
            elif change.operation == ChangeOperation.DELETE:
                self.remote_store.delete(change.entity, change.entity_id)
            elif change.operation == ChangeOperation.REORDER:
                self.remote_store.set_positions(change.entity, change.data)
            else:
                return False
            return True
        except RemoteStoreError as e:
            logger.warning(f"Sync of {change.id} failed: {e}")
            return False
        except Exception as e:
            logger.error(f"Unexpected error syncing {change.id}: {e}")
            return False

    def sync_pending_changes(self) -> dict:
        changes: List[PendingChange] = self.offline_store.list_pending_changes()
        synced = 0
        failed = 0
        blocked = set()

        for change in changes:
            key = (change.entity, change.entity_id)
            if self.strict_entity_order and key in blocked:
                failed += 1
                continue

            if self._process_change(change):
                self.offline_store.remove_pending_change(change.id)
                synced += 1
            else:
                failed += 1
                blocked.add(key)

        if changes:
            logger.info(f"Sync done: {synced} synced, {failed} failed")

        return {"success": failed == 0, "synced": synced, "failed": failed}


class Connectivity:
    """Signal de joignabilité du backend, avec écouteurs de transition."""

    def __init__(self, online: bool = True):
        self._online = online
        self._listeners: List[Callable[[bool], None]] = []

    @property
    def is_online(self) -> bool:
        return self._online

    def add_listener(self, listener: Callable[[bool], None]) -> None:
        self._listeners.append(listener)

    def set_online(self, online: bool) -> None:
        if online == self._online:
            return
        self._online = online
        logger.info(f"Connectivity changed: {'online' if online else 'offline'}")
        for listener in list(self._listeners):
            listener(online)

    def probe(self, remote_store: RemoteStore) -> bool:
        self.set_online(remote_store.is_reachable())
        return self._online
