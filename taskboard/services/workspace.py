"""
Assemblage explicite: backend distant, cache hors-ligne, connectivité, dépôts, synchro
"""

from sqlalchemy.orm import sessionmaker
from typing import Optional
import logging
import threading

from taskboard.core.config import Settings
from taskboard.schemas.enums import EntityKind
from taskboard.services.offline_storage import OfflineStore
from taskboard.services.project_repository import ProjectRepository
from taskboard.services.reminder_repository import ReminderRepository
from taskboard.services.remote_store import InMemoryRemoteStore, RemoteStore, RestRemoteStore
from taskboard.services.section_repository import SectionRepository
from taskboard.services.sync_service import Connectivity, SyncCoordinator
from taskboard.services.task_repository import TaskRepository

logger = logging.getLogger(__name__)


class Workspace:
    def __init__(self, remote_store: RemoteStore, offline_store: OfflineStore,
                 connectivity: Connectivity, owner_id: str, strict_entity_order: bool = False):
        self.remote_store = remote_store
        self.offline_store = offline_store
        self.connectivity = connectivity
        self.owner_id = owner_id
        # un seul verrou pour tous les dépôts: les routes tournent dans un threadpool
        self.lock = threading.RLock()

        self.tasks = TaskRepository(remote_store, offline_store, connectivity, owner_id, self.lock)
        self.sections = SectionRepository(remote_store, offline_store, connectivity, owner_id, self.lock)
        self.projects = ProjectRepository(remote_store, offline_store, connectivity, owner_id, self.lock)
        self.reminders = ReminderRepository(remote_store, offline_store, connectivity, owner_id, self.lock)
        self.sync = SyncCoordinator(offline_store, remote_store, strict_entity_order=strict_entity_order)
        self.last_sync: Optional[dict] = None

        connectivity.add_listener(self._on_connectivity_change)

    @property
    def repositories(self):
        return {
            EntityKind.TASK: self.tasks,
            EntityKind.SECTION: self.sections,
            EntityKind.PROJECT: self.projects,
            EntityKind.REMINDER: self.reminders,
        }

    def start(self) -> None:
        for repository in self.repositories.values():
            repository.start()

    def stop(self) -> None:
        for repository in self.repositories.values():
            repository.stop()

    def refresh_all(self) -> None:
        for repository in self.repositories.values():
            repository.refresh()

    def sync_now(self) -> dict:
        with self.lock:
            self.last_sync = self.sync.sync_pending_changes()
            return self.last_sync

    def _on_connectivity_change(self, online: bool) -> None:
        # retour en ligne: rejouer la file puis recharger l'état distant
        if not online:
            return
        with self.lock:
            if self.offline_store.has_pending_changes():
                result = self.sync_now()
                logger.info(f"Replayed offline changes: {result}")
            self.refresh_all()


def build_remote_store(settings: Settings) -> RemoteStore:
    if settings.REMOTE_BACKEND == "memory":
        return InMemoryRemoteStore()
    return RestRemoteStore(
        settings.REMOTE_URL,
        api_key=settings.REMOTE_API_KEY,
        access_token=settings.REMOTE_ACCESS_TOKEN,
        timeout=settings.REMOTE_TIMEOUT,
        rpc_set_positions=settings.RPC_SET_POSITIONS,
    )


def build_workspace(settings: Settings, session_factory: sessionmaker) -> Workspace:
    remote_store = build_remote_store(settings)
    connectivity = Connectivity(online=remote_store.is_reachable())
    return Workspace(
        remote_store,
        OfflineStore(session_factory),
        connectivity,
        settings.OWNER_ID,
        strict_entity_order=settings.SYNC_STRICT_ENTITY_ORDER,
    )
