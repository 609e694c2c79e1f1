from unittest.mock import MagicMock, call

from taskboard.core.exceptions import RemoteStoreError
from taskboard.schemas.enums import ChangeOperation, EntityKind
from taskboard.schemas.pending_change import PendingChangeCreate
from taskboard.services.sync_service import Connectivity, SyncCoordinator


def enqueue(store, entity_id, operation=ChangeOperation.UPDATE, data=None, entity=EntityKind.TASK):
    return store.enqueue_change(PendingChangeCreate(
        entity=entity, operation=operation, entity_id=entity_id, data=data
    ))


class TestSyncCoordinator:
    def test_replays_in_fifo_order(self, offline_store):
        """A, B puis C pour la même tâche: appliqués dans cet ordre"""
        for name in ("A", "B", "C"):
            enqueue(offline_store, "t1", data={"name": name})
        remote = MagicMock()

        result = SyncCoordinator(offline_store, remote).sync_pending_changes()

        assert remote.update.call_args_list == [
            call(EntityKind.TASK, "t1", {"name": "A"}),
            call(EntityKind.TASK, "t1", {"name": "B"}),
            call(EntityKind.TASK, "t1", {"name": "C"}),
        ]
        assert result == {"success": True, "synced": 3, "failed": 0}
        assert offline_store.has_pending_changes() is False

    def test_maps_operations(self, offline_store):
        enqueue(offline_store, "t1", ChangeOperation.CREATE, {"id": "t1", "name": "New"})
        enqueue(offline_store, "t2", ChangeOperation.DELETE)
        enqueue(offline_store, "s1", ChangeOperation.REORDER, [{"id": "t1", "position": 0}])
        remote = MagicMock()

        SyncCoordinator(offline_store, remote).sync_pending_changes()

        assert remote.method_calls == [
            call.insert(EntityKind.TASK, {"id": "t1", "name": "New"}),
            call.delete(EntityKind.TASK, "t2"),
            call.set_positions(EntityKind.TASK, [{"id": "t1", "position": 0}]),
        ]

    def test_partial_failure_keeps_only_failed_entry(self, offline_store):
        enqueue(offline_store, "t1", data={"name": "A"})
        failing = enqueue(offline_store, "t2", data={"name": "B"})
        enqueue(offline_store, "t3", data={"name": "C"})

        remote = MagicMock()
        remote.update.side_effect = [None, RemoteStoreError("boom", status_code=500), None]

        result = SyncCoordinator(offline_store, remote).sync_pending_changes()

        assert remote.update.call_count == 3
        assert result == {"success": False, "synced": 2, "failed": 1}
        assert [p.id for p in offline_store.list_pending_changes()] == [failing.id]

    def test_unexpected_error_counts_as_failure(self, offline_store):
        enqueue(offline_store, "t1")
        remote = MagicMock()
        remote.update.side_effect = RuntimeError("socket closed")

        result = SyncCoordinator(offline_store, remote).sync_pending_changes()

        assert result["failed"] == 1
        assert offline_store.count_pending_changes() == 1

    def test_same_entity_continues_by_default(self, offline_store):
        enqueue(offline_store, "t1", data={"name": "A"})
        enqueue(offline_store, "t1", data={"name": "C"})
        remote = MagicMock()
        remote.update.side_effect = [RemoteStoreError("boom"), None]

        result = SyncCoordinator(offline_store, remote).sync_pending_changes()

        assert remote.update.call_count == 2
        assert result["synced"] == 1

    def test_strict_entity_order_holds_back_later_changes(self, offline_store):
        enqueue(offline_store, "t1", data={"name": "A"})
        enqueue(offline_store, "t1", data={"name": "C"})
        enqueue(offline_store, "t2", data={"name": "other"})
        remote = MagicMock()
        remote.update.side_effect = [RemoteStoreError("boom"), None]

        result = SyncCoordinator(offline_store, remote, strict_entity_order=True).sync_pending_changes()

        assert remote.update.call_args_list == [
            call(EntityKind.TASK, "t1", {"name": "A"}),
            call(EntityKind.TASK, "t2", {"name": "other"}),
        ]
        assert result == {"success": False, "synced": 1, "failed": 2}
        assert [p.data["name"] for p in offline_store.list_pending_changes()] == ["A", "C"]

    def test_empty_queue(self, offline_store):
        remote = MagicMock()
        assert SyncCoordinator(offline_store, remote).sync_pending_changes() == {
            "success": True, "synced": 0, "failed": 0,
        }
        assert remote.method_calls == []


class TestConnectivity:
    def test_listeners_fire_on_transition_only(self):
        seen = []
        connectivity = Connectivity(online=True)
        connectivity.add_listener(seen.append)

        connectivity.set_online(True)
        connectivity.set_online(False)
        connectivity.set_online(False)
        connectivity.set_online(True)

        assert seen == [False, True]

    def test_probe(self):
        remote = MagicMock()
        remote.is_reachable.return_value = False
        connectivity = Connectivity(online=True)

        assert connectivity.probe(remote) is False
        assert connectivity.is_online is False
