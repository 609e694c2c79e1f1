from taskboard.schemas.enums import ChangeOperation, EntityKind
from taskboard.schemas.pending_change import PendingChangeCreate


def change(entity_id="t1", operation=ChangeOperation.UPDATE, data=None):
    return PendingChangeCreate(entity=EntityKind.TASK, operation=operation, entity_id=entity_id, data=data)


class TestCache:
    def test_cache_all_replaces_mirror(self, offline_store):
        offline_store.cache_all(EntityKind.TASK, [{"id": "a", "name": "A"}, {"id": "b", "name": "B"}])
        offline_store.cache_all(EntityKind.TASK, [{"id": "c", "name": "C"}])

        assert offline_store.get_all(EntityKind.TASK) == [{"id": "c", "name": "C"}]

    def test_cache_is_partitioned_by_entity(self, offline_store):
        offline_store.cache_all(EntityKind.TASK, [{"id": "x", "name": "task"}])
        offline_store.cache_all(EntityKind.SECTION, [{"id": "x", "name": "section"}])

        assert offline_store.get(EntityKind.TASK, "x")["name"] == "task"
        assert offline_store.get(EntityKind.SECTION, "x")["name"] == "section"

    def test_put_upserts(self, offline_store):
        offline_store.put(EntityKind.PROJECT, {"id": "p", "name": "Old"})
        offline_store.put(EntityKind.PROJECT, {"id": "p", "name": "New"})

        assert offline_store.get_all(EntityKind.PROJECT) == [{"id": "p", "name": "New"}]

    def test_delete(self, offline_store):
        offline_store.put(EntityKind.REMINDER, {"id": "r", "name": "Call"})
        offline_store.delete(EntityKind.REMINDER, "r")

        assert offline_store.get(EntityKind.REMINDER, "r") is None
        # suppression d'un id absent: pas d'erreur
        offline_store.delete(EntityKind.REMINDER, "missing")


class TestQueue:
    def test_fifo_order(self, offline_store):
        for payload in ("A", "B", "C"):
            offline_store.enqueue_change(change(data={"name": payload}))

        pending = offline_store.list_pending_changes()
        assert [p.data["name"] for p in pending] == ["A", "B", "C"]

    def test_ids_are_unique_within_same_millisecond(self, offline_store):
        offline_store.clock = lambda: 1700000000000
        first = offline_store.enqueue_change(change())
        second = offline_store.enqueue_change(change())

        assert first.id != second.id
        assert first.id.startswith("task-t1-1700000000000-")
        assert first.timestamp == 1700000000000

    def test_remove_and_count(self, offline_store):
        assert offline_store.has_pending_changes() is False

        first = offline_store.enqueue_change(change("t1"))
        offline_store.enqueue_change(change("t2", ChangeOperation.DELETE))
        assert offline_store.count_pending_changes() == 2

        offline_store.remove_pending_change(first.id)
        remaining = offline_store.list_pending_changes()
        assert [p.entity_id for p in remaining] == ["t2"]
        assert remaining[0].operation == ChangeOperation.DELETE
        assert offline_store.has_pending_changes() is True

    def test_reorder_payload_survives(self, offline_store):
        positions = [{"id": "a", "position": 0}, {"id": "b", "position": 1}]
        offline_store.enqueue_change(change("s1", ChangeOperation.REORDER, positions))

        assert offline_store.list_pending_changes()[0].data == positions
