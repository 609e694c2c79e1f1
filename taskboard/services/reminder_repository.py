"""Reminder repository"""

from datetime import date
from typing import Any, Dict, Optional

from taskboard.core.exceptions import InvalidEntityError
from taskboard.schemas.enums import ChangeOperation, EntityKind
from taskboard.schemas.reminder import Reminder
from taskboard.services.repository import EntityRepository, locked, new_id


class ReminderRepository(EntityRepository):
    entity = EntityKind.REMINDER
    model = Reminder
    order_by = "due_date"  # sans date en dernier

    def filters(self) -> Dict[str, Any]:
        return {**super().filters(), "completed": False}

    def create_reminder(self, name: str, due_date: Optional[date] = None) -> Optional[Reminder]:
        if not name or not name.strip():
            raise InvalidEntityError("Reminder name cannot be empty")

        reminder = Reminder(id=new_id(), name=name.strip(), due_date=due_date, user_id=self.owner_id)
        return self._insert(reminder)

    def update_reminder(self, reminder_id: str, updates: Dict[str, Any]) -> Optional[Reminder]:
        return self._update(reminder_id, updates)

    def delete_reminder(self, reminder_id: str) -> Optional[Reminder]:
        return self._delete(reminder_id)

    @locked
    def complete_reminder(self, reminder_id: str) -> bool:
        reminder = self.get(reminder_id)
        if reminder is None:
            return False

        self._remove(reminder_id)
        self._mirror_put(reminder.model_copy(update={"completed": True}).to_row())
        changes = {"completed": True}
        return self._persist(ChangeOperation.UPDATE, reminder_id, changes,
                             lambda: self.remote_store.update(self.entity, reminder_id, changes))
