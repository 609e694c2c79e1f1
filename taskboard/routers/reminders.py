from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from taskboard.core.dependencies import get_workspace
from taskboard.core.exceptions import InvalidEntityError
from taskboard.schemas.reminder import Reminder, ReminderCreate, ReminderUpdate
from taskboard.routers.errors import ensure_exists, remote_failure
from taskboard.services.workspace import Workspace

router = APIRouter(prefix="/reminders", tags=["reminders"])


@router.get("", response_model=List[Reminder])
def list_reminders(ws: Workspace = Depends(get_workspace)):
    # rappels non terminés, sans date en dernier
    return ws.reminders.list()


@router.post("", response_model=Reminder, status_code=status.HTTP_201_CREATED)
def create_reminder(reminder_data: ReminderCreate, ws: Workspace = Depends(get_workspace)):
    try:
        reminder = ws.reminders.create_reminder(reminder_data.name, reminder_data.due_date)
    except InvalidEntityError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if reminder is None:
        raise remote_failure(ws.reminders)
    return reminder


@router.put("/{reminder_id}", response_model=Reminder)
def update_reminder(reminder_id: str, reminder_data: ReminderUpdate, ws: Workspace = Depends(get_workspace)):
    ensure_exists(ws.reminders, reminder_id, "Reminder")
    reminder = ws.reminders.update_reminder(reminder_id, reminder_data.model_dump(exclude_unset=True))
    if reminder is None:
        raise remote_failure(ws.reminders)
    return reminder


@router.post("/{reminder_id}/complete")
def complete_reminder(reminder_id: str, ws: Workspace = Depends(get_workspace)):
    ensure_exists(ws.reminders, reminder_id, "Reminder")
    if not ws.reminders.complete_reminder(reminder_id):
        raise remote_failure(ws.reminders)
    return {"message": "Reminder completed"}


@router.delete("/{reminder_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_reminder(reminder_id: str, ws: Workspace = Depends(get_workspace)):
    ensure_exists(ws.reminders, reminder_id, "Reminder")
    if ws.reminders.delete_reminder(reminder_id) is None:
        raise remote_failure(ws.reminders)
    return None
