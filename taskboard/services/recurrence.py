"""Calcul de la prochaine échéance d'une tâche récurrente."""

from dateutil.parser import parse as parse_date
from dateutil.relativedelta import relativedelta
from typing import Optional, Union
import logging

from taskboard.schemas.enums import RecurrenceRule

logger = logging.getLogger(__name__)

STEPS = {
    RecurrenceRule.DAILY: relativedelta(days=1),
    RecurrenceRule.WEEKLY: relativedelta(weeks=1),
    # relativedelta borne au dernier jour du mois (31/01 -> 29/02)
    RecurrenceRule.MONTHLY: relativedelta(months=1),
    RecurrenceRule.YEARLY: relativedelta(years=1),
}


def next_due_date(current_due_date: Optional[str], rule: Optional[Union[RecurrenceRule, str]]) -> Optional[str]:
    """Retourne la prochaine échéance (yyyy-MM-dd) ou None si pas de récurrence / pas d'ancre."""
    if not rule or not current_due_date:
        return None

    try:
        step = STEPS[RecurrenceRule(rule)]
    except ValueError:
        logger.warning(f"Unknown recurrence rule: {rule}")
        return None

    try:
        base = parse_date(str(current_due_date)).date()
    except (ValueError, OverflowError):
        logger.warning(f"Invalid due date for recurrence: {current_due_date}")
        return None

    return (base + step).isoformat()
