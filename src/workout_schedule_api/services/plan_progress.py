"""Completion progress for sequential plans."""
from datetime import date, datetime
from typing import Optional, Union

from workout_schedule_api.models import Plan
from workout_schedule_api.services.schedule_resolver import day_slot_count, days_since_start


def current_day_number(plan: Plan, reference_date: Union[date, datetime]) -> Optional[int]:
    """1-based day of a sequential plan on ``reference_date``, clamped to its length."""
    if plan.is_day_of_week:
        return None
    total_days = day_slot_count(plan)
    if total_days == 0:
        return None
    return min(days_since_start(plan, reference_date) + 1, total_days)


def progress(plan: Plan, reference_date: Union[date, datetime]) -> Optional[float]:
    """
    Fraction of a sequential plan completed as of ``reference_date``.

    Returns None for day-of-week plans (a recurring weekly template has no
    end) and for plans without any "Day N" slots.
    """
    current_day = current_day_number(plan, reference_date)
    if current_day is None:
        return None
    fraction = current_day / day_slot_count(plan)
    return min(1.0, max(0.0, fraction))
