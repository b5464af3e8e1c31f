"""Resolve what a plan schedules for a given calendar date."""

import logging
import re
from datetime import date, datetime
from typing import Callable, Dict, List, Mapping, Optional, Union

from workout_schedule_api.models import (
    WEEKDAY_NAMES,
    Plan,
    ScheduleItem,
    SessionItem,
    SessionRef,
    Unresolved,
    WorkoutSession,
)
from workout_schedule_api.parsers.descriptor_parser import parse_descriptor
from workout_schedule_api.utils import as_date

logger = logging.getLogger(__name__)

DAY_SLOT_PATTERN = re.compile(r'^\s*day\s*(\d+)\s*$', re.IGNORECASE)  # "Day 1", "day 12"

SessionLookup = Union[
    Callable[[str], Optional[WorkoutSession]],
    Mapping[str, WorkoutSession],
]


def day_slot_number(key: str) -> Optional[int]:
    """Return N for a "Day N" slot key (N >= 1), else None."""
    match = DAY_SLOT_PATTERN.match(key)
    if not match:
        return None
    number = int(match.group(1))
    return number if number >= 1 else None


def day_slot_count(plan: Plan) -> int:
    """Number of "Day N" keyed slots in the plan."""
    return sum(1 for key in plan.schedule if day_slot_number(key) is not None)


def days_since_start(plan: Plan, reference_date: Union[date, datetime]) -> int:
    """Whole calendar days from the plan's start to ``reference_date``, floored at 0.

    A plan without a start date is treated as starting on the reference date.
    """
    today = as_date(reference_date)
    start = as_date(plan.start_date) if plan.start_date is not None else today
    return max(0, (today - start).days)


def slot_key_for(plan: Plan, reference_date: Union[date, datetime]) -> str:
    """
    Compute the schedule slot key for a date.

    Day-of-week plans use the English weekday name. Sequential plans use
    "Day N" counted from the start date, clamped to the plan's last day.
    """
    if plan.is_day_of_week:
        return WEEKDAY_NAMES[as_date(reference_date).weekday()]

    day = days_since_start(plan, reference_date) + 1
    total_days = day_slot_count(plan)
    if total_days:
        day = min(day, total_days)
    return f"Day {max(1, day)}"


def _find_descriptor(plan: Plan, slot_key: str) -> Optional[str]:
    if slot_key in plan.schedule:
        return plan.schedule[slot_key]
    wanted = slot_key.lower()
    for key, descriptor in plan.schedule.items():
        if key.strip().lower() == wanted:
            return descriptor
    return None


def _lookup_session(session_lookup: SessionLookup, session_id: str) -> Optional[WorkoutSession]:
    if isinstance(session_lookup, Mapping):
        return session_lookup.get(session_id)
    try:
        return session_lookup(session_id)
    except LookupError:
        return None


def referenced_session_ids(plan: Plan) -> List[str]:
    """Session ids the plan's slots refer to, as the descriptor parser reads them."""
    ids = []
    for descriptor in plan.schedule.values():
        parsed = parse_descriptor(descriptor)
        if isinstance(parsed, SessionRef) and parsed.session_id not in ids:
            ids.append(parsed.session_id)
    return ids


def resolve_descriptor(descriptor: Optional[str], session_lookup: SessionLookup) -> ScheduleItem:
    """Parse a slot descriptor and resolve session references against the catalog."""
    parsed = parse_descriptor(descriptor)
    if not isinstance(parsed, SessionRef):
        return parsed

    session = _lookup_session(session_lookup, parsed.session_id)
    if session is None:
        logger.debug(f"Session {parsed.session_id!r} not found in catalog")
        return Unresolved(reason=f"session {parsed.session_id} not found")
    return SessionItem(session=session)


def resolve_today(
    plan: Plan,
    reference_date: Union[date, datetime],
    session_lookup: SessionLookup,
) -> ScheduleItem:
    """
    Resolve the plan's schedule item for ``reference_date``.

    Args:
        plan: Normalized plan
        reference_date: The date to resolve ("today")
        session_lookup: Callable or mapping from session id to WorkoutSession

    Returns:
        SessionItem, ActivityItem, RestDay or Unresolved. A session id that
        is missing from the catalog resolves to Unresolved.
    """
    slot_key = slot_key_for(plan, reference_date)
    descriptor = _find_descriptor(plan, slot_key)
    if descriptor is None:
        logger.debug(f"Plan {plan.id} has no slot {slot_key!r}")
        return Unresolved(reason=f"no slot {slot_key}")
    return resolve_descriptor(descriptor, session_lookup)


def _slot_sort_key(plan: Plan):
    weekday_index = {name.lower(): i for i, name in enumerate(WEEKDAY_NAMES)}
    source_order = {key: i for i, key in enumerate(plan.schedule)}

    def sort_key(key: str):
        if plan.is_day_of_week:
            position = weekday_index.get(key.strip().lower())
        else:
            position = day_slot_number(key)
        if position is None:
            return (1, source_order[key])
        return (0, position)

    return sort_key


def resolve_schedule(plan: Plan, session_lookup: SessionLookup) -> Dict[str, ScheduleItem]:
    """
    Resolve every slot of the plan, in display order.

    Weekday order for day-of-week plans, numeric "Day N" order for
    sequential plans; keys that fit neither come last in source order.
    """
    ordered_keys = sorted(plan.schedule, key=_slot_sort_key(plan))
    return {
        key: resolve_descriptor(plan.schedule[key], session_lookup)
        for key in ordered_keys
    }
