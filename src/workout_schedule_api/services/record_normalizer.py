"""Normalization of raw workout-data records into domain models.

Records come from a remote workout-data service whose schema drifted over
time. This module reconciles the drift in one place:
  - field renames (``movement1Name`` vs ``name``, ``sessions`` vs ``movementsInPlan``)
  - numbers stored as strings ("10", "12.5") or as ints/doubles
  - duration aliases (``duration``, ``sec``, ``time``)
  - legacy nested ``movements`` wrappers around a single movement
  - the boolean ``equipmentNeeded`` flag

Normalization is best effort: missing or malformed data becomes None/empty,
never an exception.
"""

import logging
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from workout_schedule_api.models import (
    EQUIPMENT_NEEDED_LABEL,
    WEEKDAY_NAMES,
    Movement,
    Plan,
    Rating,
    WorkoutSession,
    WorkoutSet,
    new_id,
)
from workout_schedule_api.utils import first_present, parse_timestamp, to_float, to_int, to_str

logger = logging.getLogger(__name__)

# Candidate names per logical field, highest priority first
MOVEMENT_ID_KEYS = ("movementId", "id")
MOVEMENT_NAME_KEYS = ("movement1Name", "name")
MOVEMENT_EQUIPMENT_KEYS = ("equipmentNeeded", "equipmentsNeeded")
SESSION_ID_KEYS = ("sessionId", "id")
SESSION_MOVEMENT_KEYS = ("movements", "movementsInSession")
PLAN_ID_KEYS = ("planId", "id")
PLAN_SCHEDULE_KEYS = ("sessions", "movementsInPlan")
DAY_OF_WEEK_FLAG_KEYS = ("isDayOfTheWeekPlan", "isDayOfWeek")
RATING_COUNT_KEYS = ("ratingCount", "numOfRating")
SET_DURATION_KEYS = ("duration", "sec", "time")

SET_SECTION_KEYS = ("firstSectionSets", "secondSectionSets", "weavedSets")

_WEEKDAYS_LOWER = {name.lower() for name in WEEKDAY_NAMES}


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def _equipment(value: Any) -> FrozenSet[str]:
    """Collapse the equipment flag into a set of labels.

    True -> {"Equipment needed"}; False or absent -> empty. "Not needed" and
    "unspecified" are indistinguishable afterwards.
    """
    if value is True:
        return frozenset({EQUIPMENT_NEEDED_LABEL})
    if isinstance(value, (list, tuple, set, frozenset)):
        return frozenset(s for s in (to_str(v) for v in value) if s)
    return frozenset()


def _bool_or_none(value: Any) -> Optional[bool]:
    return value if isinstance(value, bool) else None


def _string_set(value: Any) -> FrozenSet[str]:
    if not isinstance(value, (list, tuple, set, frozenset)):
        return frozenset()
    return frozenset(s for s in (to_str(v) for v in value if isinstance(v, str)) if s)


def _set_list(value: Any) -> Optional[List[WorkoutSet]]:
    if not isinstance(value, list):
        return None
    return [normalize_set(item) for item in value if isinstance(item, Mapping)]


# ---------------------------------------------------------------------------
# Sets
# ---------------------------------------------------------------------------


def normalize_set(raw: Any) -> WorkoutSet:
    """
    Normalize a raw set dict.

    ``weight``/``reps``/duration may be numbers or numeric strings; values
    that do not parse are omitted. Duration is read from ``duration``,
    ``sec`` or ``time``; the first one that parses wins.
    """
    if not isinstance(raw, Mapping):
        return WorkoutSet()

    duration = None
    for key in SET_DURATION_KEYS:
        duration = to_int(raw.get(key))
        if duration is not None:
            break

    return WorkoutSet(
        id=to_str(raw.get("id")) or new_id(),
        weight=to_float(raw.get("weight")),
        reps=to_int(raw.get("reps")),
        duration_seconds=duration,
    )


# ---------------------------------------------------------------------------
# Movements
# ---------------------------------------------------------------------------


def _movement_fields(record: Mapping[str, Any]) -> Dict[str, Any]:
    """Pull every movement field out of a record; absent fields are None."""
    fields: Dict[str, Any] = {
        "id": to_str(first_present(record, *MOVEMENT_ID_KEYS)),
        "primary_name": to_str(first_present(record, *MOVEMENT_NAME_KEYS)),
        "secondary_name": to_str(record.get("movement2Name")),
        "is_single": _bool_or_none(record.get("isSingle")),
        "is_timed": _bool_or_none(record.get("isTimed")),
        "category": to_str(record.get("category")),
        "difficulty": to_str(record.get("difficulty")),
        "description": to_str(record.get("description")),
        "equipment": first_present(record, *MOVEMENT_EQUIPMENT_KEYS),
    }
    fields["first_section_sets"] = _set_list(record.get("firstSectionSets"))
    fields["second_section_sets"] = _set_list(record.get("secondSectionSets"))
    fields["weaved_sets"] = _set_list(record.get("weavedSets"))
    return fields


def _has_top_level_sets(record: Mapping[str, Any]) -> bool:
    return any(isinstance(record.get(key), list) for key in SET_SECTION_KEYS)


def normalize_movement(raw: Any) -> Movement:
    """
    Normalize a raw movement record.

    If the record carries no top-level set arrays, fields still missing are
    filled from the first element of a legacy nested ``movements`` array.
    Values found at the top level are never overwritten.
    """
    if not isinstance(raw, Mapping):
        return Movement()

    fields = _movement_fields(raw)

    if not _has_top_level_sets(raw):
        nested = raw.get("movements")
        if isinstance(nested, list) and nested and isinstance(nested[0], Mapping):
            for key, value in _movement_fields(nested[0]).items():
                if fields[key] is None:
                    fields[key] = value

    return Movement(
        id=fields["id"] or new_id(),
        primary_name=fields["primary_name"] or "",
        secondary_name=fields["secondary_name"],
        is_single=fields["is_single"] if fields["is_single"] is not None else True,
        is_timed=fields["is_timed"] if fields["is_timed"] is not None else False,
        category=fields["category"],
        difficulty=fields["difficulty"],
        description=fields["description"],
        equipment_needed=_equipment(fields["equipment"]),
        first_section_sets=fields["first_section_sets"] or [],
        second_section_sets=fields["second_section_sets"] or [],
        weaved_sets=fields["weaved_sets"] or [],
    )


def normalize_embedded_movements(value: Any) -> List[Movement]:
    """
    Normalize movements embedded in a session or plan.

    Movements without a usable primary name are dropped rather than kept
    as "Unnamed Movement" placeholders.
    """
    # Legacy wrapper: {"movements": [...]}
    if isinstance(value, Mapping) and isinstance(value.get("movements"), list):
        value = value["movements"]
    if not isinstance(value, list):
        return []

    movements = []
    for index, item in enumerate(value):
        if not isinstance(item, Mapping):
            continue
        movement = normalize_movement(item)
        if not movement.primary_name:
            logger.debug(f"Dropping embedded movement #{index} without a name")
            continue
        movements.append(movement)
    return movements


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


def normalize_session(raw: Any) -> Optional[WorkoutSession]:
    """Normalize a raw session record; None only when it has no session id."""
    if not isinstance(raw, Mapping):
        return None

    session_id = to_str(first_present(raw, *SESSION_ID_KEYS))
    if not session_id:
        return None

    return WorkoutSession(
        id=session_id,
        name=to_str(raw.get("name")),
        description=to_str(raw.get("description")),
        difficulty=to_str(first_present(raw, "difficulty", "category")),
        equipment_needed=_equipment(raw.get("equipmentNeeded")),
        created_at=parse_timestamp(raw.get("createdAt")),
        movements=normalize_embedded_movements(first_present(raw, *SESSION_MOVEMENT_KEYS)),
    )


# ---------------------------------------------------------------------------
# Plans
# ---------------------------------------------------------------------------


def _schedule_from_mapping(value: Mapping[str, Any]) -> Dict[str, str]:
    schedule = {}
    for key, descriptor in value.items():
        if descriptor is None or isinstance(descriptor, (Mapping, list)):
            continue
        schedule[str(key)] = descriptor if isinstance(descriptor, str) else str(descriptor)
    return schedule


def _schedule_from_list(value: List[Any]) -> Optional[Dict[str, str]]:
    """
    Rebuild a schedule map from a legacy list.

    Accepted shapes:
      - ["sess1", "sess2"]                        -> {"Day 1": "sess1", "Day 2": "sess2"}
      - [{"day": "Monday", "sessionId": "sess1"}] -> {"Monday": "sess1"}
      - [{"sessionId": "sess1"}]                  -> {"Day 1": "sess1"}
    """
    schedule: Dict[str, str] = {}
    for index, item in enumerate(value):
        default_key = f"Day {index + 1}"
        if isinstance(item, str):
            if item.strip():
                schedule[default_key] = item
        elif isinstance(item, Mapping):
            descriptor = to_str(first_present(item, "sessionId", "id"))
            if not descriptor:
                continue
            day = to_str(first_present(item, "day", "Day"))
            schedule[day or default_key] = descriptor
    return schedule or None


def normalize_schedule(value: Any) -> Optional[Dict[str, str]]:
    """Normalize a schedule field; None when it is absent or unusable."""
    if isinstance(value, Mapping):
        return _schedule_from_mapping(value)
    if isinstance(value, list):
        return _schedule_from_list(value)
    return None


def infer_day_of_week(schedule: Mapping[str, str]) -> bool:
    """A schedule with any weekday-name key is a day-of-week plan."""
    return any(key.strip().lower() in _WEEKDAYS_LOWER for key in schedule)


def normalize_plan(raw: Any) -> Plan:
    """
    Normalize a raw plan record.

    The canonical ``sessions`` map is preferred; the legacy
    ``movementsInPlan`` list is used only when ``sessions`` is absent or
    unusable. The day-of-week flag is inferred from the schedule keys when
    the record does not carry it.
    """
    if not isinstance(raw, Mapping):
        return Plan()

    schedule = None
    for key in PLAN_SCHEDULE_KEYS:
        schedule = normalize_schedule(raw.get(key))
        if schedule is not None:
            break
    schedule = schedule or {}

    flag = _bool_or_none(first_present(raw, *DAY_OF_WEEK_FLAG_KEYS))
    is_day_of_week = flag if flag is not None else infer_day_of_week(schedule)

    rating = Rating(
        value=to_float(raw.get("ratingValue")) or 0.0,
        count=to_int(first_present(raw, *RATING_COUNT_KEYS)) or 0,
    )

    return Plan(
        id=to_str(first_present(raw, *PLAN_ID_KEYS)) or new_id(),
        name=to_str(raw.get("name")) or "",
        description=to_str(raw.get("description")),
        difficulty=to_str(raw.get("difficulty")),
        category=to_str(raw.get("category")),
        duration=to_str(raw.get("duration")),
        tags=_string_set(raw.get("tags")),
        rating=rating,
        schedule=schedule,
        is_day_of_week=is_day_of_week,
        start_date=parse_timestamp(raw.get("startDate")),
    )
