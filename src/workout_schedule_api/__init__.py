"""Plan schedule resolution and workout record normalization."""
from workout_schedule_api.parsers.descriptor_parser import parse_descriptor
from workout_schedule_api.services.plan_progress import progress
from workout_schedule_api.services.record_merge import merge_unique
from workout_schedule_api.services.record_normalizer import (
    normalize_movement,
    normalize_plan,
    normalize_session,
    normalize_set,
)
from workout_schedule_api.services.schedule_resolver import (
    resolve_schedule,
    resolve_today,
    slot_key_for,
)

__all__ = [
    "merge_unique",
    "normalize_movement",
    "normalize_plan",
    "normalize_session",
    "normalize_set",
    "parse_descriptor",
    "progress",
    "resolve_schedule",
    "resolve_today",
    "slot_key_for",
]
