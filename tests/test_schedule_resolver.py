"""Tests for schedule resolution against a session catalog."""

from datetime import date, datetime, timedelta

import pytest

from workout_schedule_api.models import (
    ActivityItem,
    Plan,
    RestDay,
    SessionItem,
    Unresolved,
    WorkoutSession,
)
from workout_schedule_api.services.record_normalizer import normalize_plan, normalize_session
from workout_schedule_api.services.schedule_resolver import (
    day_slot_count,
    day_slot_number,
    days_since_start,
    referenced_session_ids,
    resolve_descriptor,
    resolve_schedule,
    resolve_today,
    slot_key_for,
)

MONDAY = date(2024, 3, 4)


@pytest.fixture
def catalog(session_record):
    session = normalize_session(session_record)
    return {session.id: session}


@pytest.fixture
def weekly_plan(weekly_plan_record):
    return normalize_plan(weekly_plan_record)


@pytest.fixture
def sequential_plan(sequential_plan_record):
    return normalize_plan(sequential_plan_record)


# ---------------------------------------------------------------------------
# Slot keys
# ---------------------------------------------------------------------------


class TestDaySlots:
    @pytest.mark.parametrize("key,expected", [("Day 1", 1), ("day 12", 12), (" Day3 ", 3)])
    def test_day_slot_number(self, key, expected):
        assert day_slot_number(key) == expected

    @pytest.mark.parametrize("key", ["Day 0", "Monday", "Day", "Day one"])
    def test_not_a_day_slot(self, key):
        assert day_slot_number(key) is None

    def test_day_slot_count_ignores_other_keys(self):
        plan = Plan(schedule={"Day 1": "a", "Day 2": "b", "Bonus": "c"})
        assert day_slot_count(plan) == 2


class TestSlotKeyFor:
    def test_weekday_name(self, weekly_plan):
        assert slot_key_for(weekly_plan, MONDAY) == "Monday"
        assert slot_key_for(weekly_plan, MONDAY + timedelta(days=6)) == "Sunday"

    def test_weekday_ignores_start_date(self):
        """Day-of-week plans depend only on the weekday of the reference date."""
        keys = {
            slot_key_for(
                Plan(is_day_of_week=True, start_date=datetime(2023, 1, 1) + timedelta(days=offset)),
                MONDAY,
            )
            for offset in range(10)
        }
        assert keys == {"Monday"}

    def test_accepts_datetime(self, weekly_plan):
        assert slot_key_for(weekly_plan, datetime(2024, 3, 4, 23, 59)) == "Monday"

    def test_first_day(self, sequential_plan):
        assert slot_key_for(sequential_plan, MONDAY) == "Day 1"

    def test_last_day(self, sequential_plan):
        assert slot_key_for(sequential_plan, MONDAY + timedelta(days=6)) == "Day 7"

    def test_clamped_after_end(self, sequential_plan):
        assert slot_key_for(sequential_plan, MONDAY + timedelta(days=30)) == "Day 7"

    def test_before_start_is_day_one(self, sequential_plan):
        assert slot_key_for(sequential_plan, MONDAY - timedelta(days=3)) == "Day 1"

    def test_no_start_date_is_day_one(self):
        plan = Plan(schedule={"Day 1": "a", "Day 2": "b"})
        assert slot_key_for(plan, MONDAY) == "Day 1"


class TestDaysSinceStart:
    def test_counts_calendar_days(self):
        plan = Plan(start_date=datetime(2024, 3, 4, 23, 0))
        assert days_since_start(plan, datetime(2024, 3, 5, 1, 0)) == 1

    def test_floored_at_zero(self):
        plan = Plan(start_date=datetime(2024, 3, 10))
        assert days_since_start(plan, MONDAY) == 0


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class TestResolveDescriptor:
    def test_session_found(self, catalog):
        item = resolve_descriptor("sess_legs", catalog)
        assert isinstance(item, SessionItem)
        assert item.session.name == "Leg Day"

    def test_session_missing_from_empty_catalog(self):
        assert isinstance(resolve_descriptor("sess_abc123", {}), Unresolved)

    def test_callable_lookup(self):
        session = WorkoutSession(id="sess_abc123", name="Upper")
        item = resolve_descriptor("sess_abc123", lambda sid: session if sid == session.id else None)
        assert item == SessionItem(session=session)

    def test_callable_lookup_error_is_unresolved(self):
        def lookup(session_id):
            raise KeyError(session_id)

        assert isinstance(resolve_descriptor("sess_x", lookup), Unresolved)

    def test_rest_does_not_consult_catalog(self):
        def lookup(session_id):
            raise AssertionError("catalog should not be consulted")

        assert resolve_descriptor("Rest Session", lookup) == RestDay()


class TestResolveToday:
    def test_weekly_session(self, weekly_plan, catalog):
        item = resolve_today(weekly_plan, MONDAY, catalog)
        assert isinstance(item, SessionItem)
        assert item.session.id == "sess_legs"

    def test_weekly_rest(self, weekly_plan, catalog):
        assert resolve_today(weekly_plan, MONDAY + timedelta(days=1), catalog) == RestDay()

    def test_weekly_activity(self, weekly_plan, catalog):
        item = resolve_today(weekly_plan, MONDAY + timedelta(days=2), catalog)
        assert item == ActivityItem(
            activity_type="running",
            distance=5.0,
            duration_seconds=1800,
            run_type="outdoor_run",
        )

    def test_session_not_in_catalog(self, weekly_plan, catalog):
        item = resolve_today(weekly_plan, MONDAY + timedelta(days=3), catalog)
        assert isinstance(item, Unresolved)

    def test_missing_slot(self, weekly_plan, catalog):
        item = resolve_today(weekly_plan, MONDAY + timedelta(days=4), catalog)
        assert isinstance(item, Unresolved)
        assert "Friday" in item.reason

    @pytest.mark.parametrize(
        "monday",
        [date(2024, 3, 4), date(2023, 12, 25), date(2025, 6, 30), date(2019, 2, 4)],
    )
    def test_same_weekday_same_item_any_month_or_year(self, weekly_plan, catalog, monday):
        assert monday.weekday() == 0
        assert resolve_today(weekly_plan, monday, catalog) == resolve_today(weekly_plan, MONDAY, catalog)

    def test_case_insensitive_slot_key(self, catalog):
        plan = Plan(is_day_of_week=True, schedule={"monday": "sess_legs"})
        assert isinstance(resolve_today(plan, MONDAY, catalog), SessionItem)

    def test_sequential_plan_after_end_uses_last_day(self, sequential_plan, catalog):
        item = resolve_today(sequential_plan, MONDAY + timedelta(days=100), catalog)
        assert isinstance(item, SessionItem)

    def test_sequential_activity(self, sequential_plan, catalog):
        item = resolve_today(sequential_plan, MONDAY + timedelta(days=3), catalog)
        assert item == ActivityItem(activity_type="biking", distance=20.0)


class TestReferencedSessionIds:
    def test_ids_as_parsed(self):
        plan = Plan(
            schedule={
                "Day 1": " sess_1 ",
                "Day 2": "Rest Session",
                "Day 3": "activityType:running",
                "Day 4": "sess_1",
                "Day 5": "sess_2",
            }
        )
        assert referenced_session_ids(plan) == ["sess_1", "sess_2"]

    def test_padded_descriptor_resolves_against_narrowed_catalog(self, catalog):
        plan = Plan(is_day_of_week=True, schedule={"Monday": "sess_legs "})
        narrowed = {sid: catalog[sid] for sid in referenced_session_ids(plan) if sid in catalog}
        assert isinstance(resolve_today(plan, MONDAY, narrowed), SessionItem)


class TestResolveSchedule:
    def test_weekday_order(self, catalog):
        plan = Plan(
            is_day_of_week=True,
            schedule={"Friday": "rest", "Monday": "sess_legs", "Wednesday": "rest"},
        )
        assert list(resolve_schedule(plan, catalog)) == ["Monday", "Wednesday", "Friday"]

    def test_numeric_day_order(self, catalog):
        plan = Plan(schedule={"Day 10": "rest", "Day 2": "rest", "Day 1": "sess_legs"})
        assert list(resolve_schedule(plan, catalog)) == ["Day 1", "Day 2", "Day 10"]

    def test_unrecognized_keys_last_in_source_order(self, catalog):
        plan = Plan(schedule={"Bonus": "rest", "Day 2": "rest", "Extra": "rest", "Day 1": "rest"})
        assert list(resolve_schedule(plan, catalog)) == ["Day 1", "Day 2", "Bonus", "Extra"]

    def test_items_resolved(self, weekly_plan, catalog):
        items = resolve_schedule(weekly_plan, catalog)
        assert isinstance(items["Monday"], SessionItem)
        assert items["Tuesday"] == RestDay()
        assert isinstance(items["Wednesday"], ActivityItem)
        assert isinstance(items["Thursday"], Unresolved)
