"""
Test fixtures for workout-schedule-api.

Provides sample raw records in the shapes the workout-data service returns
(including legacy field names) and a FastAPI TestClient with auth overridden.
"""

import sys
from pathlib import Path
from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Make src/ importable so tests can do `import workout_schedule_api...`
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from workout_schedule_api.auth import get_optional_user
from workout_schedule_api.main import app


# ---------------------------------------------------------------------------
# Auth Mock
# ---------------------------------------------------------------------------


TEST_USER_ID = "test-user-123"


async def mock_get_optional_user() -> str:
    """Mock auth dependency that returns a test user."""
    return TEST_USER_ID


@pytest.fixture
def client() -> TestClient:
    """Per-test FastAPI TestClient with auth overridden."""
    app.dependency_overrides[get_optional_user] = mock_get_optional_user
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Sample Data Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def squat_record() -> Dict[str, Any]:
    """Movement record in the current schema."""
    return {
        "movementId": "mov_squat",
        "movement1Name": "Back Squat",
        "isSingle": True,
        "isTimed": False,
        "category": "Legs",
        "difficulty": "Intermediate",
        "equipmentNeeded": True,
        "firstSectionSets": [
            {"id": "set_1", "weight": 135, "reps": 10},
            {"id": "set_2", "weight": "155.5", "reps": "8"},
        ],
    }


@pytest.fixture
def superset_record() -> Dict[str, Any]:
    """Compound movement with two sections."""
    return {
        "movementId": "mov_pull_press",
        "movement1Name": "Pull-ups",
        "movement2Name": "Z Press",
        "isSingle": False,
        "firstSectionSets": [{"reps": 8}],
        "secondSectionSets": [{"reps": 8, "weight": 40}],
    }


@pytest.fixture
def session_record(squat_record, superset_record) -> Dict[str, Any]:
    return {
        "sessionId": "sess_legs",
        "name": "Leg Day",
        "description": "Lower body strength",
        "difficulty": "Intermediate",
        "equipmentNeeded": True,
        "createdAt": "2024-03-01T08:30:00.000Z",
        "movements": [squat_record, superset_record],
    }


@pytest.fixture
def weekly_plan_record() -> Dict[str, Any]:
    """Day-of-week plan; the flag is omitted so it must be inferred."""
    return {
        "planId": "plan_weekly",
        "name": "Strength Week",
        "tags": ["strength", "beginner"],
        "ratingValue": "4.5",
        "ratingCount": 2,
        "sessions": {
            "Monday": "sess_legs",
            "Tuesday": "Rest Session",
            "Wednesday": "activityType: running; distance: 5.0; runType: outdoor_run; duration: 1800",
            "Thursday": "sess_missing",
        },
    }


@pytest.fixture
def sequential_plan_record() -> Dict[str, Any]:
    return {
        "planId": "plan_seq",
        "name": "7 Day Kickstart",
        "isDayOfTheWeekPlan": False,
        "startDate": "2024-03-04T00:00:00Z",
        "sessions": {
            "Day 1": "sess_legs",
            "Day 2": "Rest Session",
            "Day 3": "sess_legs",
            "Day 4": "activityType:biking;distance:20",
            "Day 5": "sess_legs",
            "Day 6": "rest",
            "Day 7": "sess_legs",
        },
    }


# ---------------------------------------------------------------------------
# Environment Variables
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def mock_env_vars(monkeypatch):
    """Set mock environment variables for tests."""
    monkeypatch.setenv("API_KEYS", "sk_test_key1")
    monkeypatch.setenv("WORKOUT_DATA_SESSIONS_URL", "https://data.test/sessions")
    monkeypatch.setenv("WORKOUT_DATA_PLANS_URL", "https://data.test/plans")
    monkeypatch.setenv("WORKOUT_DATA_MOVEMENTS_URL", "https://data.test/movements")
