"""
Schedule endpoints

Exposes record normalization, today's schedule resolution, whole-schedule
resolution and sequential-plan progress to the presentation layer.

The POST endpoints work on records the caller already fetched. The
``/plans/{plan_id}/today`` endpoint fetches plan and sessions from the
workout-data service for the caller's identity.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from workout_schedule_api.auth import get_optional_user
from workout_schedule_api.models import Movement, Plan, ScheduleItem, WorkoutSession
from workout_schedule_api.services.plan_progress import current_day_number, progress
from workout_schedule_api.services.record_merge import merge_unique
from workout_schedule_api.services.record_normalizer import (
    normalize_movement,
    normalize_plan,
    normalize_session,
)
from workout_schedule_api.services.schedule_resolver import (
    referenced_session_ids,
    resolve_schedule,
    resolve_today,
    slot_key_for,
)
from workout_schedule_api.services.workout_data_client import (
    WorkoutDataClient,
    WorkoutDataError,
    session_key,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class ResolveTodayRequest(BaseModel):
    """Request model for POST /schedule/resolve"""
    plan: Dict[str, Any] = Field(..., description="Raw plan record")
    sessions: List[Dict[str, Any]] = Field(default_factory=list, description="Raw session records (catalog)")
    reference_date: Optional[date] = Field(default=None, alias="date", description="Reference date; defaults to today")

    class Config:
        populate_by_name = True


class ResolveTodayResponse(BaseModel):
    """Response model for a single-date resolution"""
    plan_id: str
    slot_key: str
    item: ScheduleItem
    progress: Optional[float] = Field(default=None, ge=0, le=1)
    current_day: Optional[int] = None


class ScheduleRequest(BaseModel):
    """Request model for POST /schedule/week"""
    plan: Dict[str, Any]
    sessions: List[Dict[str, Any]] = Field(default_factory=list)


class ScheduleSlot(BaseModel):
    slot_key: str
    item: ScheduleItem


class ScheduleResponse(BaseModel):
    plan_id: str
    is_day_of_week: bool
    slots: List[ScheduleSlot]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def get_workout_data_client() -> WorkoutDataClient:
    return WorkoutDataClient()


def build_catalog(records: List[Dict[str, Any]]) -> Dict[str, WorkoutSession]:
    """Normalize raw session records into a lookup keyed by session id (first seen wins)."""
    catalog: Dict[str, WorkoutSession] = {}
    for record in merge_unique(records, [], session_key):
        session = normalize_session(record)
        if session is not None and session.id not in catalog:
            catalog[session.id] = session
    return catalog


def _resolve(plan: Plan, catalog: Dict[str, WorkoutSession], on: date) -> ResolveTodayResponse:
    return ResolveTodayResponse(
        plan_id=plan.id,
        slot_key=slot_key_for(plan, on),
        item=resolve_today(plan, on, catalog),
        progress=progress(plan, on),
        current_day=current_day_number(plan, on),
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@router.post("/normalize/movement", response_model=Movement)
def normalize_movement_endpoint(raw: Dict[str, Any] = Body(...)) -> Movement:
    return normalize_movement(raw)


@router.post("/normalize/session", response_model=WorkoutSession)
def normalize_session_endpoint(raw: Dict[str, Any] = Body(...)) -> WorkoutSession:
    session = normalize_session(raw)
    if session is None:
        raise HTTPException(status_code=422, detail="Session record has no sessionId or id")
    return session


@router.post("/normalize/plan", response_model=Plan)
def normalize_plan_endpoint(raw: Dict[str, Any] = Body(...)) -> Plan:
    return normalize_plan(raw)


@router.post("/schedule/resolve", response_model=ResolveTodayResponse)
def resolve_today_endpoint(request: ResolveTodayRequest) -> ResolveTodayResponse:
    """Resolve what the plan schedules on the given date (default: today)."""
    plan = normalize_plan(request.plan)
    catalog = build_catalog(request.sessions)
    return _resolve(plan, catalog, request.reference_date or date.today())


@router.post("/schedule/week", response_model=ScheduleResponse)
def resolve_schedule_endpoint(request: ScheduleRequest) -> ScheduleResponse:
    """Resolve every slot of the plan in display order."""
    plan = normalize_plan(request.plan)
    catalog = build_catalog(request.sessions)
    slots = [
        ScheduleSlot(slot_key=key, item=item)
        for key, item in resolve_schedule(plan, catalog).items()
    ]
    return ScheduleResponse(plan_id=plan.id, is_day_of_week=plan.is_day_of_week, slots=slots)


@router.get("/plans/{plan_id}/today", response_model=ResolveTodayResponse)
def plan_today_endpoint(
    plan_id: str,
    on: Optional[date] = Query(default=None, alias="date"),
    user_id: Optional[str] = Depends(get_optional_user),
    client: WorkoutDataClient = Depends(get_workout_data_client),
) -> ResolveTodayResponse:
    """
    Fetch a plan and its sessions for the caller and resolve today's item.

    Authenticated callers see their own records first, then public ones;
    anonymous callers see public records only.
    """
    try:
        plan = client.fetch_plan(user_id, plan_id)
        if plan is None:
            raise HTTPException(status_code=404, detail=f"Plan {plan_id} not found")
        catalog = client.fetch_session_catalog(user_id, session_ids=referenced_session_ids(plan))
    except WorkoutDataError as e:
        logger.error(f"Workout data service error for plan {plan_id}: {e}")
        raise HTTPException(status_code=502, detail=f"Workout data service error: {e}")

    return _resolve(plan, catalog, on or date.today())
