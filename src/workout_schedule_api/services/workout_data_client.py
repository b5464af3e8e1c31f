"""
Workout Data Client

PURPOSE
-------
- Fetch raw movement, session and plan records from the remote workout-data
  service (one GET endpoint per record type)
- Follow ``lastEvaluatedKey`` pagination until every page is read
- Apply the private-then-public fallback: the user's own records first, then
  public/shared records, de-duplicated by id with the private copy winning

Response envelope of every endpoint:
    {"success": true, "data": [...], "count": 2, "error": null, "lastEvaluatedKey": "..."}

The client only fetches and merges; turning records into domain models is
the normalizer's job.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

import requests

from workout_schedule_api.config import Settings, settings as default_settings
from workout_schedule_api.models import Plan, WorkoutSession
from workout_schedule_api.services.record_merge import merge_unique
from workout_schedule_api.services.record_normalizer import normalize_plan, normalize_session
from workout_schedule_api.services.retry import DEFAULT_MIN_WAIT_SECONDS, retry_sync_call
from workout_schedule_api.utils import first_present, to_str

logger = logging.getLogger(__name__)


class WorkoutDataError(RuntimeError):
    """Raised when the workout-data service cannot be read."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class WorkoutDataEnvelopeError(WorkoutDataError):
    """The service answered but reported a failure or sent an unreadable body."""

    retryable = False


def session_key(record: Dict[str, Any]) -> Optional[str]:
    return to_str(first_present(record, "sessionId", "id"))


def plan_key(record: Dict[str, Any]) -> Optional[str]:
    return to_str(first_present(record, "planId", "id"))


class WorkoutDataClient:
    """Read client for the remote workout-data service."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
        min_wait_seconds: float = DEFAULT_MIN_WAIT_SECONDS,
    ):
        self.settings = settings or default_settings
        self.http = session or requests.Session()
        self.min_wait_seconds = min_wait_seconds

    # ------------------------
    # Paged fetch
    # ------------------------

    def _get_page(self, url: str, params: Dict[str, str]) -> Dict[str, Any]:
        response = self.http.get(url, params=params, timeout=self.settings.WORKOUT_DATA_TIMEOUT_SEC)
        if not 200 <= response.status_code < 300:
            raise WorkoutDataError(
                f"Workout data request failed: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as e:
            raise WorkoutDataEnvelopeError(f"Workout data response is not JSON: {e}") from e
        if not isinstance(payload, dict):
            raise WorkoutDataEnvelopeError("Workout data response is not an object")
        if not payload.get("success", False):
            raise WorkoutDataEnvelopeError(payload.get("error") or "Unknown error")
        return payload

    def _fetch_all(self, url: Optional[str], record_type: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        """Read every page of an endpoint, following lastEvaluatedKey."""
        if not url:
            raise WorkoutDataError(f"No URL configured for {record_type}")

        records: List[Dict[str, Any]] = []
        seen_tokens = set()
        page_params = dict(params)

        while True:
            try:
                payload = retry_sync_call(
                    self._get_page,
                    url,
                    page_params,
                    max_attempts=self.settings.WORKOUT_DATA_MAX_ATTEMPTS,
                    min_wait_seconds=self.min_wait_seconds,
                    max_wait_seconds=max(self.min_wait_seconds, 10),
                )
            except requests.RequestException as e:
                raise WorkoutDataError(f"Workout data request failed: {e}") from e

            data = payload.get("data") or []
            records.extend(item for item in data if isinstance(item, dict))

            token = payload.get("lastEvaluatedKey")
            if not token or token in seen_tokens:
                break
            seen_tokens.add(token)
            page_params = {**params, "lastEvaluatedKey": str(token)}

        logger.info(f"Fetched {len(records)} {record_type} (user={params.get('userId', 'public')})")
        return records

    def _params(
        self,
        user_id: Optional[str],
        is_public: Optional[bool],
        category: Optional[str] = None,
    ) -> Dict[str, str]:
        params = {"limit": str(self.settings.WORKOUT_DATA_PAGE_LIMIT)}
        if user_id:
            params["userId"] = user_id
        if is_public is not None:
            params["isPublic"] = "true" if is_public else "false"
        if category:
            params["category"] = category
        return params

    def get_movements(
        self,
        user_id: Optional[str] = None,
        is_public: Optional[bool] = None,
        category: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        return self._fetch_all(
            self.settings.WORKOUT_DATA_MOVEMENTS_URL,
            "movements",
            self._params(user_id, is_public, category),
        )

    def get_sessions(
        self,
        user_id: Optional[str] = None,
        is_public: Optional[bool] = None,
        category: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        return self._fetch_all(
            self.settings.WORKOUT_DATA_SESSIONS_URL,
            "sessions",
            self._params(user_id, is_public, category),
        )

    def get_plans(
        self,
        user_id: Optional[str] = None,
        is_public: Optional[bool] = None,
    ) -> List[Dict[str, Any]]:
        return self._fetch_all(
            self.settings.WORKOUT_DATA_PLANS_URL,
            "plans",
            self._params(user_id, is_public),
        )

    # ------------------------
    # Two-tier lookups
    # ------------------------

    def fetch_session_catalog(
        self,
        user_id: Optional[str],
        session_ids: Optional[Iterable[str]] = None,
    ) -> Dict[str, WorkoutSession]:
        """
        Build the session catalog used by the schedule resolver.

        The user's sessions come first, then public ones; an id present in
        both keeps the user's copy. ``session_ids`` narrows the catalog.
        """
        private = self.get_sessions(user_id=user_id) if user_id else []
        public = self.get_sessions(is_public=True)
        merged = merge_unique(private, public, session_key)

        wanted = {s.strip() for s in session_ids} if session_ids is not None else None
        catalog: Dict[str, WorkoutSession] = {}
        for record in merged:
            session = normalize_session(record)
            if session is None or session.id in catalog:
                continue
            if wanted is not None and session.id not in wanted:
                continue
            catalog[session.id] = session
        return catalog

    def fetch_plan(self, user_id: Optional[str], plan_id: str) -> Optional[Plan]:
        """Find a plan by id: the user's plans first, public plans second."""
        sources = []
        if user_id:
            sources.append(lambda: self.get_plans(user_id=user_id))
        sources.append(lambda: self.get_plans(is_public=True))

        for fetch in sources:
            for record in fetch():
                if plan_key(record) == plan_id:
                    return normalize_plan(record)
        return None


def build_plan_update_payload(user_id: str, plan: Plan) -> Dict[str, Any]:
    """Request body for the plan update endpoint; only present fields are sent."""
    body: Dict[str, Any] = {
        "userId": user_id,
        "planId": plan.id,
        "sessions": dict(plan.schedule),
        "isDayOfTheWeekPlan": plan.is_day_of_week,
        "tags": sorted(plan.tags),
        "ratingValue": plan.rating.value,
        "ratingCount": plan.rating.count,
    }
    if plan.name:
        body["name"] = plan.name
    if plan.description is not None:
        body["description"] = plan.description
    if plan.difficulty is not None:
        body["difficulty"] = plan.difficulty
    if plan.duration is not None:
        body["duration"] = plan.duration
    return body
