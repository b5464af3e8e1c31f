"""Domain models for workout plans and schedule resolution."""
import uuid
from datetime import datetime
from typing import Annotated, Dict, FrozenSet, List, Literal, Optional, Union

from pydantic import BaseModel, Field, computed_field

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

EQUIPMENT_NEEDED_LABEL = "Equipment needed"


def new_id() -> str:
    """Generate a stable identifier for records that arrive without one."""
    return str(uuid.uuid4())


class WorkoutSet(BaseModel):
    """One unit of work within a movement.

    Only the fields that match the owning movement's ``is_timed`` flag are
    meaningful; the others are display noise.
    """
    id: str = Field(default_factory=new_id)
    weight: Optional[float] = None
    reps: Optional[int] = None
    duration_seconds: Optional[int] = None

    class Config:
        frozen = True
        extra = "ignore"


class Movement(BaseModel):
    """A single exercise definition, possibly compound and multi-section."""
    id: str = Field(default_factory=new_id)
    primary_name: str = ""
    secondary_name: Optional[str] = None
    is_single: bool = True
    is_timed: bool = False
    category: Optional[str] = None
    difficulty: Optional[str] = None
    description: Optional[str] = None
    equipment_needed: FrozenSet[str] = Field(default_factory=frozenset)

    # Section layout: supersets use first + second, alternating formats use weaved
    first_section_sets: List[WorkoutSet] = Field(default_factory=list)
    second_section_sets: List[WorkoutSet] = Field(default_factory=list)
    weaved_sets: List[WorkoutSet] = Field(default_factory=list)

    class Config:
        frozen = True
        extra = "ignore"

    @computed_field
    @property
    def is_compound(self) -> bool:
        # Driven by the secondary name only; is_single is not consulted.
        return bool(self.secondary_name and self.secondary_name.strip())

    @computed_field
    @property
    def display_name(self) -> str:
        if self.is_compound:
            return f"{self.primary_name} + {self.secondary_name}"
        return self.primary_name


class WorkoutSession(BaseModel):
    """A named, ordered collection of movements (order is execution order)."""
    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    difficulty: Optional[str] = None
    equipment_needed: FrozenSet[str] = Field(default_factory=frozenset)
    created_at: Optional[datetime] = None
    movements: List[Movement] = Field(default_factory=list)

    class Config:
        frozen = True
        extra = "ignore"


class Rating(BaseModel):
    value: float = 0.0
    count: int = 0

    class Config:
        frozen = True


class Plan(BaseModel):
    """
    A multi-day training program.

    ``schedule`` maps slot keys to raw descriptor strings. Slot keys are
    weekday names ("Monday".."Sunday") for day-of-week plans and "Day N"
    for sequential plans. Mixed keys are tolerated, never rejected.
    """
    id: str = Field(default_factory=new_id)
    name: str = ""
    description: Optional[str] = None
    difficulty: Optional[str] = None
    category: Optional[str] = None
    duration: Optional[str] = None  # Free text, e.g. "4 weeks"
    tags: FrozenSet[str] = Field(default_factory=frozenset)
    rating: Rating = Field(default_factory=Rating)
    schedule: Dict[str, str] = Field(default_factory=dict)
    is_day_of_week: bool = False
    start_date: Optional[datetime] = None  # Anchor for sequential plans

    class Config:
        frozen = True
        extra = "ignore"

    def with_rating(self, value: float) -> "Plan":
        """Return a copy with ``value`` folded into the running average."""
        count = self.rating.count + 1
        average = (self.rating.value * self.rating.count + value) / count
        return self.model_copy(update={"rating": Rating(value=average, count=count)})


# ---------------------------------------------------------------------------
# Schedule items
# ---------------------------------------------------------------------------


class SessionItem(BaseModel):
    kind: Literal["session"] = "session"
    session: WorkoutSession

    class Config:
        frozen = True


class ActivityItem(BaseModel):
    """A non-gym activity (run, ride, sport) scheduled in a plan slot."""
    kind: Literal["activity"] = "activity"
    activity_type: str
    distance: Optional[float] = None
    duration_seconds: Optional[int] = None
    run_type: Optional[str] = None
    sport_type: Optional[str] = None

    class Config:
        frozen = True


class RestDay(BaseModel):
    kind: Literal["rest"] = "rest"

    class Config:
        frozen = True


class Unresolved(BaseModel):
    """Slot absent for the date, or present but not interpretable."""
    kind: Literal["unresolved"] = "unresolved"
    reason: Optional[str] = None

    class Config:
        frozen = True


class SessionRef(BaseModel):
    """Literal session identifier awaiting catalog lookup.

    Produced by the descriptor parser only; the resolver never returns it.
    """
    kind: Literal["session_ref"] = "session_ref"
    session_id: str

    class Config:
        frozen = True


ScheduleItem = Annotated[
    Union[SessionItem, ActivityItem, RestDay, Unresolved],
    Field(discriminator="kind"),
]

ParsedDescriptor = Union[ActivityItem, RestDay, Unresolved, SessionRef]
