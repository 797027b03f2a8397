from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from shallwewalk.core.time_utils import compute_pace, seconds_to_mmss
from shallwewalk.schemas.activity import ActivityKind
from shallwewalk.schemas.geo import Coordinate
from shallwewalk.schemas.profile import AnimalProfile
from shallwewalk.schemas.record import RunningRecord


class SessionState(str, Enum):
    idle = "idle"
    active = "active"
    completed = "completed"


class ServerFigures(BaseModel):
    """Values from the routing service that replace live-tracked ones."""

    distance_km: float
    human_kcal: Optional[int] = None
    companion_kcal_total: Optional[int] = None


class Session(BaseModel):
    """One tracked walk/run. Owned and mutated only by SessionController."""

    activity_kind: ActivityKind
    started_at: datetime
    elapsed_seconds: int = 0
    positions: list[Coordinate] = Field(default_factory=list)
    distance_km: float = 0.0
    human_kcal: int = 0
    companion_kcal_total: int = 0
    companions: list[AnimalProfile] = Field(default_factory=list)
    destination: Optional[Coordinate] = None
    server_route: Optional[list[Coordinate]] = None
    server_figures: Optional[ServerFigures] = None

    @property
    def hours(self) -> float:
        return self.elapsed_seconds / 3600

    @property
    def duration_text(self) -> str:
        return seconds_to_mmss(self.elapsed_seconds)


class SessionSnapshot(BaseModel):
    """A consistent copy of the controller's state for display."""

    state: SessionState
    session: Optional[Session] = None
    destination: Optional[Coordinate] = None
    last_position: Optional[Coordinate] = None


class SessionSummary(BaseModel):
    """What the completion prompt shows before the user decides to save."""

    activity_kind: ActivityKind
    elapsed_seconds: int
    duration_text: str
    distance_km: float
    human_kcal: int
    companion_kcal_total: int
    companion_names: list[str] = Field(default_factory=list)

    @classmethod
    def from_session(cls, session: Session) -> "SessionSummary":
        return cls(
            activity_kind=session.activity_kind,
            elapsed_seconds=session.elapsed_seconds,
            duration_text=session.duration_text,
            distance_km=session.distance_km,
            human_kcal=session.human_kcal,
            companion_kcal_total=session.companion_kcal_total,
            companion_names=[c.name for c in session.companions],
        )

    @property
    def pace(self) -> str:
        return compute_pace(self.elapsed_seconds, self.distance_km)

    def to_running_record(self) -> RunningRecord:
        return RunningRecord(
            duration_text=self.duration_text,
            distance_text=f"{self.distance_km:.2f}km",
            human_calories_text=str(self.human_kcal),
            companion_calories_text=str(self.companion_kcal_total),
        )
