from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class AllTime(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["all_time"] = "all_time"

    def includes(self, date_key: str) -> bool:
        return True


class Month(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["month"] = "month"
    year: int = Field(ge=1)
    month: int = Field(ge=1, le=12)

    @property
    def prefix(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-"

    def includes(self, date_key: str) -> bool:
        return date_key.startswith(self.prefix)


StatsScope = Union[AllTime, Month]


class AggregateStats(BaseModel):
    """Totals and per-entry averages over a scope of stored entries."""

    entry_count: int = 0
    total_distance_km: float = 0.0
    total_hours: float = 0.0
    total_human_kcal: float = 0.0
    total_animal_kcal: float = 0.0
    avg_distance_km: float = 0.0
    avg_human_kcal: float = 0.0
    avg_animal_kcal: float = 0.0
    avg_speed_kmh: float = 0.0
