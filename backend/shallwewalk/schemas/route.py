from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from shallwewalk.schemas.geo import Coordinate


class RouteWalkRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    origin: Coordinate
    destination: Coordinate
    companion_names: list[str] = Field(default_factory=list)


class AnimalWalkCalories(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = ""
    walk_calories_kcal: Optional[float] = Field(
        None, validation_alias=AliasChoices("walkCaloriesKcal", "dogWalkCaloriesKcal")
    )


class RouteWalkResponse(BaseModel):
    """Body of the routing service's walk-route response.

    Older servers report animals under `dogs` with `dogWalkCaloriesKcal`.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    distance_meters: float
    duration_seconds: float
    encoded_polyline: str
    human_walk_calories_kcal: Optional[float] = None
    per_animal: list[AnimalWalkCalories] = Field(
        default_factory=list, validation_alias=AliasChoices("perAnimal", "dogs")
    )

    @field_validator("per_animal", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return [] if v is None else v


class RouteResult(BaseModel):
    """A decoded walk route with the server's figures for it."""

    distance_km: float
    duration_seconds: int
    decoded_path: list[Coordinate]
    human_kcal: Optional[int] = None
    per_animal_kcal: Optional[dict[str, int]] = None

    @property
    def duration_hours(self) -> float:
        return self.duration_seconds / 3600

    @property
    def companion_kcal_total(self) -> Optional[int]:
        if not self.per_animal_kcal:
            return None
        return sum(self.per_animal_kcal.values())


class CompanionRegistration(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    breed: str
    weight_kg: float
    age_months: int
