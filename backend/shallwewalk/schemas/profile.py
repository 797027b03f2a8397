from typing import Optional
from uuid import uuid4

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from shallwewalk.core.constants import DEFAULT_BREED
from shallwewalk.schemas.activity import ActivityLevel


def _new_profile_id() -> str:
    return uuid4().hex


class AnimalProfile(BaseModel):
    """A companion animal as entered by the user.

    Stored with the mobile app's keys (weight, age, activityLevel, avatarUri);
    profiles written before ids existed get one on load.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(default_factory=_new_profile_id)
    name: str = Field(min_length=1)
    weight_kg: float = Field(
        gt=0,
        validation_alias=AliasChoices("weight_kg", "weightKg", "weight"),
        serialization_alias="weight",
    )
    age_years: int = Field(
        ge=0,
        validation_alias=AliasChoices("age_years", "ageYears", "age"),
        serialization_alias="age",
    )
    breed: str = DEFAULT_BREED
    activity_level: ActivityLevel = Field(
        ActivityLevel.medium,
        validation_alias=AliasChoices("activity_level", "activityLevel"),
        serialization_alias="activityLevel",
    )
    avatar_uri: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("avatar_uri", "avatarUri"),
        serialization_alias="avatarUri",
    )

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    @field_validator("breed", mode="before")
    @classmethod
    def _default_breed(cls, v):
        if v in ("", None):
            return DEFAULT_BREED
        return v

    def to_storage(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
