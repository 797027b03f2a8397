"""Persisted history schemas.

Day records have been written in three shapes over the app's lifetime:

  - legacy-single: one `runningRecord` per day
  - legacy-list:   a `runningLogs` list per day
  - canonical:     an `entries` list of {runningRecord} wrappers

`StoredDay` parses any of them; `to_canonical()` folds the legacy fields into
`entries`. Nothing outside the record store should look at the legacy shapes.
"""

import re
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    field_validator,
    model_serializer,
    model_validator,
)

DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

LEGACY_LIST_KEY = "runningLogs"
LEGACY_SINGLE_KEY = "runningRecord"


class RunningRecord(BaseModel):
    """One completed session as shown on the calendar, e.g. ('12:30', '1.25km', '146', '63')."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    duration_text: str = Field("", alias="duration")
    distance_text: str = Field("", alias="distance")
    human_calories_text: str = Field("", alias="calories")
    companion_calories_text: str = Field("", alias="dogCalories")

    # Hand-edited or older data may hold numbers or nulls here
    @field_validator("*", mode="before")
    @classmethod
    def _coerce_text(cls, v):
        if v is None:
            return ""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class DayEntry(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    running_record: Optional[RunningRecord] = Field(None, alias="runningRecord")
    # A stored runningRecord that is not an object; written back as it was
    unreadable_record: Any = Field(None, exclude=True)

    @model_validator(mode="before")
    @classmethod
    def _set_aside_unreadable(cls, data):
        if not isinstance(data, dict):
            return data
        key = "runningRecord" if "runningRecord" in data else "running_record"
        value = data.get(key)
        if value is None or isinstance(value, (dict, BaseModel)):
            return data
        data = {k: v for k, v in data.items() if k != key}
        data["unreadable_record"] = value
        return data

    @model_serializer(mode="wrap")
    def _restore_unreadable(self, handler):
        data = handler(self)
        if self.unreadable_record is not None:
            data["runningRecord"] = self.unreadable_record
        return data


def _entry_for(raw: Any) -> DayEntry:
    return DayEntry.model_validate({"runningRecord": raw})


class DayRecord(BaseModel):
    """All entries for one calendar date plus the fields other screens own
    (photos, memo, mood), which are carried through untouched."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    date: str
    entries: list[DayEntry] = Field(default_factory=list)

    @field_validator("entries", mode="before")
    @classmethod
    def _drop_malformed_entries(cls, v):
        if not isinstance(v, list):
            return []
        return [e for e in v if isinstance(e, (dict, BaseModel))]

    def running_records(self) -> list[RunningRecord]:
        return [e.running_record for e in self.entries if e.running_record is not None]

    def to_storage(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class CanonicalDay(DayRecord):
    shape: Literal["canonical"] = Field("canonical", exclude=True)

    def to_canonical(self) -> DayRecord:
        return DayRecord.model_validate(self.to_storage())


class LegacySingleDay(DayRecord):
    shape: Literal["legacy-single"] = Field("legacy-single", exclude=True)
    # Kept raw; DayEntry decides whether it is readable
    running_record: Any = Field(None, alias=LEGACY_SINGLE_KEY)

    def to_canonical(self) -> DayRecord:
        entries = list(self.entries)
        if self.running_record is not None:
            entries.append(_entry_for(self.running_record))
        return DayRecord(date=self.date, entries=entries, **(self.model_extra or {}))


class LegacyListDay(DayRecord):
    shape: Literal["legacy-list"] = Field("legacy-list", exclude=True)
    running_logs: list[Any] = Field(default_factory=list, alias=LEGACY_LIST_KEY)
    # Some days were written with both legacy fields
    running_record: Any = Field(None, alias=LEGACY_SINGLE_KEY)

    @field_validator("running_logs", mode="before")
    @classmethod
    def _logs_none_to_empty(cls, v):
        if v is None:
            return []
        if not isinstance(v, list):
            return [v]
        return [log for log in v if log is not None]

    def to_canonical(self) -> DayRecord:
        entries = list(self.entries)
        entries.extend(_entry_for(log) for log in self.running_logs)
        if self.running_record is not None:
            entries.append(_entry_for(self.running_record))
        return DayRecord(date=self.date, entries=entries, **(self.model_extra or {}))


def stored_day_shape(raw: Any) -> str:
    if isinstance(raw, dict):
        if LEGACY_LIST_KEY in raw:
            return "legacy-list"
        if LEGACY_SINGLE_KEY in raw:
            return "legacy-single"
        return "canonical"
    return getattr(raw, "shape", "canonical")


StoredDay = Annotated[
    Union[
        Annotated[LegacyListDay, Tag("legacy-list")],
        Annotated[LegacySingleDay, Tag("legacy-single")],
        Annotated[CanonicalDay, Tag("canonical")],
    ],
    Discriminator(stored_day_shape),
]

stored_day_adapter = TypeAdapter(StoredDay)
