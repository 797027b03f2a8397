"""Append-only history of completed sessions, grouped by calendar date."""

import threading
from datetime import date, datetime
from typing import Any

from loguru import logger
from pydantic import ValidationError

from shallwewalk.core.config import settings
from shallwewalk.core.errors import InputError, PersistenceError
from shallwewalk.core.numbers import parse_number
from shallwewalk.core.time_utils import parse_hours
from shallwewalk.schemas.record import (
    DATE_KEY_RE,
    DayEntry,
    DayRecord,
    RunningRecord,
    stored_day_adapter,
)
from shallwewalk.schemas.stats import AggregateStats, AllTime, StatsScope
from shallwewalk.services.storage import KeyValueStorage, read_json_list, write_json_list


def to_date_key(value: date | datetime | str) -> str:
    """Normalize a date to the 'YYYY-MM-DD' key used by the store."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    s = str(value).strip()
    if not DATE_KEY_RE.match(s):
        raise InputError(f"Date must be in YYYY-MM-DD format, got {value!r}")
    return s


def _merge_days(first: DayRecord, second: DayRecord) -> DayRecord:
    extras = dict(second.model_extra or {})
    extras.update(first.model_extra or {})
    return DayRecord(date=first.date, entries=[*first.entries, *second.entries], **extras)


class RecordStore:
    """Day records kept in memory and written back after every mutation.

    If a write fails the in-memory records stay authoritative; the next
    mutation or load() retries the write.
    """

    def __init__(self, storage: KeyValueStorage, key: str | None = None) -> None:
        self._storage = storage
        self._key = key or settings.day_records_key
        self._records: list[DayRecord] = []
        # Stored items that do not parse as day records; written back untouched
        self._unparsed: list[Any] = []
        self._dirty = False
        self._lock = threading.RLock()

    @property
    def records(self) -> list[DayRecord]:
        with self._lock:
            return [r.model_copy(deep=True) for r in self._records]

    def load(self) -> list[DayRecord]:
        """Read all day records, folding legacy running fields into entries.

        Migrated data is written back before returning. Loading data that is
        already canonical performs no write.
        """
        with self._lock:
            if self._dirty:
                logger.warning("Unsaved day records in memory; retrying write instead of reloading")
                self._persist()
                return self.records

            raw_items = read_json_list(self._storage, self._key)
            records: list[DayRecord] = []
            by_date: dict[str, int] = {}
            unparsed: list[Any] = []
            migrated = 0
            merged = 0

            for idx, raw in enumerate(raw_items):
                try:
                    stored = stored_day_adapter.validate_python(raw)
                except ValidationError as e:
                    logger.warning(f"Day record {idx} is malformed, keeping it untouched: {e.error_count()} error(s)")
                    unparsed.append(raw)
                    continue

                if stored.shape != "canonical":
                    migrated += 1
                day = stored.to_canonical()

                if day.date in by_date:
                    pos = by_date[day.date]
                    records[pos] = _merge_days(records[pos], day)
                    merged += 1
                else:
                    by_date[day.date] = len(records)
                    records.append(day)

            self._records = records
            self._unparsed = unparsed

            if migrated or merged:
                logger.info(
                    f"Migrated {migrated} legacy day record(s) and merged {merged} duplicate date(s) under {self._key!r}"
                )
                self._persist()
            return self.records

    def get(self, date_key: date | datetime | str) -> DayRecord | None:
        key = to_date_key(date_key)
        with self._lock:
            day = self._find(key)
            return day.model_copy(deep=True) if day is not None else None

    def days_in_month(self, year: int, month: int) -> list[DayRecord]:
        prefix = f"{year:04d}-{month:02d}-"
        with self._lock:
            days = [r.model_copy(deep=True) for r in self._records if r.date.startswith(prefix)]
        return sorted(days, key=lambda d: d.date)

    def append(self, date_key: date | datetime | str, record: RunningRecord) -> DayRecord:
        """Add a completed session under `date_key`; existing entries are kept."""
        key = to_date_key(date_key)
        with self._lock:
            day = self._find(key)
            if day is None:
                day = DayRecord(date=key, entries=[], photos=[], memo="", mood="")
                self._records.append(day)
            day.entries.append(DayEntry(running_record=record))
            logger.info(f"Appended entry #{len(day.entries)} for {key}")
            self._persist()
            return day.model_copy(deep=True)

    def delete(self, date_key: date | datetime | str) -> bool:
        """Remove the whole day record for `date_key`. Returns False if there was none."""
        key = to_date_key(date_key)
        with self._lock:
            before = len(self._records)
            self._records = [r for r in self._records if r.date != key]
            if len(self._records) == before:
                return False
            logger.info(f"Deleted day record {key}")
            self._persist()
            return True

    def aggregate(self, scope: StatsScope | None = None) -> AggregateStats:
        """Totals and per-entry averages over every entry in `scope`.

        Distances and kcal are read from the display text with non-numeric
        characters stripped; durations go through parse_hours. Anything that
        cannot be read counts as 0.
        """
        scope = scope or AllTime()
        with self._lock:
            records = [
                rec
                for day in self._records
                if scope.includes(day.date)
                for rec in day.running_records()
            ]

        count = len(records)
        total_distance = sum(parse_number(r.distance_text) for r in records)
        total_hours = sum(parse_hours(r.duration_text) for r in records)
        total_human = sum(parse_number(r.human_calories_text) for r in records)
        total_animal = sum(parse_number(r.companion_calories_text) for r in records)

        return AggregateStats(
            entry_count=count,
            total_distance_km=total_distance,
            total_hours=total_hours,
            total_human_kcal=total_human,
            total_animal_kcal=total_animal,
            avg_distance_km=total_distance / count if count else 0.0,
            avg_human_kcal=total_human / count if count else 0.0,
            avg_animal_kcal=total_animal / count if count else 0.0,
            avg_speed_kmh=total_distance / total_hours if total_hours > 0 else 0.0,
        )

    def _find(self, key: str) -> DayRecord | None:
        for r in self._records:
            if r.date == key:
                return r
        return None

    def _persist(self) -> None:
        payload = [r.to_storage() for r in self._records] + list(self._unparsed)
        try:
            write_json_list(self._storage, self._key, payload)
        except PersistenceError:
            self._dirty = True
            logger.warning(f"Could not persist day records under {self._key!r}; keeping them in memory")
            raise
        self._dirty = False
