from datetime import date, timedelta
import json
import random

from shallwewalk.core.config import settings
from shallwewalk.core.logger import setup_logger
from shallwewalk.schemas.record import RunningRecord
from shallwewalk.services.records import RecordStore, to_date_key
from shallwewalk.services.storage import KeyValueStorage, SqlKeyValueStorage, read_json_list


def mmss(minutes: int, seconds: int = 0) -> str:
    return f"{minutes:02d}:{seconds:02d}"


def legacy_days(today: date) -> list[dict]:
    """Two days written the way older app versions stored them."""
    single_day = today - timedelta(days=40)
    list_day = today - timedelta(days=38)
    return [
        {
            "date": to_date_key(single_day),
            "runningRecord": {"duration": "25:00", "distance": "1.80km", "calories": "117", "dogCalories": "48"},
            "memo": "First walk with the app",
        },
        {
            "date": to_date_key(list_day),
            "runningLogs": [
                {"duration": "30분", "distance": "2.1", "calories": "140", "dogCalories": "55"},
                {"duration": "1:05:00", "distance": "6.40km", "calories": "758", "dogCalories": "190"},
            ],
            "photos": [],
            "mood": "happy",
        },
    ]


def seed_demo_records(storage: KeyValueStorage, weeks: int = 4, today: date | None = None) -> int:
    """Write a few legacy-shaped days, migrate them, then append walks and runs.

    Returns the number of entries appended on top of the legacy ones.
    """
    today = today or date.today()
    existing = read_json_list(storage, settings.day_records_key)
    known = {d.get("date") for d in existing if isinstance(d, dict)}
    seeded = existing + [d for d in legacy_days(today) if d["date"] not in known]
    storage.set(settings.day_records_key, json.dumps(seeded, ensure_ascii=False))

    store = RecordStore(storage)
    store.load()

    added = 0
    start_day = today - timedelta(weeks=weeks - 1)
    for week in range(weeks):
        week_start = start_day + timedelta(weeks=week)

        # Example: Mon/Wed walks, Sat run
        for offset, kind in [(0, "walk"), (2, "walk"), (5, "run")]:
            d = week_start + timedelta(days=offset)
            if d > today:
                continue

            minutes = random.randint(20, 45) if kind == "walk" else random.randint(25, 40)
            speed = random.uniform(4.0, 5.5) if kind == "walk" else random.uniform(8.0, 10.0)
            rate = settings.walk_kcal_per_hour if kind == "walk" else settings.run_kcal_per_hour
            distance = speed * minutes / 60

            store.append(
                d,
                RunningRecord(
                    duration_text=mmss(minutes),
                    distance_text=f"{distance:.2f}km",
                    human_calories_text=str(round(rate * minutes / 60)),
                    companion_calories_text=str(random.randint(30, 120)),
                ),
            )
            added += 1

    return added


def main():
    setup_logger()
    storage = SqlKeyValueStorage()
    added = seed_demo_records(storage)
    print(f"Seeded {added} demo entries")


if __name__ == "__main__":
    main()
