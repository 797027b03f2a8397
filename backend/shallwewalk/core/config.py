from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Durable key-value storage (one row per storage key)
    database_url: str = "sqlite+pysqlite:///shallwewalk.db"

    # Remote routing service
    routing_base_url: str = "https://www.shallwewalk.kro.kr"
    routing_walk_path: str = "/api/route/walk"
    routing_profile_path: str = "/api/dogs/profile"
    routing_timeout_seconds: float = 10.0

    # Where the map starts when the device has not produced a fix yet (Seoul City Hall)
    default_latitude: float = 37.5665
    default_longitude: float = 126.9780

    # Human energy rates (kcal per hour)
    run_kcal_per_hour: float = 700.0
    walk_kcal_per_hour: float = 280.0

    tick_interval_seconds: float = 1.0

    # Storage keys already used by the mobile app
    day_records_key: str = "dayRecords"
    animal_profiles_key: str = "dogProfiles"

    log_level: str = "INFO"
    log_file: str | None = None

    # Allow empty env strings for optional fields
    @field_validator("log_file", mode="before")
    @classmethod
    def _empty_to_none(cls, v):
        if v in ("", None, "null", "None"):
            return None
        return v


settings = Settings()
