"""Companion animal profiles and the current companion selection."""

import threading
from typing import Any, Callable

from loguru import logger
from pydantic import ValidationError

from shallwewalk.core.config import settings
from shallwewalk.schemas.profile import AnimalProfile
from shallwewalk.services.storage import KeyValueStorage, read_json_list, write_json_list


class ProfileStore:
    """Persisted list of AnimalProfiles plus the in-memory companion selection.

    The selection is kept by profile id, so deleting a profile never leaves a
    selection pointing at the wrong animal.
    """

    def __init__(self, storage: KeyValueStorage, key: str | None = None) -> None:
        self._storage = storage
        self._key = key or settings.animal_profiles_key
        self._profiles: list[AnimalProfile] = []
        self._selected_ids: list[str] = []
        # Stored items that do not validate as profiles; written back untouched
        self._unparsed: list[Any] = []
        self._listeners: list[Callable[[], None]] = []
        self._lock = threading.RLock()

    @property
    def profiles(self) -> list[AnimalProfile]:
        with self._lock:
            return list(self._profiles)

    def add_listener(self, callback: Callable[[], None]) -> None:
        """Register a callback fired after profiles or the selection change."""
        self._listeners.append(callback)

    def load(self) -> list[AnimalProfile]:
        with self._lock:
            raw_items = read_json_list(self._storage, self._key)
            profiles: list[AnimalProfile] = []
            unparsed: list[Any] = []
            missing_ids = 0
            for idx, raw in enumerate(raw_items):
                try:
                    profile = AnimalProfile.model_validate(raw)
                except ValidationError as e:
                    logger.warning(f"Animal profile {idx} is invalid, keeping it untouched: {e.error_count()} error(s)")
                    unparsed.append(raw)
                    continue
                if not isinstance(raw, dict) or not raw.get("id"):
                    missing_ids += 1
                profiles.append(profile)

            self._profiles = profiles
            self._unparsed = unparsed
            known = {p.id for p in profiles}
            self._selected_ids = [i for i in self._selected_ids if i in known]
            if missing_ids:
                logger.info(f"Assigned ids to {missing_ids} animal profile(s)")
                self._persist()
        self._notify()
        return self.profiles

    def add(self, profile: AnimalProfile) -> int:
        """Append a profile and return its index."""
        with self._lock:
            self._profiles.append(profile)
            self._persist()
            index = len(self._profiles) - 1
        logger.info(f"Added animal profile {profile.name!r} at index {index}")
        self._notify()
        return index

    def update(self, index: int, profile: AnimalProfile) -> AnimalProfile:
        """Replace the profile at `index`, keeping its identity."""
        with self._lock:
            current = self._profiles[index]
            updated = profile.model_copy(update={"id": current.id})
            self._profiles[index] = updated
            self._persist()
        self._notify()
        return updated

    def delete(self, index: int) -> AnimalProfile:
        """Remove the profile at `index` and drop it from the selection."""
        with self._lock:
            removed = self._profiles.pop(index)
            self._selected_ids = [i for i in self._selected_ids if i != removed.id]
            self._persist()
        logger.info(f"Deleted animal profile {removed.name!r}")
        self._notify()
        return removed

    def select(self, index: int) -> None:
        with self._lock:
            profile_id = self._profiles[index].id
            if profile_id in self._selected_ids:
                return
            self._selected_ids.append(profile_id)
        self._notify()

    def deselect(self, index: int) -> None:
        with self._lock:
            profile_id = self._profiles[index].id
            if profile_id not in self._selected_ids:
                return
            self._selected_ids.remove(profile_id)
        self._notify()

    def toggle(self, index: int) -> bool:
        """Flip selection of the profile at `index`; returns the new state."""
        with self._lock:
            selected = self._profiles[index].id in self._selected_ids
        if selected:
            self.deselect(index)
        else:
            self.select(index)
        return not selected

    def clear_selection(self) -> None:
        with self._lock:
            self._selected_ids = []
        self._notify()

    def selected_indices(self) -> list[int]:
        """Current positions of the selected profiles, in selection order."""
        with self._lock:
            positions = {p.id: i for i, p in enumerate(self._profiles)}
            return [positions[i] for i in self._selected_ids if i in positions]

    def selected_companions(self) -> list[AnimalProfile]:
        with self._lock:
            by_id = {p.id: p for p in self._profiles}
            return [by_id[i] for i in self._selected_ids if i in by_id]

    def _persist(self) -> None:
        write_json_list(self._storage, self._key, [p.to_storage() for p in self._profiles] + list(self._unparsed))

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback()
