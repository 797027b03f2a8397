import json

import pytest
from pydantic import ValidationError

from conftest import make_profile
from shallwewalk.schemas.activity import ActivityLevel
from shallwewalk.schemas.profile import AnimalProfile
from shallwewalk.services.profiles import ProfileStore
from shallwewalk.services.storage import InMemoryKeyValueStorage

KEY = "dogProfiles"


def names(profiles):
    return [p.name for p in profiles]


def test_deleting_profile_keeps_selection_by_identity(storage):
    store = ProfileStore(storage)
    for name in ["A", "B", "C"]:
        store.add(make_profile(name))
    store.select(0)
    store.select(2)

    store.delete(1)

    assert names(store.profiles) == ["A", "C"]
    assert store.selected_indices() == [0, 1]
    assert names(store.selected_companions()) == ["A", "C"]


def test_deleting_selected_profile_drops_it_from_selection(storage):
    store = ProfileStore(storage)
    for name in ["A", "B", "C"]:
        store.add(make_profile(name))
    store.select(1)
    store.select(2)

    store.delete(1)

    assert store.selected_indices() == [1]
    assert names(store.selected_companions()) == ["C"]


def test_toggle_and_clear(storage):
    store = ProfileStore(storage)
    store.add(make_profile("A"))
    assert store.toggle(0) is True
    assert store.selected_indices() == [0]
    assert store.toggle(0) is False
    assert store.selected_indices() == []
    store.select(0)
    store.clear_selection()
    assert store.selected_companions() == []


def test_update_keeps_identity_and_selection(storage):
    store = ProfileStore(storage)
    store.add(make_profile("A", weight_kg=5.0))
    store.select(0)

    store.update(0, make_profile("A", weight_kg=6.5))

    assert store.selected_companions()[0].weight_kg == 6.5


def test_persists_with_app_keys(storage):
    store = ProfileStore(storage)
    store.add(make_profile("Bori", weight_kg=7.2, age_years=4, activity_level=ActivityLevel.high))

    saved = json.loads(storage.get(KEY))
    assert saved[0]["name"] == "Bori"
    assert saved[0]["weight"] == 7.2
    assert saved[0]["age"] == 4
    assert saved[0]["activityLevel"] == "high"
    assert saved[0]["id"]
    assert "avatarUri" not in saved[0]


def test_load_assigns_missing_ids_and_hides_invalid():
    raw = [
        {"name": "Bori", "weight": 7.2, "age": 4, "breed": "말티즈", "activityLevel": "low"},
        {"name": "", "weight": 3, "age": 1},
        {"name": "Coco", "weight": -1, "age": 2},
        "junk",
        {"id": "abc", "name": "Nabi", "weightKg": 12, "ageYears": 6, "breed": ""},
    ]
    storage = InMemoryKeyValueStorage({KEY: json.dumps(raw, ensure_ascii=False)})
    store = ProfileStore(storage)
    profiles = store.load()

    assert names(profiles) == ["Bori", "Nabi"]
    assert profiles[1].id == "abc"
    assert profiles[1].breed == "믹스견"
    assert profiles[1].activity_level is ActivityLevel.medium
    saved = json.loads(storage.get(KEY))
    assert all(p["id"] for p in saved[:2])

    # ids are stable once assigned
    writes = storage.writes
    reloaded = ProfileStore(storage).load()
    assert [p.id for p in reloaded] == [p["id"] for p in saved[:2]]
    assert storage.writes == writes


def test_listeners_fire_on_changes(storage):
    store = ProfileStore(storage)
    calls = []
    store.add_listener(lambda: calls.append(1))
    store.add(make_profile("A"))
    store.select(0)
    store.delete(0)
    assert len(calls) == 3


def test_profile_validation():
    with pytest.raises(ValidationError):
        AnimalProfile(name="  ", weight_kg=3, age_years=1)
    with pytest.raises(ValidationError):
        AnimalProfile(name="A", weight_kg=0, age_years=1)
    assert AnimalProfile(name=" Bori ", weight_kg=3, age_years=1).name == "Bori"


def test_invalid_profiles_survive_writes():
    raw = [
        {"name": "Bori", "weight": 7.5, "age": 3, "breed": "말티즈", "activityLevel": "medium"},
        {"name": "Coco", "weight": None, "age": 2, "breed": "푸들", "activityLevel": "high"},
    ]
    storage = InMemoryKeyValueStorage({KEY: json.dumps(raw, ensure_ascii=False)})
    store = ProfileStore(storage)
    assert names(store.load()) == ["Bori"]

    # load() assigned Bori an id and wrote the list back
    saved = json.loads(storage.get(KEY))
    assert [p["name"] for p in saved] == ["Bori", "Coco"]
    assert saved[1] == raw[1]

    store.add(make_profile("Nabi"))
    store.delete(0)
    saved = json.loads(storage.get(KEY))
    assert [p["name"] for p in saved] == ["Nabi", "Coco"]
    assert saved[1] == raw[1]
