import pytest

from conftest import make_profile
from shallwewalk.core import energy
from shallwewalk.schemas.activity import ActivityKind, ActivityLevel


def test_human_kcal_uses_rate_per_kind():
    assert energy.human_kcal(ActivityKind.run, 1.0) == 700
    assert energy.human_kcal(ActivityKind.walk, 1.0) == 280
    assert energy.human_kcal(ActivityKind.run, 600 / 3600) == 117
    assert energy.human_kcal(ActivityKind.walk, 0) == 0


@pytest.mark.parametrize("hours", [0.01, 0.25, 1.0, 3.5])
def test_run_burns_more_than_walk(hours):
    assert energy.human_kcal(ActivityKind.run, hours) > energy.human_kcal(ActivityKind.walk, hours)


def test_animal_kcal_reference_values():
    bori = make_profile("Bori", weight_kg=10.0, activity_level=ActivityLevel.medium, breed="믹스견")
    # 70 * 10^0.75 * 1.4 / 24 = 22.96 kcal/h before intensity
    assert energy.animal_kcal(bori, 1.0, 5.0, ActivityKind.walk) == 20
    assert energy.animal_kcal(bori, 1.0, 5.0, ActivityKind.run) == 29


def test_animal_kcal_monotonic_in_weight():
    previous = -1
    for weight in [1.5, 3, 5, 8, 12, 20, 35, 60]:
        kcal = energy.animal_kcal(make_profile(weight_kg=weight), 0.75, 3.0, ActivityKind.walk)
        assert kcal >= previous
        previous = kcal


def test_animal_kcal_monotonic_in_hours_at_fixed_speed():
    speed = 6.0
    previous = -1
    for hours in [0.1, 0.25, 0.5, 1.0, 2.0]:
        kcal = energy.animal_kcal(make_profile(), hours, speed * hours, ActivityKind.run)
        assert kcal >= previous
        previous = kcal


def test_average_speed_defaults_and_cap():
    assert energy.average_speed_kmh(3.0, 0) == energy.DEFAULT_SPEED_KMH
    assert energy.average_speed_kmh(100.0, 1.0) == energy.MAX_SPEED_KMH
    assert energy.average_speed_kmh(4.0, 1.0) == pytest.approx(4.0)
    assert energy.average_speed_kmh(0.0, 1.0) == 0.0


def test_breed_multiplier_lookup():
    assert energy.breed_multiplier("허스키") == 1.5
    assert energy.breed_multiplier("Husky") == 1.5
    assert energy.breed_multiplier("치와와") == 0.8
    assert energy.breed_multiplier("unknown breed") == 1.0
    assert energy.breed_multiplier("") == 1.0
    assert energy.breed_multiplier(None) == 1.0


def test_activity_level_scales_energy():
    low = make_profile(activity_level=ActivityLevel.low)
    high = make_profile(activity_level=ActivityLevel.high)
    assert energy.animal_kcal(high, 1.0, 5.0, ActivityKind.walk) > energy.animal_kcal(low, 1.0, 5.0, ActivityKind.walk)


def test_no_companions_total_is_zero():
    assert energy.companion_kcal_total([], 1.0, 5.0, ActivityKind.run) == 0


def test_companion_total_sums_each_animal():
    a = make_profile("A", weight_kg=5.0)
    b = make_profile("B", weight_kg=25.0, breed="보더 콜리")
    total = energy.companion_kcal_total([a, b], 0.5, 2.5, ActivityKind.walk)
    assert total == energy.animal_kcal(a, 0.5, 2.5, ActivityKind.walk) + energy.animal_kcal(b, 0.5, 2.5, ActivityKind.walk)


def test_round_half_up():
    assert energy.round_half_up(0.5) == 1
    assert energy.round_half_up(2.5) == 3
    assert energy.round_half_up(2.4999) == 2
