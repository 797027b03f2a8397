import math

import pytest

from shallwewalk.core.geo import distance_km, haversine_km, is_finite_coordinate, path_length_km
from shallwewalk.schemas.geo import Coordinate

POINTS = [
    Coordinate(latitude=37.5665, longitude=126.9780),
    Coordinate(latitude=35.1796, longitude=129.0756),
    Coordinate(latitude=-33.8688, longitude=151.2093),
    Coordinate(latitude=0.0, longitude=179.9999),
    Coordinate(latitude=0.0, longitude=-179.9999),
]


@pytest.mark.parametrize("a", POINTS)
def test_distance_to_self_is_zero(a):
    assert distance_km(a, a) == 0.0


@pytest.mark.parametrize("a", POINTS)
@pytest.mark.parametrize("b", POINTS)
def test_distance_is_symmetric(a, b):
    assert distance_km(a, b) == pytest.approx(distance_km(b, a))
    assert distance_km(a, b) >= 0


def test_one_thousandth_degree_latitude():
    d = haversine_km(37.0, 127.0, 37.001, 127.0)
    assert d == pytest.approx(0.1112, abs=1e-3)


def test_near_identical_points_do_not_produce_nan():
    d = haversine_km(37.0, 127.0, 37.0 + 1e-12, 127.0 + 1e-12)
    assert not math.isnan(d)
    assert d == pytest.approx(0.0, abs=1e-6)


def test_antipodal_points_are_half_circumference():
    d = haversine_km(0.0, 0.0, 0.0, 180.0)
    assert d == pytest.approx(math.pi * 6371.0)


def test_path_length_sums_consecutive_pairs():
    path = [
        Coordinate(latitude=37.0, longitude=127.0),
        Coordinate(latitude=37.001, longitude=127.0),
        Coordinate(latitude=37.002, longitude=127.0),
    ]
    assert path_length_km(path) == pytest.approx(2 * distance_km(path[0], path[1]), rel=1e-6)
    assert path_length_km(path[:1]) == 0.0
    assert path_length_km([]) == 0.0


def test_is_finite_coordinate():
    assert is_finite_coordinate(37.0, 127.0)
    assert not is_finite_coordinate(float("nan"), 127.0)
    assert not is_finite_coordinate(37.0, float("inf"))
