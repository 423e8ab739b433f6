import random

import pytest

from services.geo_blur import GeoPoint, distance_meters, random_offset_point


class FixedRng:
    """Returns the same value for every draw"""

    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


PARIS = GeoPoint(lon=2.3522, lat=48.8566)
LONDON = GeoPoint(lon=-0.1278, lat=51.5074)


@pytest.mark.parametrize(
    "center,radius",
    [
        (PARIS, 100),
        (PARIS, 500),
        (GeoPoint(lon=-74.006, lat=40.7128), 200),
        (GeoPoint(lon=151.2093, lat=-33.8688), 350),
        (GeoPoint(lon=0.0, lat=89.99), 500),
        (GeoPoint(lon=179.9999, lat=0.0), 500),
    ],
)
def test_offset_point_stays_within_radius(center, radius):
    rng = random.Random(7)
    for _ in range(2000):
        point = random_offset_point(center, radius, rng)
        assert point.is_valid()
        assert distance_meters(center, point) <= radius * (1 + 1e-6)


def test_offset_distance_is_uniform_over_disc_area():
    # Ten rings of equal area: ring k holds (d/r)^2 in [k/10, (k+1)/10)
    rng = random.Random(42)
    radius = 500
    samples = 10000
    buckets = [0] * 10

    for _ in range(samples):
        point = random_offset_point(PARIS, radius, rng)
        ratio = min(distance_meters(PARIS, point) / radius, 1.0)
        buckets[min(int(ratio ** 2 * 10), 9)] += 1

    expected = samples / 10
    chi_square = sum((count - expected) ** 2 / expected for count in buckets)
    # 9 degrees of freedom, p = 0.001
    assert chi_square < 27.88


def test_offset_bearing_covers_all_quadrants_evenly():
    rng = random.Random(3)
    samples = 4000
    quadrants = {(True, True): 0, (True, False): 0, (False, True): 0, (False, False): 0}

    for _ in range(samples):
        point = random_offset_point(PARIS, 300, rng)
        quadrants[(point.lat >= PARIS.lat, point.lon >= PARIS.lon)] += 1

    for count in quadrants.values():
        assert abs(count - samples / 4) < samples * 0.05


def test_longitude_wraps_across_antimeridian():
    rng = random.Random(11)
    center = GeoPoint(lon=179.9999, lat=0.0)
    points = [random_offset_point(center, 500, rng) for _ in range(500)]

    assert all(-180 <= p.lon < 180 for p in points)
    # Roughly half the disc lies east of 180 and must come back as negative longitude
    assert any(p.lon < 0 for p in points)
    assert any(p.lon > 0 for p in points)


def test_zero_draws_return_the_center():
    center = GeoPoint(lon=10.0, lat=20.0)
    point = random_offset_point(center, 250, FixedRng(0.0))

    assert point.lon == pytest.approx(10.0)
    assert point.lat == pytest.approx(20.0)


def test_center_on_antimeridian_is_normalized():
    point = random_offset_point(GeoPoint(lon=180.0, lat=0.0), 100, FixedRng(0.0))
    assert point.lon == pytest.approx(-180.0)


def test_largest_draw_stays_inside_radius():
    point = random_offset_point(PARIS, 200, FixedRng(0.999999))
    assert distance_meters(PARIS, point) <= 200


@pytest.mark.parametrize("radius", [0, -5, float("nan"), float("inf")])
def test_invalid_radius_raises(radius):
    with pytest.raises(ValueError):
        random_offset_point(PARIS, radius, random.Random(1))


@pytest.mark.parametrize(
    "center",
    [
        GeoPoint(lon=0.0, lat=91.0),
        GeoPoint(lon=-181.0, lat=0.0),
        GeoPoint(lon=float("nan"), lat=0.0),
    ],
)
def test_invalid_center_raises(center):
    with pytest.raises(ValueError):
        random_offset_point(center, 200, random.Random(1))


def test_default_rng_is_used_when_none_given():
    point = random_offset_point(PARIS, 200)
    assert distance_meters(PARIS, point) <= 200 + 1e-6


def test_distance_is_reflexive_and_symmetric():
    assert distance_meters(PARIS, PARIS) == 0
    assert distance_meters(PARIS, LONDON) == pytest.approx(distance_meters(LONDON, PARIS))


def test_distance_paris_london():
    assert distance_meters(PARIS, LONDON) == pytest.approx(343_500, rel=0.01)


def test_geojson_is_longitude_first():
    assert PARIS.to_geojson() == {"type": "Point", "coordinates": [2.3522, 48.8566]}
