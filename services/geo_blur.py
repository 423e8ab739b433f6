"""
Location blurring for photo privacy.

Computes a randomized public point within a radius of a photo's exact
location, and great-circle distances between points. Pure functions: the
only input besides the arguments is the random source, which callers may
inject (a seeded random.Random in tests, the module default otherwise).
"""

import math
import random
from dataclasses import dataclass
from typing import Optional, Protocol

# Mean Earth radius in meters
EARTH_RADIUS_METERS = 6371000.0

_default_rng = random.Random()


class RandomSource(Protocol):
    def random(self) -> float:
        """Return a float uniformly drawn from [0, 1)"""
        ...


@dataclass(frozen=True)
class GeoPoint:
    """WGS84 coordinate, longitude first (GeoJSON order)"""
    lon: float
    lat: float

    def is_valid(self) -> bool:
        return (
            math.isfinite(self.lon)
            and math.isfinite(self.lat)
            and -180 <= self.lon <= 180
            and -90 <= self.lat <= 90
        )

    def to_geojson(self) -> dict:
        return {"type": "Point", "coordinates": [self.lon, self.lat]}


def random_offset_point(
    center: GeoPoint,
    radius_meters: float,
    rng: Optional[RandomSource] = None,
) -> GeoPoint:
    """
    Draw a point uniformly (by area) from the disc of `radius_meters` around `center`.

    - bearing uniform in [0, 2π)
    - distance = sqrt(u) * radius, so density is flat over the disc area
    - destination computed on a sphere of radius EARTH_RADIUS_METERS
    - longitude normalized into [-180, 180)

    Raises ValueError for a non-positive or non-finite radius or an invalid center.
    """
    if not center.is_valid():
        raise ValueError(f"Invalid center point: {center}")
    if not math.isfinite(radius_meters) or radius_meters <= 0:
        raise ValueError(f"radius_meters must be a positive finite number, got {radius_meters}")

    rng = rng or _default_rng

    bearing = rng.random() * 2 * math.pi
    distance = math.sqrt(rng.random()) * radius_meters

    lat_rad = math.radians(center.lat)
    lon_rad = math.radians(center.lon)
    angular_distance = distance / EARTH_RADIUS_METERS

    new_lat_rad = math.asin(
        math.sin(lat_rad) * math.cos(angular_distance)
        + math.cos(lat_rad) * math.sin(angular_distance) * math.cos(bearing)
    )
    new_lon_rad = lon_rad + math.atan2(
        math.sin(bearing) * math.sin(angular_distance) * math.cos(lat_rad),
        math.cos(angular_distance) - math.sin(lat_rad) * math.sin(new_lat_rad),
    )

    new_lon = ((math.degrees(new_lon_rad) + 180) % 360) - 180
    # Float modulo can land exactly on 360 for inputs a hair below -180
    if new_lon >= 180:
        new_lon -= 360

    return GeoPoint(lon=new_lon, lat=math.degrees(new_lat_rad))


def distance_meters(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in meters (Haversine)"""
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = math.radians(b.lat - a.lat)
    dlon = math.radians(b.lon - a.lon)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_METERS * c
