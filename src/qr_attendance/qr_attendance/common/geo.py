"""Geofence helpers.

Distances use the Haversine formula on a spherical Earth, which is accurate to
well under a metre at office-radius scale.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..core.constants import EARTH_RADIUS_METERS


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> Optional["GeoPoint"]:
        """Build a point from a ``{latitude, longitude}`` payload.

        Returns None when either coordinate is missing or not numeric.
        """
        if not data:
            return None
        lat = data.get("latitude")
        lng = data.get("longitude")
        if lat is None or lng is None or isinstance(lat, bool) or isinstance(lng, bool):
            return None
        try:
            return cls(latitude=float(lat), longitude=float(lng))
        except (TypeError, ValueError):
            return None

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude}


def distance_meters(a: GeoPoint, b: GeoPoint) -> float:
    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    d_phi = math.radians(b.latitude - a.latitude)
    d_lambda = math.radians(b.longitude - a.longitude)

    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return EARTH_RADIUS_METERS * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def is_within_radius(point: Optional[Any], center: GeoPoint, max_meters: float) -> bool:
    """False for a missing point or one lacking latitude/longitude."""
    if point is None:
        return False
    if not isinstance(point, GeoPoint):
        point = GeoPoint.from_mapping(point)
        if point is None:
            return False
    return distance_meters(point, center) <= max_meters


@dataclass(frozen=True)
class GeoFence:
    center: GeoPoint
    max_distance_meters: float

    def contains(self, point: Optional[Any]) -> bool:
        return is_within_radius(point, self.center, self.max_distance_meters)
