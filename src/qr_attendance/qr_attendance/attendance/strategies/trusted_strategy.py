from __future__ import annotations

from typing import Optional

from ...common.geo import GeoFence, GeoPoint
from ...core.enums import AttendanceStatus
from .base import LocationStrategy, StatusDecision


class TrustedLocationStrategy(LocationStrategy):
    """Inside the geofence, or no usable location to check."""

    def decide(self, *, location: Optional[GeoPoint], fence: Optional[GeoFence]) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.VALID)
