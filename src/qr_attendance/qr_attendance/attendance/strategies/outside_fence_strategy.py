from __future__ import annotations

from typing import Optional

from ...common.geo import GeoFence, GeoPoint
from ...core.constants import OUTSIDE_RADIUS_NOTE
from ...core.enums import AttendanceStatus
from .base import LocationStrategy, StatusDecision


class OutsideFenceStrategy(LocationStrategy):
    """Reported location is beyond the allowed radius around the office."""

    def decide(self, *, location: Optional[GeoPoint], fence: Optional[GeoFence]) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.SUSPICIOUS, note=OUTSIDE_RADIUS_NOTE)
