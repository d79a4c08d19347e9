from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..common.geo import GeoFence, GeoPoint
from .strategies.base import LocationStrategy
from .strategies.outside_fence_strategy import OutsideFenceStrategy
from .strategies.trusted_strategy import TrustedLocationStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_scan(self, *, location: Optional[GeoPoint], fence: Optional[GeoFence]) -> LocationStrategy:
        if location is None or fence is None:
            return TrustedLocationStrategy()

        if fence.contains(location):
            return TrustedLocationStrategy()
        return OutsideFenceStrategy()
