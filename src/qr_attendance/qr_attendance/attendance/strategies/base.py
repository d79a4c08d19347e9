from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ...common.geo import GeoFence, GeoPoint
from ...core.enums import AttendanceStatus


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    note: Optional[str] = None


class LocationStrategy(ABC):
    """Strategy Pattern: encapsulate how a scan's validity status is decided."""

    @abstractmethod
    def decide(self, *, location: Optional[GeoPoint], fence: Optional[GeoFence]) -> StatusDecision:
        raise NotImplementedError
