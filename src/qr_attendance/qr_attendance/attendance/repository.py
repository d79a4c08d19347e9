from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence

from .model import AttendanceRecord, HistoryFilter, NewScan


class AttendanceRepository(Protocol):
    def append_scan(self, scan: NewScan) -> AttendanceRecord:
        """Insert the next record for ``scan.user_id``.

        The record type follows the alternation rule
        (``AttendanceType.after(previous)``). Reading the previous type and
        inserting must happen atomically per user.
        """

        raise NotImplementedError

    def get_history(self, user_id: int, filters: HistoryFilter) -> Sequence[AttendanceRecord]:
        """Newest first."""

        raise NotImplementedError

    def list_between(
        self,
        *,
        start: datetime,
        end: datetime,
        user_ids: Optional[Iterable[int]] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records with ``start <= timestamp <= end``, oldest first."""

        raise NotImplementedError
