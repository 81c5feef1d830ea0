# src/attendance/checkout.py
"""How a check-out reaches the backend.

The backend has no partial update for attendance, so the default writer
resubmits the whole open record with its check-out time set. A dedicated
check-out call would be a new :class:`BaseCheckOutWriter`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from realtycrm.actor.base_actor import BaseActorClient
from realtycrm.actor.models import AttendanceRecord, Time

logger = logging.getLogger(__name__)


class BaseCheckOutWriter(ABC):
    """Closes an open attendance record on the backend."""

    @abstractmethod
    async def write(
        self, actor: BaseActorClient, record: AttendanceRecord, check_out_time: Time
    ) -> int:
        """Persist the check-out and return the record id."""


class ResubmitCheckOutWriter(BaseCheckOutWriter):
    """Resubmits the full record through ``record_attendance``."""

    async def write(
        self, actor: BaseActorClient, record: AttendanceRecord, check_out_time: Time
    ) -> int:
        closed = record.model_copy(update={"check_out_time": check_out_time})
        logger.debug("Resubmitting attendance record %d with check-out", record.id)
        return await actor.record_attendance(closed)
