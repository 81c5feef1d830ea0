# src/crm/attendance.py
"""Attendance reads, check-in and check-out."""

from __future__ import annotations

import logging

from realtycrm.actor.base_actor import BaseActorClient
from realtycrm.actor.errors import AttendanceStateError, NotFoundError, UnauthorizedError
from realtycrm.actor.models import (
    AttendanceRecord,
    CsvReport,
    FaceVerificationResult,
    LocationData,
    PaginatedAttendanceRecords,
    Principal,
    now_ns,
)
from realtycrm.attendance.checkout import BaseCheckOutWriter, ResubmitCheckOutWriter
from realtycrm.cache import keys as k
from realtycrm.crm.base import ResourceBase, fallback
from realtycrm.crm.context import CrmContext

logger = logging.getLogger(__name__)


def latest_record(records: list[AttendanceRecord]) -> AttendanceRecord | None:
    """Most recent record by check-in time.

    Records sharing a check-in time (a check-out stored as a new record)
    resolve to the one returned last.
    """
    if not records:
        return None
    _, latest = max(enumerate(records), key=lambda pair: (pair[1].check_in_time, pair[0]))
    return latest


class AttendanceOperations(ResourceBase):
    """Attendance operations of the caller and the admin report views."""

    def __init__(
        self, ctx: CrmContext, checkout_writer: BaseCheckOutWriter | None = None
    ) -> None:
        super().__init__(ctx)
        self._checkout_writer = checkout_writer or ResubmitCheckOutWriter()

    # --- Reads ---

    async def get_caller_attendance_records(self) -> list[AttendanceRecord]:
        principal = self._caller_principal()
        return await self._query(
            (k.ATTENDANCE_RECORDS, "agent", principal),
            lambda actor: actor.get_attendance_records(principal),
            default=[],
            policy=fallback("Failed to load attendance records"),
            enabled=bool(principal),
        )

    async def get_caller_latest_attendance(self) -> AttendanceRecord | None:
        return latest_record(await self.get_caller_attendance_records())

    async def has_active_check_in(self) -> bool:
        latest = await self.get_caller_latest_attendance()
        return latest is not None and latest.is_open

    async def get_all_attendance_records_paginated(
        self, page_index: int, page_size: int
    ) -> PaginatedAttendanceRecords:
        return await self._query(
            (k.ATTENDANCE_RECORDS, "paginated", page_index, page_size),
            lambda actor: actor.get_all_attendance_records(page_index, page_size),
            default=PaginatedAttendanceRecords.empty(),
            policy=fallback("Failed to load attendance records"),
            stale_time_ms=self._settings.list_stale_time_ms,
        )

    async def get_attendance_csv_report(self, agent_id: Principal | None) -> CsvReport | None:
        return await self._query(
            (k.ATTENDANCE_CSV_REPORT, agent_id),
            lambda actor: actor.get_attendance_records_csv_report(agent_id),
            default=None,
            policy=fallback("Failed to generate attendance report"),
            enabled=bool(agent_id),
        )

    async def download_attendance_report(self, agent_id: Principal) -> CsvReport:
        """Fetch a fresh report for export, bypassing the cache."""
        report = await self._mutate(
            "download_attendance_report",
            lambda actor: actor.get_attendance_records_csv_report(agent_id),
            error="Failed to download report",
            invalidate=(),
        )
        self.ctx.notifier.success(f"Report downloaded for {report.agent_name}")
        return report

    # --- Writes ---

    async def record_attendance(self, record: AttendanceRecord) -> int:
        return await self._mutate(
            "record_attendance",
            lambda actor: actor.record_attendance(record),
            success="Attendance recorded successfully",
            error="Failed to record attendance",
        )

    async def mark_attendance(
        self, face_verification: FaceVerificationResult, location: LocationData
    ) -> int:
        """Submit a new open record for the caller; returns its id.

        Raises:
            NotFoundError: If the caller has no user profile.
        """

        async def write(actor: BaseActorClient) -> int:
            principal = self._agent_principal(actor)
            profile = await actor.get_caller_user_profile()
            if profile is None:
                raise NotFoundError("User profile not found")
            record = AttendanceRecord(
                agent_id=principal,
                agent_name=profile.name,
                agent_mobile=profile.contact_number or "",
                check_in_time=now_ns(),
                face_verification=face_verification,
                location=location,
                is_valid=True,
            )
            return await actor.record_attendance(record)

        return await self._mutate(
            "record_attendance",
            write,
            success="Check-in recorded successfully",
            error="Failed to record check-in",
        )

    async def mark_check_out(self) -> int:
        """Close the caller's latest record.

        The records are read from the backend, not the cache, so the check
        sees the current state.

        Raises:
            AttendanceStateError: If there is no record or the latest one is
                already closed.
        """

        async def write(actor: BaseActorClient) -> int:
            principal = self._agent_principal(actor)
            latest = latest_record(await actor.get_attendance_records(principal))
            if latest is None:
                raise AttendanceStateError("No active check-in found")
            if not latest.is_open:
                raise AttendanceStateError("Already checked out")
            return await self._checkout_writer.write(actor, latest, now_ns())

        return await self._mutate(
            "record_attendance",
            write,
            success="Check-out recorded successfully",
            error="Failed to record check-out",
        )

    def _agent_principal(self, actor: BaseActorClient) -> Principal:
        principal = self._caller_principal() or actor.principal
        if not principal:
            raise UnauthorizedError("Not authenticated")
        return principal
