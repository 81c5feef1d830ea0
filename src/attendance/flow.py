# src/attendance/flow.py
"""Check-in capture flow: camera and location acquisition, photo capture,
face verification and submission.

States::

    idle -> acquiring -> ready -> capturing -> submitting -> idle
                 |          ^         |            |
                 v          +---------+------------+   (failure)
               error  (cancel -> idle)

The camera is released on success, on cancel and on close, never while a
failed attempt can still be retried.
"""

from __future__ import annotations

import asyncio
import logging

from realtycrm.actor.errors import AttendanceStateError, ClientValidationError
from realtycrm.attendance.devices import (
    BaseCamera,
    BaseLocator,
    CameraError,
    LocationError,
)
from realtycrm.attendance.models import (
    CameraStatus,
    FlowState,
    LocationFailure,
    LocationRequest,
    LocationStatus,
    Position,
)
from realtycrm.attendance.verifier import BaseFaceVerifier, StubFaceVerifier
from realtycrm.config.settings import Settings
from realtycrm.crm.attendance import AttendanceOperations
from realtycrm.notify.notifier import BaseNotifier

logger = logging.getLogger(__name__)

LOCATION_NOT_AVAILABLE = (
    "Location not available. Please enable location services and try again."
)
CAMERA_NOT_ACTIVE = "Camera not active. Please wait for camera to start."
CAPTURE_FAILED = "Failed to capture photo. Please try again."

_BUSY_STATES = (FlowState.ACQUIRING, FlowState.CAPTURING, FlowState.SUBMITTING)


class CheckInFlow:
    """One agent's check-in session.

    Args:
        attendance: Attendance operations bound to the caller's session.
        camera: Camera capability.
        locator: Geolocation capability.
        verifier: Face verifier (defaults to the stub).
        notifier: Toast sink (defaults to the session notifier).
        settings: Source of the location timeout and confidence score.
    """

    def __init__(
        self,
        attendance: AttendanceOperations,
        camera: BaseCamera,
        locator: BaseLocator,
        verifier: BaseFaceVerifier | None = None,
        notifier: BaseNotifier | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._attendance = attendance
        self._camera = camera
        self._locator = locator
        self._settings = settings or attendance.ctx.settings
        self._verifier = verifier or StubFaceVerifier(
            self._settings.face_confidence_score
        )
        self._notifier = notifier or attendance.ctx.notifier
        self._location_request = LocationRequest(
            timeout_ms=self._settings.location_timeout_ms
        )

        self.state = FlowState.IDLE
        self.camera_status = CameraStatus.INACTIVE
        self.location_status = LocationStatus.IDLE
        self.position: Position | None = None
        self.location_failure: LocationFailure | None = None
        self.error: str | None = None

    async def __aenter__(self) -> CheckInFlow:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # --- Acquisition ---

    async def start(self) -> FlowState:
        """Acquire camera and location concurrently.

        Returns:
            ``ready`` when both succeeded, ``error`` otherwise.

        Raises:
            AttendanceStateError: If the caller already has an open check-in.
            ClientValidationError: If an attempt is already in progress.
        """
        if self.state in _BUSY_STATES:
            raise ClientValidationError("Check-in already in progress")
        if await self._attendance.has_active_check_in():
            raise AttendanceStateError("Already checked in")
        if self.state != FlowState.IDLE:
            await self.cancel()

        self.position = None
        self.location_failure = None
        self.error = None
        self.state = FlowState.ACQUIRING
        await asyncio.gather(self._start_camera(), self._acquire_location())

        if self.camera_status != CameraStatus.ACTIVE:
            self.state = FlowState.ERROR
        elif self.location_status != LocationStatus.RESOLVED:
            self.state = FlowState.ERROR
            self.error = self.location_failure.message if self.location_failure else None
        else:
            self.state = FlowState.READY
        logger.info("Check-in acquisition finished: %s", self.state.value)
        return self.state

    async def _start_camera(self) -> None:
        self.camera_status = CameraStatus.STARTING
        try:
            await self._camera.start()
        except CameraError as exc:
            self.camera_status = CameraStatus.FAILED
            self.error = f"Camera Error: {exc}"
            logger.warning("Camera failed to start: %s", exc)
            return
        self.camera_status = CameraStatus.ACTIVE

    async def _acquire_location(self) -> None:
        self.location_status = LocationStatus.LOCATING
        timeout_s = self._location_request.timeout_ms / 1000
        try:
            position = await asyncio.wait_for(
                self._locator.locate(self._location_request), timeout_s
            )
        except asyncio.TimeoutError:
            self._fail_location(LocationFailure.TIMEOUT)
        except LocationError as exc:
            self._fail_location(exc.failure)
        else:
            self.position = position
            self.location_status = LocationStatus.RESOLVED

    def _fail_location(self, failure: LocationFailure) -> None:
        self.location_failure = failure
        self.location_status = LocationStatus.FAILED
        logger.warning("Location acquisition failed: %s", failure.value)

    # --- Capture ---

    async def capture_and_submit(self) -> int:
        """Capture a photo, verify it and record the check-in.

        Returns:
            Id of the new attendance record.

        Raises:
            ClientValidationError: If the flow is not ready, the camera is
                not active, no position is resolved or the camera failed to
                return a photo. Nothing is sent to the backend in these cases.
            Exception: Whatever verification or the check-in write raised;
                the flow stays ready for another attempt.
        """
        if self.state != FlowState.READY:
            raise ClientValidationError("Check-in is not ready")
        if self.position is None:
            self._reject(LOCATION_NOT_AVAILABLE)
        if not self._camera.is_active:
            self._reject(CAMERA_NOT_ACTIVE)

        self.state = FlowState.CAPTURING
        try:
            photo = await self._camera.capture()
        except Exception as exc:
            logger.warning("Photo capture failed: %s", exc)
            self.state = FlowState.READY
            self._reject(CAPTURE_FAILED)
        if not photo:
            self.state = FlowState.READY
            self._reject(CAPTURE_FAILED)

        try:
            verification = await self._verifier.verify(photo)
        except Exception as exc:
            self.error = str(exc)
            self.state = FlowState.READY
            raise
        self.state = FlowState.SUBMITTING
        try:
            record_id = await self._attendance.mark_attendance(
                verification, self.position.to_location_data()
            )
        except Exception as exc:
            self.error = str(exc)
            self.state = FlowState.READY
            raise

        await self._camera.stop()
        self._reset()
        return record_id

    def _reject(self, message: str) -> None:
        self.error = message
        self._notifier.error(message)
        raise ClientValidationError(message)

    # --- Teardown ---

    async def cancel(self) -> None:
        """Release the camera and return to idle."""
        if self._camera.is_active:
            await self._camera.stop()
        self._reset()

    async def close(self) -> None:
        await self.cancel()

    def _reset(self) -> None:
        self.state = FlowState.IDLE
        self.camera_status = CameraStatus.INACTIVE
        self.location_status = LocationStatus.IDLE
        self.position = None
        self.location_failure = None
        self.error = None

    # --- Check-out ---

    async def check_out(self) -> int:
        """Close the caller's open attendance record."""
        return await self._attendance.mark_check_out()
