# src/attendance/devices.py
"""Camera and location capabilities used by the check-in flow.

Real device access lives outside this package; the concrete classes here
serve a fixed photo and a fixed position, for the CLI and for tests.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from realtycrm.actor.models import now_ns
from realtycrm.attendance.models import (
    CameraConfig,
    LocationFailure,
    LocationRequest,
    Position,
)

logger = logging.getLogger(__name__)


class CameraError(Exception):
    """The camera could not be started."""


class LocationError(Exception):
    """A position could not be acquired."""

    def __init__(self, failure: LocationFailure) -> None:
        super().__init__(failure.message)
        self.failure = failure


class BaseCamera(ABC):
    """A front-facing camera producing still photos."""

    def __init__(self, config: CameraConfig | None = None) -> None:
        self.config = config or CameraConfig()

    @property
    @abstractmethod
    def is_active(self) -> bool:
        """True between a successful start and stop."""

    @abstractmethod
    async def start(self) -> None:
        """Acquire the camera.

        Raises:
            CameraError: If the camera is unavailable or access is denied.
        """

    @abstractmethod
    async def stop(self) -> None:
        """Release the camera. Safe to call when inactive."""

    @abstractmethod
    async def capture(self) -> bytes | None:
        """Encoded still photo, or None when no frame is available."""


class BaseLocator(ABC):
    """Device geolocation."""

    @abstractmethod
    async def locate(self, request: LocationRequest) -> Position:
        """Acquire one position fix.

        Raises:
            LocationError: With the reason acquisition failed.
        """


class StaticPhotoCamera(BaseCamera):
    """Camera that serves a fixed photo from bytes or a file."""

    def __init__(
        self,
        photo: bytes | str | Path | None,
        config: CameraConfig | None = None,
    ) -> None:
        super().__init__(config)
        self._photo = photo
        self._active = False

    @property
    def is_active(self) -> bool:
        return self._active

    async def start(self) -> None:
        if isinstance(self._photo, (str, Path)):
            path = Path(self._photo)
            if not path.is_file():
                raise CameraError(f"Photo file not found: {path}")
            self._photo = path.read_bytes()
        self._active = True
        logger.debug(
            "Camera started (%s, %dx%d)",
            self.config.facing_mode, self.config.width, self.config.height,
        )

    async def stop(self) -> None:
        if self._active:
            logger.debug("Camera stopped")
        self._active = False

    async def capture(self) -> bytes | None:
        if not self._active or not self._photo:
            return None
        return bytes(self._photo)


class FixedLocator(BaseLocator):
    """Locator reporting a fixed position, or a fixed failure."""

    def __init__(
        self,
        latitude: float = 0.0,
        longitude: float = 0.0,
        accuracy: float | None = None,
        failure: LocationFailure | None = None,
    ) -> None:
        self.latitude = latitude
        self.longitude = longitude
        self.accuracy = accuracy
        self.failure = failure

    async def locate(self, request: LocationRequest) -> Position:
        if self.failure is not None:
            raise LocationError(self.failure)
        return Position(
            latitude=self.latitude,
            longitude=self.longitude,
            accuracy=self.accuracy,
            timestamp=now_ns(),
        )
