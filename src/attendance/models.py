# src/attendance/models.py
"""State and configuration types of the attendance capture flow."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from realtycrm.actor.models import LocationData, Time


class FlowState(str, Enum):
    IDLE = "idle"
    ACQUIRING = "acquiring"
    READY = "ready"
    CAPTURING = "capturing"
    SUBMITTING = "submitting"
    ERROR = "error"


class CameraStatus(str, Enum):
    INACTIVE = "inactive"
    STARTING = "starting"
    ACTIVE = "active"
    FAILED = "failed"


class LocationStatus(str, Enum):
    IDLE = "idle"
    LOCATING = "locating"
    RESOLVED = "resolved"
    FAILED = "failed"


class LocationFailure(str, Enum):
    """Why a position could not be acquired."""

    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"

    @property
    def message(self) -> str:
        return _LOCATION_MESSAGES[self]


_LOCATION_MESSAGES = {
    LocationFailure.PERMISSION_DENIED: (
        "Location permission denied. Please enable location access."
    ),
    LocationFailure.POSITION_UNAVAILABLE: "Location information unavailable.",
    LocationFailure.TIMEOUT: "Location request timed out.",
}


@dataclass(frozen=True)
class Position:
    """A device position fix."""

    latitude: float
    longitude: float
    accuracy: float | None
    timestamp: Time

    def to_location_data(self) -> LocationData:
        return LocationData(
            latitude=self.latitude,
            longitude=self.longitude,
            accuracy=self.accuracy,
            location_timestamp=self.timestamp,
        )


@dataclass(frozen=True)
class LocationRequest:
    high_accuracy: bool = True
    timeout_ms: int = 15_000
    maximum_age_ms: int = 0


@dataclass(frozen=True)
class CameraConfig:
    facing_mode: str = "user"
    width: int = 640
    height: int = 480
    quality: float = 0.9
