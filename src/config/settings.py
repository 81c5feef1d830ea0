# src/config/settings.py
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for backend, cache, attendance, customer portal
and logging settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Backend actor ===
    actor_backend: str = "http"
    backend_url: str = "http://localhost:4943"
    backend_rpc_path: str = "/api/rpc"
    backend_timeout_s: float = 30.0
    principal: str = ""

    # === Query cache ===
    default_stale_time_ms: int = 0
    profile_stale_time_ms: int = 300_000
    list_stale_time_ms: int = 30_000
    poll_interval_ms: int = 10_000
    query_retry: bool = False

    # === Attendance ===
    location_timeout_ms: int = 15_000
    camera_width: int = 640
    camera_height: int = 480
    face_confidence_score: int = 95

    # === Dashboard ===
    load_timeout_ms: int = 15_000

    # === Customer portal ===
    customer_session_file: Path = Path("~/.realtycrm/session.json")
    customer_session_key: str = "customer_phone"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator(
        "default_stale_time_ms",
        "profile_stale_time_ms",
        "list_stale_time_ms",
        "poll_interval_ms",
        "location_timeout_ms",
        "load_timeout_ms",
    )
    @classmethod
    def validate_non_negative_window(cls, v: int) -> int:  # noqa: N805
        """Time windows are milliseconds and must be >= 0."""
        if v < 0:
            raise ValueError("time windows must be >= 0")
        return v

    @field_validator("face_confidence_score")
    @classmethod
    def validate_confidence(cls, v: int) -> int:  # noqa: N805
        if not 0 <= v <= 100:
            raise ValueError("face_confidence_score must be within 0..100")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.actor_backend == "http" and not self.backend_url.strip():
            errors.append("ACTOR_BACKEND=http requires BACKEND_URL")

        if not self.backend_rpc_path.startswith("/"):
            errors.append("BACKEND_RPC_PATH must start with '/'")

        if self.backend_timeout_s <= 0:
            errors.append("BACKEND_TIMEOUT_S must be > 0")

        if not self.customer_session_key.strip():
            errors.append("CUSTOMER_SESSION_KEY must not be empty")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def rpc_url(self) -> str:
        """Full URL of the backend RPC endpoint."""
        return self.backend_url.rstrip("/") + self.backend_rpc_path


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or CLI flags).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
