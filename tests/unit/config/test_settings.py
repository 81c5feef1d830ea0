# tests/unit/config/test_settings.py
"""Tests for config/settings.py: typed Settings and validation rules."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from realtycrm.config.settings import ConfigurationError, Settings, load_settings


class TestSettingsDefaults:
    def test_default_backend(self):
        s = Settings(_env_file=None)
        assert s.actor_backend == "http"
        assert s.rpc_url == "http://localhost:4943/api/rpc"
        assert s.backend_timeout_s == 30.0

    def test_default_cache_windows(self):
        s = Settings(_env_file=None)
        assert s.default_stale_time_ms == 0
        assert s.profile_stale_time_ms == 300_000
        assert s.list_stale_time_ms == 30_000
        assert s.poll_interval_ms == 10_000
        assert s.query_retry is False

    def test_default_attendance(self):
        s = Settings(_env_file=None)
        assert s.location_timeout_ms == 15_000
        assert (s.camera_width, s.camera_height) == (640, 480)
        assert s.face_confidence_score == 95

    def test_default_portal(self):
        s = Settings(_env_file=None)
        assert s.customer_session_key == "customer_phone"
        assert s.load_timeout_ms == 15_000


class TestSettingsValidation:
    def test_http_backend_requires_url(self):
        with pytest.raises(ConfigurationError, match="BACKEND_URL"):
            Settings(_env_file=None, backend_url="  ")

    def test_rpc_path_must_be_absolute(self):
        with pytest.raises(ConfigurationError, match="BACKEND_RPC_PATH"):
            Settings(_env_file=None, backend_rpc_path="api/rpc")

    def test_timeout_must_be_positive(self):
        with pytest.raises(ConfigurationError, match="BACKEND_TIMEOUT_S"):
            Settings(_env_file=None, backend_timeout_s=0)

    def test_empty_session_key(self):
        with pytest.raises(ConfigurationError, match="CUSTOMER_SESSION_KEY"):
            Settings(_env_file=None, customer_session_key=" ")

    def test_collects_all_problems(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings(_env_file=None, backend_rpc_path="rpc", backend_timeout_s=-1)
        assert "BACKEND_RPC_PATH" in str(exc_info.value)
        assert "BACKEND_TIMEOUT_S" in str(exc_info.value)

    def test_negative_window_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, list_stale_time_ms=-1)

    def test_confidence_out_of_range(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, face_confidence_score=101)

    def test_custom_backend_name_accepted(self):
        s = Settings(_env_file=None, actor_backend="grpc")
        assert s.actor_backend == "grpc"


class TestLoadSettings:
    def test_overrides(self):
        s = load_settings(_env_file=None, backend_url="https://crm.example.com/", principal="p-1")
        assert s.rpc_url == "https://crm.example.com/api/rpc"
        assert s.principal == "p-1"

    def test_reads_env_file(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text("POLL_INTERVAL_MS=2500\nLOG_FORMAT=json\n")
        s = load_settings(_env_file=env)
        assert s.poll_interval_ms == 2500
        assert s.log_format == "json"
