# tests/unit/crm/test_load_timeout.py
"""Tests for crm/load_timeout.py."""

from __future__ import annotations

import asyncio

import pytest

from realtycrm.crm.load_timeout import LoadTimeout


class TestLoadTimeout:
    @pytest.mark.asyncio
    async def test_fires(self):
        timeout = LoadTimeout(timeout_ms=10)
        timeout.start()
        assert timeout.running
        await asyncio.wait_for(timeout.wait(), 1)
        assert timeout.timed_out
        assert not timeout.running

    @pytest.mark.asyncio
    async def test_stop_disarms(self):
        timeout = LoadTimeout(timeout_ms=10)
        timeout.start()
        timeout.stop()
        await asyncio.sleep(0.03)
        assert not timeout.timed_out

    @pytest.mark.asyncio
    async def test_reset_clears_flag(self):
        timeout = LoadTimeout(timeout_ms=5)
        timeout.start()
        await timeout.wait()
        timeout.reset()
        assert not timeout.timed_out

    @pytest.mark.asyncio
    async def test_start_rearms(self):
        timeout = LoadTimeout(timeout_ms=30)
        timeout.start()
        await asyncio.sleep(0.02)
        timeout.start()
        await asyncio.sleep(0.02)
        assert not timeout.timed_out
        await asyncio.wait_for(timeout.wait(), 1)
        assert timeout.timed_out
