# tests/unit/notify/test_notifier.py
"""Tests for notify/notifier.py."""

from __future__ import annotations

import logging

from realtycrm.notify.notifier import CollectingNotifier, LogNotifier


class TestCollectingNotifier:
    def test_keeps_order(self):
        n = CollectingNotifier()
        n.success("Lead created successfully")
        n.error("Failed to load leads")
        assert n.items == [
            ("success", "Lead created successfully"),
            ("error", "Failed to load leads"),
        ]

    def test_filter_by_level(self):
        n = CollectingNotifier()
        n.success("a")
        n.error("b")
        n.success("c")
        assert n.messages("success") == ["a", "c"]
        assert n.messages("error") == ["b"]
        assert n.messages() == ["a", "b", "c"]

    def test_drain(self):
        n = CollectingNotifier()
        n.success("a")
        assert n.drain() == [("success", "a")]
        assert n.items == []


class TestLogNotifier:
    def test_levels(self, caplog):
        n = LogNotifier()
        with caplog.at_level(logging.INFO, logger="realtycrm.notify.notifier"):
            n.success("saved")
            n.error("failed")
        levels = {r.getMessage(): r.levelno for r in caplog.records}
        assert levels == {"saved": logging.INFO, "failed": logging.WARNING}
