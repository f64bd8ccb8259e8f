import pytest
import streamlit as st

from anchors import notifier


def test_notify_queues_until_flushed(monkeypatch):
    shown = []
    monkeypatch.setattr(st, "toast", lambda message, icon=None: shown.append((message, icon)))

    notifier.notify("success", "User Jane created successfully")
    notifier.notify("error", "Failed to delete Bob: offline")

    assert notifier.pending_notifications() == [
        ("success", "User Jane created successfully"),
        ("error", "Failed to delete Bob: offline"),
    ]
    assert shown == []

    notifier.flush_notifications()

    assert shown == [
        ("User Jane created successfully", "✅"),
        ("Failed to delete Bob: offline", "❌"),
    ]
    assert notifier.pending_notifications() == []


def test_flush_with_empty_queue_shows_nothing(monkeypatch):
    shown = []
    monkeypatch.setattr(st, "toast", lambda message, icon=None: shown.append(message))
    notifier.flush_notifications()
    assert shown == []


def test_unknown_kind_rejected():
    with pytest.raises(ValueError):
        notifier.notify("celebration", "hi")


def test_refresh_request_is_consumed_once():
    assert notifier.consume_refresh("users") is False

    notifier.request_refresh("users")
    notifier.request_refresh("users")

    assert notifier.consume_refresh("teams") is False
    assert notifier.consume_refresh("users") is True
    assert notifier.consume_refresh("users") is False
