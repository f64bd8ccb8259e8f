from datetime import datetime, timezone

import pytest

from modules.activity.activity_main import time_ago, describe_action, COLOR_MAP

NOW = datetime(2026, 3, 10, 12, 0, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("stamp, expected", [
    ("2026-03-10T11:59:30Z", "just now"),
    ("2026-03-10T11:59:00+00:00", "1 minute ago"),
    ("2026-03-10T11:15:00+00:00", "45 minutes ago"),
    ("2026-03-10T09:00:00", "3 hours ago"),
    ("2026-03-09T12:00:00+00:00", "1 day ago"),
    ("2026-02-01T08:00:00+00:00", "01 Feb 2026"),
])
def test_time_ago(stamp, expected):
    assert time_ago(stamp, now=NOW) == expected


def test_time_ago_handles_missing_and_garbage():
    assert time_ago(None) == "Unknown time"
    assert time_ago("2026-13-45 junk") == "2026-13-45"


def test_describe_known_action():
    emoji, label, color = describe_action("USER_DELETED")
    assert label == "User Deleted"
    assert color == COLOR_MAP["red"]


def test_describe_unknown_action_falls_back():
    emoji, label, color = describe_action("VAN_REASSIGNED")
    assert emoji == "📝"
    assert label == "Van Reassigned"
    assert color == COLOR_MAP["gray"]
