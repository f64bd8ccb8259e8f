from types import SimpleNamespace

import pytest

from anchors.supabase_client import StoreError, safe_exec, error_message, is_transient


class FlakyQuery:
    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    def execute(self):
        self.calls += 1
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return SimpleNamespace(data=outcome)


def test_returns_data_list():
    assert safe_exec(FlakyQuery([{"id": 1}])) == [{"id": 1}]


def test_none_data_becomes_empty_list():
    assert safe_exec(FlakyQuery(None)) == []


def test_transient_errors_are_retried_with_backoff():
    sleeps = []
    q = FlakyQuery(OSError("[Errno 11] Resource temporarily unavailable"),
                   OSError("connection reset by peer"),
                   [{"id": 7}])

    assert safe_exec(q, sleep=sleeps.append) == [{"id": 7}]
    assert q.calls == 3
    assert sleeps == [0.5, 1.5]


def test_transient_errors_give_up_after_three_attempts():
    sleeps = []
    q = FlakyQuery(*[OSError("read timed out")] * 3)

    with pytest.raises(StoreError) as exc:
        safe_exec(q, "Error loading users", sleep=sleeps.append)

    assert q.calls == 3
    assert len(sleeps) == 2
    assert exc.value.message == "Error loading users: read timed out"


def test_permanent_error_is_not_retried():
    q = FlakyQuery(ValueError("permission denied for table users"))

    with pytest.raises(StoreError) as exc:
        safe_exec(q, "Error deleting user", sleep=lambda s: pytest.fail("slept"))

    assert q.calls == 1
    assert isinstance(exc.value.cause, ValueError)
    assert "permission denied" in str(exc.value)


def test_error_message_prefers_message_attribute():
    class ApiError(Exception):
        message = "duplicate key value"

    assert error_message(ApiError("{'code': '23505'}")) == "duplicate key value"
    assert error_message(StoreError("offline")) == "offline"
    assert error_message(RuntimeError()) == "RuntimeError"


def test_is_transient():
    assert is_transient(OSError("SSL: UNEXPECTED_EOF"))
    assert not is_transient(ValueError("invalid input syntax"))


def test_retry_disabled_sends_query_once():
    q = FlakyQuery(OSError("ReadTimeout: timed out"), [])

    with pytest.raises(StoreError):
        safe_exec(q, "Error deleting user", sleep=lambda s: pytest.fail("slept"), retry=False)

    assert q.calls == 1
