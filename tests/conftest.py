from pathlib import Path
import sys

import pytest
import streamlit as st


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


class _SessionState(dict):
    """Plain dict with attribute access, standing in for ``st.session_state``."""

    def __getattr__(self, name):
        try:
            return self[name]
        except KeyError as exc:
            raise AttributeError(name) from exc

    def __setattr__(self, name, value):
        self[name] = value


@pytest.fixture(autouse=True)
def _stub_streamlit_session_state(monkeypatch):
    """Replace Streamlit's runtime-bound session state with a plain dictionary."""

    monkeypatch.setattr(st, "session_state", _SessionState(), raising=False)
    yield


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


class Recorder:
    """Collects notify(kind, message) calls."""

    def __init__(self):
        self.calls = []

    def __call__(self, kind, message):
        self.calls.append((kind, message))

    @property
    def kinds(self):
        return [k for k, _ in self.calls]


@pytest.fixture
def notes():
    return Recorder()
