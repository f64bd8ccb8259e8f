"""
Notifier: transient toast messages and refresh requests.

Messages are queued in session state so they survive st.rerun() and are
shown once by flush_notifications() at the top of the next script run.
Controllers receive notify() as a plain callable rather than importing
Streamlit themselves.
"""

import logging
import streamlit as st

log = logging.getLogger(__name__)

_QUEUE_KEY = "_notify_queue"
_REFRESH_KEY = "_refresh_requests"

KINDS = {
    "success": "✅",
    "error":   "❌",
    "info":    "ℹ️",
    "warning": "⚠️",
}


def notify(kind, message):
    if kind not in KINDS:
        raise ValueError(f"Unknown notification kind: {kind}")
    if kind == "error":
        log.warning("notify error: %s", message)
    else:
        log.info("notify %s: %s", kind, message)
    st.session_state.setdefault(_QUEUE_KEY, []).append((kind, message))


def pending_notifications():
    return list(st.session_state.get(_QUEUE_KEY, []))


def flush_notifications():
    """Show and clear every queued message."""
    queue = st.session_state.get(_QUEUE_KEY) or []
    st.session_state[_QUEUE_KEY] = []
    for kind, message in queue:
        st.toast(message, icon=KINDS[kind])


# ── Refresh signalling ────────────────────────────────────────

def request_refresh(scope):
    """Ask the page that owns `scope` to reload its data on next render."""
    st.session_state.setdefault(_REFRESH_KEY, set()).add(scope)


def consume_refresh(scope):
    """True once per request_refresh(scope)."""
    pending = st.session_state.get(_REFRESH_KEY) or set()
    if scope in pending:
        pending.discard(scope)
        return True
    return False
