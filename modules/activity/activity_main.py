"""
Activity Module: Admin and Team Leaders
Reads audit_logs and displays a human-readable activity feed.
"""

import streamlit as st
from datetime import datetime, timezone

from anchors.supabase_client import StoreError
from modules.activity.activity_database import load_audit_logs, load_usernames
from modules.users.users_database import tenant_admin_id


# ── Human-readable labels for every action ────────────────────
ACTION_CONFIG = {
    "USER_CREATED":        ("👤", "User Created",         "green"),
    "USER_DELETED":        ("🗑️",  "User Deleted",         "red"),
    "USER_STATUS_CHANGED": ("🔁", "User Status Changed",  "orange"),
    "TEAM_CREATED":        ("🚐", "Team Created",         "green"),
    "TEAM_DELETED":        ("🗑️",  "Team Deleted",         "red"),
}

MODULE_FILTERS = {
    "All Activity": None,
    "👥 Users": ["USER_CREATED", "USER_DELETED", "USER_STATUS_CHANGED"],
    "🚐 Teams": ["TEAM_CREATED", "TEAM_DELETED"],
}

COLOR_MAP = {
    "green":  "#0f7a4f",
    "blue":   "#1a4b8a",
    "orange": "#b35c00",
    "red":    "#c0392b",
    "gray":   "#666666",
}


def time_ago(dt_str, now=None):
    """Convert ISO datetime string to human-readable 'X ago' format."""
    if not dt_str:
        return "Unknown time"
    try:
        dt = datetime.fromisoformat(dt_str.replace("Z", "+00:00"))
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        now = now or datetime.now(timezone.utc)
        seconds = int((now - dt).total_seconds())

        if seconds < 60:
            return "just now"
        elif seconds < 3600:
            m = seconds // 60
            return f"{m} minute{'s' if m > 1 else ''} ago"
        elif seconds < 86400:
            h = seconds // 3600
            return f"{h} hour{'s' if h > 1 else ''} ago"
        elif seconds < 604800:
            d = seconds // 86400
            return f"{d} day{'s' if d > 1 else ''} ago"
        else:
            return dt.strftime("%d %b %Y")
    except ValueError:
        return dt_str[:10]


def describe_action(action):
    """(emoji, label, colour) for an audit action, with a generic fallback."""
    config = ACTION_CONFIG.get(action)
    if config:
        emoji, label, color_key = config
    else:
        emoji, label, color_key = "📝", (action or "").replace("_", " ").title(), "gray"
    return emoji, label, COLOR_MAP.get(color_key, COLOR_MAP["gray"])


def run_activity():
    st.title("🔔 Activity")
    st.caption("Everything that happened in your workspace — newest first")

    viewer = st.session_state.get("profile")
    if not viewer:
        st.error("❌ User profile not loaded. Please log in again.")
        st.stop()

    col1, col2, col3 = st.columns([2, 2, 1])
    with col1:
        selected_module = st.selectbox("Filter", list(MODULE_FILTERS), key="activity_filter")
    with col2:
        limit_options = {"Last 50": 50, "Last 100": 100, "Last 200": 200}
        selected_limit = st.selectbox("Show", list(limit_options), key="activity_limit")
    with col3:
        st.markdown("<br>", unsafe_allow_html=True)
        if st.button("🔄 Refresh", use_container_width=True):
            st.rerun()

    st.divider()

    try:
        logs = load_audit_logs(
            tenant_admin_id(viewer),
            limit=limit_options[selected_limit],
            actions=MODULE_FILTERS[selected_module],
        )
        names = load_usernames(log.get("performed_by") for log in logs)
    except StoreError as e:
        st.error(f"❌ {e}")
        return

    if not logs:
        st.info("No activity recorded yet.")
        return

    st.markdown(f"**{len(logs)} event{'s' if len(logs) != 1 else ''}**")

    for log in logs:
        emoji, label, color = describe_action(log.get("action"))
        who = names.get(log.get("performed_by"), "System")
        created_at = log.get("created_at") or ""

        st.markdown(f"""
        <div class="sim-activity-card" style="border-left-color: {color};">
            <div class="sim-activity-emoji">{emoji}</div>
            <div>
                <div class="sim-activity-label" style="color: {color};">{label}</div>
                <div class="sim-activity-message">{log.get("message", "")}</div>
                <div class="sim-activity-meta">👤 <b>{who}</b> &nbsp;·&nbsp; 🕐 {time_ago(created_at)}</div>
            </div>
        </div>
        """, unsafe_allow_html=True)
