import streamlit as st

from anchors.app_config import APP_TITLE
from anchors.core_session import do_logout


NAV_ITEMS = [
    # label,            module key,  roles
    ("🏠 Home",         None,        ("admin", "team_leader")),
    ("👥 Users",        "USERS",     ("admin", "team_leader")),
    ("🚐 Teams",        "TEAMS",     ("admin", "team_leader")),
    ("🔔 Activity",     "ACTIVITY",  ("admin", "team_leader")),
]


def nav_options(role):
    return [label for label, _, roles in NAV_ITEMS if role in roles]


def route_module():
    """
    Navigation: green header bar + selectbox nav.
    """
    role = st.session_state.get("role") or ""
    profile = st.session_state.get("profile") or {}
    display_name = profile.get("full_name") or profile.get("email", "")

    # ── Header bar ────────────────────────────────────────────────
    st.markdown(f"""
    <div class="sim-header">
        <div class="app-title">📶 {APP_TITLE}</div>
        <div class="user-info">👤 {display_name}&nbsp;&nbsp;|&nbsp;&nbsp;{role.replace("_", " ").upper()}</div>
    </div>
    """, unsafe_allow_html=True)

    # ── Nav + Logout in one row ───────────────────────────────────
    nav_col, logout_col = st.columns([5, 1])

    options = nav_options(role)
    label_to_module = {label: key for label, key, _ in NAV_ITEMS}
    module_to_label = {v: k for k, v in label_to_module.items()}

    active = st.session_state.get("active_module")
    current_label = module_to_label.get(active, options[0] if options else "🏠 Home")
    current_index = options.index(current_label) if current_label in options else 0

    with nav_col:
        selected_label = st.selectbox(
            "Navigate",
            options,
            index=current_index,
            key="nav_selectbox",
            label_visibility="collapsed"
        )

    with logout_col:
        if st.button("🚪 Logout", key="logout_btn", use_container_width=True):
            do_logout()

    # ── Handle navigation change ──────────────────────────────────
    selected_module = label_to_module.get(selected_label)
    if selected_module != active:
        _set_module(selected_module)

    st.divider()

    # ── Route to module ───────────────────────────────────────────
    if active == "USERS":
        from modules.users.users_main import run_users
        run_users()

    elif active == "TEAMS":
        from modules.teams.teams_main import run_teams
        run_teams()

    elif active == "ACTIVITY":
        from modules.activity.activity_main import run_activity
        run_activity()

    else:
        _show_home(display_name, role)


def _set_module(name):
    st.session_state.active_module = name
    if name != "USERS":
        # Leaving the page abandons an unfinished wizard and any delete confirmation
        st.session_state.cu_wizard = None
        st.session_state.users_confirm_delete = None
        st.session_state.users_view = "LIST"
    st.rerun()


def _show_home(display_name="", role=""):
    st.title(f"🏠 Welcome to {APP_TITLE}")
    st.markdown(f"**Logged in as:** {display_name} ({role.replace('_', ' ')})")
    st.markdown("""
    Use the **Navigate** dropdown above to go to any module.

    | Module | Description |
    |--------|-------------|
    | 👥 Users | Staff list, create users, suspend, delete with undo |
    | 🚐 Teams | Teams, leaders and member counts |
    | 🔔 Activity | Audit trail of user and team changes |
    """)
