import logging
import streamlit as st

from anchors.app_config import APP_TITLE, APP_SUBTITLE, DASHBOARD_ROLES
from anchors.supabase_client import StoreError, error_message

log = logging.getLogger(__name__)


def init_session():
    """Initialize all session state keys used across all modules."""
    defaults = {
        # Auth
        "auth_user": None,
        "profile": None,
        "role": None,
        # Active module routing
        "active_module": None,
        # Users
        "users_view": "LIST",
        "users_ctl": None,
        "users_teams": None,
        "users_confirm_delete": None,
        "cu_wizard": None,
        "cu_show_errors_step": None,
        # Teams
        "teams_ctl": None,
    }
    for k, v in defaults.items():
        if k not in st.session_state:
            st.session_state[k] = v


def login_email(identifier):
    """Users may sign in with their email or their username."""
    identifier = (identifier or "").strip()
    if "@" in identifier:
        return identifier.lower(), None

    from anchors.supabase_client import admin_supabase, safe_exec
    rows = safe_exec(
        admin_supabase.table("users")
        .select("email")
        .eq("username", identifier)
        .limit(1),
        "Error checking user"
    )
    if not rows or not rows[0].get("email"):
        return None, "Invalid username or password"
    return rows[0]["email"], None


def check_profile(profile):
    """Return an error message when this profile may not use the dashboard."""
    if not profile:
        return "User profile missing"
    if profile.get("deleted"):
        return "Invalid or inactive user"
    if not profile.get("is_active", True) or profile.get("status") == "suspended":
        return "Your account has been suspended. Contact your administrator."
    if profile.get("role") not in DASHBOARD_ROLES:
        return "Staff accounts use the mobile app. This dashboard is for admins and team leaders."
    return None


def handle_login():
    """Handle authentication. Shows login form if not authenticated."""
    init_session()

    if st.session_state.auth_user:
        return

    # ── Login screen ──────────────────────────────────────────────
    st.title(f"📶 {APP_TITLE}")
    st.caption(APP_SUBTITLE)
    st.divider()
    st.subheader("🔐 Login")

    with st.form("login_form"):
        identifier = st.text_input("Email or username")
        password = st.text_input("Password", type="password")
        submit = st.form_submit_button("Login", type="primary")

        if submit:
            if not identifier or not password:
                st.error("Please enter your email/username and password")
            else:
                _do_login(identifier, password)

    st.stop()


def _do_login(identifier, password):
    from anchors.supabase_client import supabase, admin_supabase, safe_exec

    try:
        email, err = login_email(identifier)
        if err:
            st.error(f"❌ {err}")
            return

        auth_response = supabase.auth.sign_in_with_password({
            "email": email,
            "password": password
        })

        rows = safe_exec(
            admin_supabase.table("users")
            .select("*")
            .eq("id", auth_response.user.id)
            .limit(1),
            "Error loading profile"
        )
        profile = rows[0] if rows else None
        problem = check_profile(profile)
        if problem:
            supabase.auth.sign_out()
            st.error(f"❌ {problem}")
            return

        st.session_state.auth_user = auth_response.user
        st.session_state.profile = profile
        st.session_state.role = profile["role"]
        st.session_state.active_module = None

        log.info("Login: %s (%s)", email, profile["role"])
        st.rerun()

    except StoreError as e:
        st.error(f"❌ {e}")
    except Exception as e:
        # supabase auth raises AuthApiError for bad credentials
        log.warning("Login failed for %s: %s", identifier, e)
        st.error(f"❌ Login failed: {error_message(e)}")


def do_logout():
    try:
        from anchors.supabase_client import supabase
        if supabase is not None:
            supabase.auth.sign_out()
    except Exception as e:
        log.warning("Sign-out failed: %s", e)
    st.session_state.clear()
    st.rerun()
