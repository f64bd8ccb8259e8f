import os
import streamlit as st


def _secret(name, default=None):
    """Environment variable first, Streamlit secrets second."""
    value = os.environ.get(name)
    if value:
        return value
    try:
        return st.secrets.get(name, default)
    except Exception:
        # No secrets.toml present
        return default


SUPABASE_URL = _secret("SUPABASE_URL")
SUPABASE_ANON_KEY = _secret("SUPABASE_ANON_KEY")
SUPABASE_SERVICE_KEY = _secret("SUPABASE_SERVICE_KEY") or _secret("SUPABASE_SERVICE_ROLE_KEY")

# Seconds a deleted row stays undoable before the remote delete runs
UNDO_GRACE_SECONDS = int(_secret("UNDO_GRACE_SECONDS", 5))

ID_DOCUMENTS_BUCKET = _secret("ID_DOCUMENTS_BUCKET", "id_documents")

LOG_LEVEL = _secret("LOG_LEVEL", "INFO")

APP_TITLE = "SimTrack"
APP_SUBTITLE = "SIM Distribution Management"

# Roles allowed into the dashboard
DASHBOARD_ROLES = ("admin", "team_leader")
