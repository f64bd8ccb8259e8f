import streamlit as st

from anchors.app_config import APP_TITLE, APP_SUBTITLE
from anchors.logging_setup import configure_logging
from anchors.sim_styles import apply_styles
from anchors.notifier import flush_notifications
from anchors.core_session import handle_login
from anchors.core_router import route_module

st.set_page_config(
    page_title=f"{APP_TITLE} — {APP_SUBTITLE}",
    layout="wide",
    initial_sidebar_state="collapsed"
)

configure_logging()
apply_styles()
flush_notifications()

handle_login()
route_module()
