"""
Teams Main Module
Team overview, create form and delete with undo.
"""

import pandas as pd
import streamlit as st

from anchors.app_config import UNDO_GRACE_SECONDS
from anchors.notifier import notify, request_refresh, consume_refresh
from anchors.supabase_client import StoreError
from modules.common.undo_delete import UndoableDelete
from modules.teams.teams_database import (
    load_teams_overview,
    load_leader_candidates,
    create_team,
    delete_team,
)
from modules.users.users_database import tenant_admin_id


def run_teams():
    if "teams_ctl" not in st.session_state:
        st.session_state.teams_ctl = None

    viewer = st.session_state.get("profile")
    if not viewer:
        st.error("❌ User profile not loaded. Please log in again.")
        st.stop()

    st.title("🚐 Teams")

    admin_id = tenant_admin_id(viewer)
    is_admin = viewer.get("role") == "admin"

    try:
        ctl = get_teams_controller(viewer)
    except StoreError as e:
        st.error(f"❌ {e}")
        return

    if ctl.is_pending:
        teams_undo_banner(ctl)

    if is_admin:
        with st.expander("➕ New Team"):
            show_create_team_form(viewer, admin_id)

    teams = ctl.items
    if not is_admin:
        teams = [t for t in teams if t["id"] == viewer.get("team_id")]

    if not teams:
        st.info("No teams yet.")
        return

    c1, c2, c3 = st.columns(3)
    c1.metric("Teams", len(teams))
    c2.metric("Active", sum(1 for t in teams if t.get("is_active")))
    c3.metric("Members", sum(t.get("member_count", 0) for t in teams))

    df = pd.DataFrame([
        {
            "Team": t["name"],
            "Region": t.get("region") or "",
            "Leader": t.get("leader_name") or "—",
            "Members": t.get("member_count", 0),
            "Van": t.get("van_number_plate") or "",
            "Active": "✅" if t.get("is_active") else "❌",
        }
        for t in teams
    ])
    st.dataframe(df, use_container_width=True, hide_index=True)

    if not is_admin:
        return

    st.write("---")
    st.write("**Remove a team**")
    for team in teams:
        c1, c2 = st.columns([5, 1])
        c1.write(f"{team['name']} · {team.get('member_count', 0)} member(s)")
        if c2.button("🗑️", key=f"del_team_{team['id']}", help="Delete team"):
            ctl.request_delete(team)
            st.rerun()


def get_teams_controller(viewer):
    admin_id = tenant_admin_id(viewer)
    ctl = st.session_state.teams_ctl
    refresh = consume_refresh("teams")

    if ctl is None or refresh:
        rows = load_teams_overview(admin_id)
        if ctl is None:
            ctl = UndoableDelete(
                rows,
                delete_fn=lambda team_id: delete_team(team_id, viewer["id"], admin_id),
                notify=notify,
                on_removed=lambda _team_id: request_refresh("users"),
                grace_period=UNDO_GRACE_SECONDS,
                label_key="name",
                noun="Team",
            )
            st.session_state.teams_ctl = ctl
        else:
            ctl.replace_items(rows)
    return ctl


def show_create_team_form(viewer, admin_id):
    try:
        leaders = load_leader_candidates(admin_id)
    except StoreError as e:
        st.error(f"❌ {e}")
        leaders = []
    leader_names = {l["id"]: l["full_name"] for l in leaders}

    with st.form("create_team_form", clear_on_submit=True):
        c1, c2 = st.columns(2)
        with c1:
            name = st.text_input("Team Name *")
            region = st.text_input("Region *")
            territory = st.text_input("Territory")
        with c2:
            leader_id = st.selectbox("Team Leader", [""] + list(leader_names),
                                     format_func=lambda x: leader_names.get(x, "— None —"))
            van_plate = st.text_input("Van Number Plate")
            van_location = st.text_input("Van Location")

        if st.form_submit_button("💾 Create Team", type="primary"):
            if not name.strip() or not region.strip():
                st.error("Team name and region are required")
                return
            try:
                create_team({
                    "name": name,
                    "region": region,
                    "leader_id": leader_id,
                    "territory": territory,
                    "van_number_plate": van_plate,
                    "van_location": van_location,
                }, viewer["id"], admin_id)
            except StoreError as e:
                st.error(f"❌ {e}")
                return
            notify("success", f"Team {name.strip()} created")
            request_refresh("teams")
            st.rerun()


@st.fragment(run_every=1)
def teams_undo_banner(ctl):
    ctl.sync()
    pending = ctl.pending
    if pending is None:
        st.rerun()
        return

    with st.container(border=True):
        c1, c2, c3 = st.columns([4, 1, 1])
        with c1:
            st.markdown(f"🗑️ Team **{ctl.label(pending.entity)}** removed. "
                        f"Deleting in **{pending.remaining_seconds}s**")
            st.progress(ctl.progress)
        with c2:
            if st.button("↩️ Undo", key="undo_team_delete_btn", use_container_width=True):
                ctl.undo()
                st.rerun()
        with c3:
            if st.button("Delete now", key="finalize_team_delete_btn", use_container_width=True):
                ctl.finalize_now()
                st.rerun()
