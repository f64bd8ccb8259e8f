"""
Users Main Module
Staff list with filters, suspend/activate, delete with undo, and the
3-step Create User wizard.
"""

import logging
import pandas as pd
import streamlit as st

from anchors.app_config import UNDO_GRACE_SECONDS
from anchors.notifier import notify, request_refresh, consume_refresh
from anchors.supabase_client import StoreError
from modules.common.undo_delete import UndoableDelete
from modules.users.users_database import (
    tenant_admin_id,
    load_users,
    load_teams,
    set_user_status,
    delete_user,
    UserRecords,
    IdDocumentStore,
)
from modules.users.users_helpers import (
    ROLE_LABELS,
    STATUS_LABELS,
    filter_users,
    available_filters,
    can_manage_users,
    next_status,
)
from modules.users.user_wizard import (
    CreateUserWizard,
    TOTAL_STEPS,
    STEP_TITLES,
    FIELD_LABELS,
    ROLES,
    STAFF_TYPES,
    password_strength,
)

log = logging.getLogger(__name__)

_FIELD_KEY = "cu_f_{}"
_FILE_KEY = "cu_file_{}"


def init_users_session_state():
    defaults = {
        "users_view": "LIST",
        "users_ctl": None,
        "users_teams": None,
        "users_confirm_delete": None,
        "cu_wizard": None,
        "cu_show_errors_step": None,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def run_users():
    """Entry point called from core_router."""
    init_users_session_state()

    viewer = st.session_state.get("profile")
    if not viewer:
        st.error("❌ User profile not loaded. Please log in again.")
        st.stop()

    st.title("👥 Users")

    if can_manage_users(viewer):
        col1, col2 = st.columns(2)
        with col1:
            if st.button("📋 All Users", use_container_width=True,
                         type="primary" if st.session_state.users_view == "LIST" else "secondary"):
                st.session_state.users_view = "LIST"
                st.rerun()
        with col2:
            if st.button("➕ Create User", use_container_width=True,
                         type="primary" if st.session_state.users_view == "CREATE" else "secondary"):
                st.session_state.users_view = "CREATE"
                st.rerun()

    if st.session_state.users_view == "CREATE" and can_manage_users(viewer):
        show_create_user(viewer)
    else:
        show_user_list(viewer)


# ======================================================
# LIST
# ======================================================

def _load_teams(admin_id, refresh=False):
    if refresh or st.session_state.users_teams is None:
        try:
            st.session_state.users_teams = load_teams(admin_id)
        except StoreError as e:
            st.error(f"❌ {e}")
            st.session_state.users_teams = []
    return st.session_state.users_teams


def get_users_controller(viewer):
    """Session-scoped UndoableDelete holding the tenant's user list."""
    admin_id = tenant_admin_id(viewer)
    ctl = st.session_state.users_ctl
    refresh = consume_refresh("users")

    if ctl is None or refresh:
        rows = load_users(admin_id)
        if ctl is None:
            ctl = UndoableDelete(
                rows,
                delete_fn=lambda user_id: delete_user(user_id, viewer["id"], admin_id),
                notify=notify,
                on_removed=_on_user_removed,
                grace_period=UNDO_GRACE_SECONDS,
                label_key="full_name",
                noun="User",
            )
            st.session_state.users_ctl = ctl
        else:
            ctl.replace_items(rows)
    return ctl


def _on_user_removed(user_id):
    if st.session_state.get("users_confirm_delete") == user_id:
        st.session_state.users_confirm_delete = None
    log.info("User %s removed", user_id)


def show_user_list(viewer):
    admin_id = tenant_admin_id(viewer)

    try:
        ctl = get_users_controller(viewer)
    except StoreError as e:
        st.error(f"❌ {e}")
        if st.button("🔄 Retry"):
            st.rerun()
        return

    teams = _load_teams(admin_id)
    team_names = {t["id"]: t["name"] for t in teams}

    if ctl.is_pending:
        undo_banner(ctl)

    # ── Filters ───────────────────────────────────────────────
    shown = available_filters(viewer)
    role_f = team_f = status_f = ""

    cols = st.columns([2, 2, 2, 3, 1])
    if shown["role"]:
        with cols[0]:
            role_f = st.selectbox("Role", [""] + list(ROLE_LABELS),
                                  format_func=lambda r: ROLE_LABELS.get(r, "All roles"),
                                  key="users_filter_role")
    if shown["team"]:
        with cols[1]:
            team_f = st.selectbox("Team", [""] + list(team_names),
                                  format_func=lambda t: team_names.get(t, "All teams"),
                                  key="users_filter_team")
    if shown["status"]:
        with cols[2]:
            status_f = st.selectbox("Status", [""] + list(STATUS_LABELS),
                                    format_func=lambda s: STATUS_LABELS.get(s, "All statuses"),
                                    key="users_filter_status")
    with cols[3]:
        search = st.text_input("Search", placeholder="Name, email, phone or ID number",
                               key="users_filter_search")
    with cols[4]:
        st.markdown("<br>", unsafe_allow_html=True)
        if st.button("🔄", help="Reload users", use_container_width=True):
            request_refresh("users")
            _load_teams(admin_id, refresh=True)
            st.rerun()

    users = filter_users(ctl.items, viewer, role_f, team_f, status_f, search)

    st.caption(f"{len(users)} user{'s' if len(users) != 1 else ''}")

    if not users:
        st.info("No users match the current filters.")
        return

    if viewer.get("role") == "admin":
        export_df = pd.DataFrame([
            {
                "Name": u.get("full_name"),
                "Email": u.get("email"),
                "Phone": u.get("phone_number"),
                "ID Number": u.get("id_number"),
                "Role": ROLE_LABELS.get(u.get("role"), u.get("role")),
                "Team": team_names.get(u.get("team_id"), ""),
                "Status": u.get("status"),
            }
            for u in users
        ])
        st.download_button(
            "⬇️ Export CSV",
            export_df.to_csv(index=False).encode("utf-8"),
            file_name="users.csv",
            mime="text/csv",
        )

    st.divider()
    for user in users:
        _render_user_row(ctl, user, viewer, team_names)


def _render_user_row(ctl, user, viewer, team_names):
    c1, c2, c3, c4, c5 = st.columns([3, 2, 2, 1, 1])

    with c1:
        st.markdown(f"**{user.get('full_name', '')}**")
        st.caption(f"{user.get('email', '')} · {user.get('phone_number', '')}")
    with c2:
        st.write(ROLE_LABELS.get(user.get("role"), user.get("role", "")))
        st.caption(team_names.get(user.get("team_id"), "No team"))
    with c3:
        st.write(STATUS_LABELS.get(user.get("status"), user.get("status", "")))

    if user.get("id") == viewer.get("id") or not can_manage_users(viewer):
        return

    with c4:
        target = next_status(user)
        label = "▶️" if target == "active" else "⏸️"
        if st.button(label, key=f"status_{user['id']}",
                     help="Activate" if target == "active" else "Suspend"):
            try:
                updated = set_user_status(user["id"], target, viewer["id"], tenant_admin_id(viewer))
                user.update(updated)
                notify("success", f"User {'activated' if target == 'active' else 'suspended'} successfully")
            except StoreError as e:
                notify("error", f"Failed to update user status: {e}")
            st.rerun()

    with c5:
        if st.session_state.users_confirm_delete == user["id"]:
            if st.button("✔️", key=f"confirm_del_{user['id']}", help="Confirm delete"):
                st.session_state.users_confirm_delete = None
                ctl.request_delete(user)
                st.rerun()
            if st.button("✖️", key=f"cancel_del_{user['id']}", help="Keep user"):
                st.session_state.users_confirm_delete = None
                st.rerun()
        elif st.button("🗑️", key=f"del_{user['id']}", help="Delete user"):
            st.session_state.users_confirm_delete = user["id"]
            st.rerun()


@st.fragment(run_every=1)
def undo_banner(ctl):
    """Countdown banner; reruns itself every second while a delete is pending."""
    ctl.sync()

    pending = ctl.pending
    if pending is None:
        # Committed or restored since the last run: redraw the whole page
        st.rerun()
        return

    name = ctl.label(pending.entity)
    with st.container(border=True):
        c1, c2, c3 = st.columns([4, 1, 1])
        with c1:
            st.markdown(f"🗑️ **{name}** removed. Deleting in **{pending.remaining_seconds}s**")
            st.progress(ctl.progress)
        with c2:
            if st.button("↩️ Undo", key="undo_delete_btn", use_container_width=True):
                ctl.undo()
                st.rerun()
        with c3:
            if st.button("Delete now", key="finalize_delete_btn", use_container_width=True):
                ctl.finalize_now()
                st.rerun()


# ======================================================
# CREATE USER WIZARD
# ======================================================

def _on_user_created(row):
    request_refresh("users")
    log.info("User %s created", row.get("id"))


def get_wizard():
    wizard = st.session_state.cu_wizard
    if wizard is None:
        wizard = CreateUserWizard(on_created=_on_user_created, notify=notify)
        st.session_state.cu_wizard = wizard
        _reset_wizard_widgets()
    return wizard


def _reset_wizard_widgets():
    for name in FIELD_LABELS:
        st.session_state.pop(_FIELD_KEY.format(name), None)
    for slot in ("id_front", "id_back"):
        st.session_state.pop(_FILE_KEY.format(slot), None)
    st.session_state.cu_show_errors_step = None


def _field_changed(name):
    st.session_state.cu_wizard.update_field(name, st.session_state[_FIELD_KEY.format(name)])


def _file_changed(slot):
    wizard = st.session_state.cu_wizard
    uploaded = st.session_state.get(_FILE_KEY.format(slot))
    if uploaded is None:
        wizard.clear_attachment(slot)
    else:
        wizard.set_attachment(slot, uploaded.name, uploaded.getvalue(),
                              uploaded.type or "application/octet-stream")


def _remove_file(slot):
    st.session_state.cu_wizard.clear_attachment(slot)
    st.session_state.pop(_FILE_KEY.format(slot), None)


def _seed(name, wizard, options=None):
    key = _FIELD_KEY.format(name)
    value = wizard.fields.get(name, "")
    if options is not None and value not in options:
        value = options[0]
    if key not in st.session_state:
        st.session_state[key] = value
    return key


def _field_error(name, wizard, errors):
    show_all = st.session_state.cu_show_errors_step == wizard.current_step
    if name in errors and (wizard.touched.get(name) or show_all):
        st.caption(f":red[{errors[name]}]")


def _text(name, wizard, errors, **kwargs):
    key = _seed(name, wizard)
    st.text_input(FIELD_LABELS[name], key=key, on_change=_field_changed, args=(name,), **kwargs)
    _field_error(name, wizard, errors)


def show_create_user(viewer):
    wizard = get_wizard()
    admin_id = tenant_admin_id(viewer)

    if wizard.status == "succeeded":
        st.success(f"✅ User {wizard.fields['full_name']} created successfully!")
        c1, c2 = st.columns(2)
        with c1:
            if st.button("➕ Create Another", type="primary", use_container_width=True):
                st.session_state.cu_wizard = None
                st.rerun()
        with c2:
            if st.button("📋 Back to Users", use_container_width=True):
                st.session_state.cu_wizard = None
                st.session_state.users_view = "LIST"
                st.rerun()
        return

    step = wizard.current_step
    st.write(f"### Step {step}/{TOTAL_STEPS}: {STEP_TITLES[step]}")
    st.progress(wizard.progress)

    errors = wizard.validate_step(step).errors

    if step == 1:
        c1, c2 = st.columns(2)
        with c1:
            _text("full_name", wizard, errors)
            _text("id_number", wizard, errors)
            _text("mobigo_number", wizard, errors)
        with c2:
            _text("email", wizard, errors)
            _text("phone_number", wizard, errors, placeholder="+254712345678")

    elif step == 2:
        _text("password", wizard, errors, type="password")
        ok, msg = password_strength(wizard.fields["password"])
        if wizard.touched.get("password") and ok:
            st.caption(f":green[{msg}]")
        _text("confirm_password", wizard, errors, type="password")
        st.info("A secure password has been generated. You can keep it or type a new one "
                "(at least 8 characters).")

    elif step == 3:
        _show_step_3(wizard, admin_id, errors)

    if wizard.error:
        st.error(f"❌ {wizard.error}")

    # ── Navigation ────────────────────────────────────────────
    st.write("---")
    c1, c2, c3 = st.columns(3)
    with c1:
        if step > 1 and st.button("⬅️ Previous", use_container_width=True):
            wizard.go_previous()
            st.rerun()
    with c2:
        if st.button("❌ Cancel", use_container_width=True):
            st.session_state.cu_wizard = None
            _reset_wizard_widgets()
            st.session_state.users_view = "LIST"
            st.rerun()
    with c3:
        label = "✅ Create User" if wizard.is_last_step else "Next ➡️"
        if st.button(label, type="primary", use_container_width=True):
            if not wizard.validate_step(step).ok:
                st.session_state.cu_show_errors_step = step
                st.rerun()
            if wizard.is_last_step:
                with st.spinner("Uploading ID images and creating user..."):
                    wizard.go_next(IdDocumentStore(), UserRecords(admin_id, viewer["id"]))
            else:
                wizard.go_next()
            st.rerun()


def _show_step_3(wizard, admin_id, errors):
    teams = _load_teams(admin_id)
    active = [t for t in teams if t.get("is_active", True)]
    team_options = [""] + [t["id"] for t in active]
    team_names = {t["id"]: t["name"] for t in active}

    c1, c2 = st.columns(2)
    with c1:
        key = _seed("role", wizard, ROLES)
        st.selectbox(FIELD_LABELS["role"], ROLES, key=key,
                     format_func=lambda r: ROLE_LABELS.get(r, r),
                     on_change=_field_changed, args=("role",))
        _field_error("role", wizard, errors)

        key = _seed("team_id", wizard, team_options)
        st.selectbox(FIELD_LABELS["team_id"], team_options, key=key,
                     format_func=lambda t: team_names.get(t, "Select team"),
                     on_change=_field_changed, args=("team_id",))

        key = _seed("staff_type", wizard, STAFF_TYPES)
        st.selectbox(FIELD_LABELS["staff_type"], STAFF_TYPES, key=key,
                     format_func=lambda s: s.replace("_", " ").title() if s else "Select staff type",
                     on_change=_field_changed, args=("staff_type",))
    with c2:
        _text("van_number", wizard, errors)
        _text("van_location", wizard, errors)

    _show_id_documents(wizard, errors)


def _show_id_documents(wizard, errors):
    st.write("**ID Documents**")
    c1, c2 = st.columns(2)
    for col, slot, title in ((c1, "id_front", "ID Front"), (c2, "id_back", "ID Back")):
        with col:
            attachment = wizard.attachments.get(slot)
            if attachment is not None:
                st.image(attachment.preview, caption=f"{title}: {attachment.name}",
                         use_container_width=True)
                st.button("✖️ Remove", key=f"cu_remove_{slot}", on_click=_remove_file, args=(slot,))
            else:
                st.file_uploader(title, type=["png", "jpg", "jpeg", "webp"],
                                 key=_FILE_KEY.format(slot),
                                 on_change=_file_changed, args=(slot,))
                _field_error(slot, wizard, errors)

