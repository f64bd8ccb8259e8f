"""
Users Helper Functions
Role-based visibility and filtering for the users list.
"""

ROLE_LABELS = {
    "admin": "Admin",
    "team_leader": "Team Leader",
    "staff": "Staff",
}

STATUS_LABELS = {
    "active": "🟢 Active",
    "suspended": "🔴 Suspended",
    "pending_approval": "🟡 Pending",
}

SEARCH_KEYS = ("full_name", "email", "phone_number", "id_number")


def visible_users(users, viewer):
    """
    Team leaders see their own team (not themselves).
    Admins see everyone; anyone else only sees themselves.
    """
    role = viewer.get("role")
    if role == "admin":
        return list(users)
    if role == "team_leader":
        return [u for u in users
                if u.get("team_id") == viewer.get("team_id") and u.get("id") != viewer.get("id")]
    return [u for u in users if u.get("id") == viewer.get("id")]


def filter_users(users, viewer, role="", team="", status="", search=""):
    result = visible_users(users, viewer)

    # Role / team / status filters are admin only
    if viewer.get("role") == "admin":
        if role:
            result = [u for u in result if u.get("role") == role]
        if team:
            result = [u for u in result if u.get("team_id") == team]
        if status:
            result = [u for u in result if u.get("status") == status]

    if search:
        needle = search.strip().lower()
        result = [
            u for u in result
            if any(needle in str(u.get(k) or "").lower() for k in SEARCH_KEYS)
        ]
    return result


def available_filters(viewer):
    is_admin = viewer.get("role") == "admin"
    return {
        "role": is_admin,
        "team": is_admin,
        "status": is_admin,
        "search": True,
    }


def can_manage_users(viewer):
    return viewer.get("role") in ("admin", "team_leader")


def next_status(user):
    return "suspended" if user.get("status") == "active" else "active"
