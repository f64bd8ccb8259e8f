"""
Teams Database Module
Supabase operations for teams.
"""

from anchors.supabase_client import require_admin_client, safe_exec, StoreError
from modules.activity.activity_database import write_audit_log

TEAM_HAS_MEMBERS = ("Cannot delete team with existing members. "
                    "Please reassign or remove members first.")


def load_teams_overview(admin_id):
    """Teams with leader name and member count."""
    client = require_admin_client()
    teams = safe_exec(
        client.table("teams")
        .select("id, name, region, territory, leader_id, van_number_plate, van_location, is_active, created_at")
        .eq("admin_id", admin_id)
        .order("name"),
        "Error loading teams"
    )
    members = safe_exec(
        client.table("users")
        .select("id, full_name, team_id, role")
        .eq("admin_id", admin_id)
        .eq("deleted", False),
        "Error loading team members"
    )
    return merge_team_overview(teams, members)


def merge_team_overview(teams, members):
    names = {m["id"]: m.get("full_name", "") for m in members}
    counts = {}
    for m in members:
        if m.get("team_id"):
            counts[m["team_id"]] = counts.get(m["team_id"], 0) + 1

    result = []
    for t in teams:
        row = dict(t)
        row["leader_name"] = names.get(t.get("leader_id"), "")
        row["member_count"] = counts.get(t["id"], 0)
        result.append(row)
    return result


def load_leader_candidates(admin_id):
    return safe_exec(
        require_admin_client().table("users")
        .select("id, full_name")
        .eq("admin_id", admin_id)
        .eq("role", "team_leader")
        .eq("deleted", False)
        .order("full_name"),
        "Error loading team leaders"
    )


def create_team(data, performed_by, admin_id):
    row = {
        "name": data["name"].strip(),
        "region": data["region"].strip(),
        "leader_id": data.get("leader_id") or None,
        "territory": (data.get("territory") or "").strip() or None,
        "van_number_plate": (data.get("van_number_plate") or "").strip() or None,
        "van_location": (data.get("van_location") or "").strip() or None,
        "is_active": True,
        "admin_id": admin_id,
    }
    rows = safe_exec(
        require_admin_client().table("teams").insert(row),
        "Error creating team"
    )
    created = rows[0] if rows else row
    write_audit_log(
        "TEAM_CREATED", "teams", created.get("id"), performed_by,
        f"Team {row['name']} created",
        admin_id=admin_id,
    )
    return created


def delete_team(team_id, performed_by, admin_id):
    """Hard delete; refused while the team still has members."""
    client = require_admin_client()
    members = safe_exec(
        client.table("users")
        .select("id")
        .eq("team_id", team_id)
        .eq("admin_id", admin_id),
        "Error checking team members"
    )
    if members:
        raise StoreError(TEAM_HAS_MEMBERS)

    rows = safe_exec(
        client.table("teams")
        .delete()
        .eq("id", team_id)
        .eq("admin_id", admin_id),
        "Error deleting team",
        retry=False,
    )
    if not rows:
        raise StoreError("Team not found or already deleted")

    write_audit_log(
        "TEAM_DELETED", "teams", team_id, performed_by,
        f"Team {rows[0].get('name', '')} deleted",
        admin_id=admin_id,
    )
