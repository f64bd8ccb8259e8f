"""
Activity Database Module
Writes and reads the audit_logs table.
"""

import logging
from anchors.supabase_client import require_admin_client, safe_exec, StoreError

log = logging.getLogger(__name__)


def write_audit_log(action, target_type, target_id, performed_by, message,
                    admin_id=None, metadata=None):
    """
    Insert one audit_logs row.
    Never raises: a failed audit insert must not undo the operation it records.
    """
    row = {
        "action": action,
        "target_type": target_type,
        "target_id": str(target_id) if target_id is not None else None,
        "performed_by": performed_by,
        "message": message,
        "admin_id": admin_id,
    }
    if metadata:
        row["metadata"] = metadata
    try:
        safe_exec(
            require_admin_client().table("audit_logs").insert(row),
            "Error creating audit log"
        )
        return True
    except StoreError as e:
        log.warning("Audit log for %s %s not written: %s", action, target_id, e)
        return False


def load_audit_logs(admin_id, limit=50, actions=None):
    """Newest-first audit rows for one tenant, optionally limited to `actions`."""
    query = (
        require_admin_client().table("audit_logs")
        .select("id, action, message, performed_by, target_type, target_id, metadata, created_at")
        .eq("admin_id", admin_id)
    )
    if actions:
        query = query.in_("action", list(actions))
    query = query.order("created_at", desc=True).limit(limit)
    return safe_exec(query, "Could not load activity")


def load_usernames(user_ids):
    """Map user id → display name for the given ids."""
    ids = sorted({str(u) for u in user_ids if u})
    if not ids:
        return {}
    rows = safe_exec(
        require_admin_client().table("users")
        .select("id, full_name, username")
        .in_("id", ids),
        "Error loading user names"
    )
    return {r["id"]: r.get("full_name") or r.get("username") or "Unknown" for r in rows}
