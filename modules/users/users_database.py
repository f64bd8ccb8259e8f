"""
Users Database Module
Supabase operations for staff users: list, status, delete, create,
plus the id_documents storage bucket used by the create-user wizard.
"""

import logging
from datetime import datetime

from anchors.app_config import ID_DOCUMENTS_BUCKET
from anchors.supabase_client import require_admin_client, safe_exec, StoreError, error_message
from modules.activity.activity_database import write_audit_log

log = logging.getLogger(__name__)


def tenant_admin_id(profile):
    """Admins own their tenant; everyone else belongs to their admin's."""
    if profile.get("role") == "admin":
        return profile["id"]
    return profile.get("admin_id")


# ─────────────────────────────────────────────────────────────
# LOADERS
# ─────────────────────────────────────────────────────────────

def load_users(admin_id):
    return safe_exec(
        require_admin_client().table("users")
        .select("*")
        .eq("admin_id", admin_id)
        .eq("deleted", False)
        .order("full_name"),
        "Error loading users"
    )


def load_teams(admin_id, active_only=False):
    query = (
        require_admin_client().table("teams")
        .select("id, name, region, is_active")
        .eq("admin_id", admin_id)
    )
    if active_only:
        query = query.eq("is_active", True)
    return safe_exec(query.order("name"), "Error loading teams")


# ─────────────────────────────────────────────────────────────
# MUTATIONS
# ─────────────────────────────────────────────────────────────

def set_user_status(user_id, status, performed_by, admin_id):
    """Activate or suspend a user. Returns the updated row."""
    rows = safe_exec(
        require_admin_client().table("users")
        .update({
            "status": status,
            "is_active": status == "active",
            "updated_at": datetime.utcnow().isoformat(),
        })
        .eq("id", user_id)
        .eq("admin_id", admin_id),
        "Error updating user status"
    )
    if not rows:
        raise StoreError("User not found")

    write_audit_log(
        "USER_STATUS_CHANGED", "users", user_id, performed_by,
        f"User {rows[0].get('full_name', '')} set to {status}",
        admin_id=admin_id,
    )
    return rows[0]


def delete_user(user_id, performed_by, admin_id):
    """Delete the profile row, then the auth account."""
    client = require_admin_client()
    rows = safe_exec(
        client.table("users")
        .delete()
        .eq("id", user_id)
        .eq("admin_id", admin_id),
        "Error deleting user",
        retry=False,
    )
    if not rows:
        raise StoreError("User not found or already deleted")

    try:
        client.auth.admin.delete_user(user_id)
    except Exception as e:
        # Profile is gone already; an orphaned auth account cannot log in
        log.warning("Auth account %s not removed: %s", user_id, e)

    write_audit_log(
        "USER_DELETED", "users", user_id, performed_by,
        f"User {rows[0].get('full_name', '')} deleted",
        admin_id=admin_id,
    )


class UserRecords:
    """Record store used by the create-user wizard."""

    def __init__(self, admin_id, performed_by):
        self.admin_id = admin_id
        self.performed_by = performed_by

    def create(self, record):
        """
        Create the auth account, then the users row.
        The auth account is removed again if the profile insert fails.
        """
        client = require_admin_client()
        record = dict(record)
        password = record.pop("password")

        try:
            auth_resp = client.auth.admin.create_user({
                "email": record["email"],
                "password": password,
                "email_confirm": True,
            })
        except Exception as e:
            log.exception("Auth user creation failed for %s", record["email"])
            raise StoreError(error_message(e), cause=e) from e

        auth_id = auth_resp.user.id
        profile = {
            **record,
            "id": auth_id,
            "auth_user_id": auth_id,
            "admin_id": self.admin_id,
            "status": "active",
            "is_active": True,
            "is_first_login": True,
            "username": record["email"],
        }

        try:
            rows = safe_exec(
                client.table("users").insert(profile),
                "Error creating user profile"
            )
        except StoreError:
            try:
                client.auth.admin.delete_user(auth_id)
            except Exception as cleanup_err:
                log.warning("Auth account %s left behind: %s", auth_id, cleanup_err)
            raise

        created = rows[0] if rows else profile
        write_audit_log(
            "USER_CREATED", "users", auth_id, self.performed_by,
            f"User {record['full_name']} created",
            admin_id=self.admin_id,
        )
        return created


class IdDocumentStore:
    """Artifact store for ID images (Supabase Storage bucket)."""

    def __init__(self, bucket=ID_DOCUMENTS_BUCKET):
        self.bucket = bucket

    def _bucket(self):
        return require_admin_client().storage.from_(self.bucket)

    def upload(self, path, content, mime_type):
        """Upload (upsert) one file and return its public URL."""
        try:
            bucket = self._bucket()
            bucket.upload(
                path,
                content,
                {"content-type": mime_type, "cache-control": "3600", "upsert": "true"},
            )
            return bucket.get_public_url(path)
        except StoreError:
            raise
        except Exception as e:
            log.exception("Upload of %s failed", path)
            raise StoreError(f"Upload failed: {error_message(e)}", cause=e) from e

    def remove(self, paths):
        try:
            self._bucket().remove(list(paths))
        except StoreError:
            raise
        except Exception as e:
            raise StoreError(f"Could not remove files: {error_message(e)}", cause=e) from e
