import logging
import time
from supabase import create_client

from anchors.app_config import SUPABASE_URL, SUPABASE_ANON_KEY, SUPABASE_SERVICE_KEY

log = logging.getLogger(__name__)

# Create admin client (service role - full access)
admin_supabase = None
if SUPABASE_URL and SUPABASE_SERVICE_KEY:
    admin_supabase = create_client(
        SUPABASE_URL,
        SUPABASE_SERVICE_KEY
    )

# Create regular client (anon key - user-level access)
supabase = None
if SUPABASE_URL and SUPABASE_ANON_KEY:
    supabase = create_client(
        SUPABASE_URL,
        SUPABASE_ANON_KEY
    )
elif SUPABASE_URL and SUPABASE_SERVICE_KEY:
    # Fallback: use admin client if anon key not available
    supabase = admin_supabase


class StoreError(Exception):
    """A Supabase table, storage or auth call failed."""

    def __init__(self, message, cause=None):
        super().__init__(message)
        self.message = message
        self.cause = cause


def error_message(exc):
    """Best human-readable text for a Supabase / postgrest exception."""
    if isinstance(exc, StoreError):
        return exc.message
    msg = getattr(exc, "message", None)
    if isinstance(msg, str) and msg:
        return msg
    text = str(exc)
    return text or exc.__class__.__name__


def require_admin_client():
    if admin_supabase is None:
        raise StoreError("Supabase is not configured (SUPABASE_URL / SUPABASE_SERVICE_KEY missing)")
    return admin_supabase


# Errors that are transient and safe to retry
_RETRY_SIGNALS = (
    "resource temporarily unavailable",
    "errno 11",
    "connection reset",
    "connection refused",
    "broken pipe",
    "timed out",
    "timeout",
    "readtimeout",
    "remotedisconnected",
    "ssl",
)

_MAX_RETRIES  = 3
_RETRY_DELAYS = [0.5, 1.5, 3.0]   # seconds between retries


def is_transient(exc):
    err_lower = str(exc).lower()
    return any(sig in err_lower for sig in _RETRY_SIGNALS)


def safe_exec(q, msg="Database error", sleep=time.sleep, retry=True):
    """
    Execute a Supabase query with automatic retry for transient
    network errors (e.g. 'Resource temporarily unavailable', errno 11).
    Pass retry=False for deletes: a timed-out delete may already have run.

    Returns the data list (empty list when the query returned nothing).
    Raises StoreError once retries are exhausted or the error is permanent.
    """
    for attempt in range(_MAX_RETRIES):
        try:
            res = q.execute()
            return res.data or []

        except Exception as e:
            if retry and is_transient(e) and attempt < _MAX_RETRIES - 1:
                log.warning("%s: transient error, retry %d: %s", msg, attempt + 1, e)
                sleep(_RETRY_DELAYS[attempt])
                continue

            log.exception("%s", msg)
            raise StoreError(f"{msg}: {error_message(e)}", cause=e) from e

    return []
