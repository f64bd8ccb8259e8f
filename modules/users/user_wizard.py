"""
Create-User Wizard: three gated steps, then upload ID images and create the user.

Steps:
    1. Personal details   (name, email, ID number, phone, Mobigo number)
    2. Credentials        (password + confirmation, pre-filled with a generated password)
    3. Role & documents   (role, team, staff type, van, ID front/back images)

Pure state + rules. The Streamlit page in users_main.py renders it; the
artifact and record stores are passed into go_next()/submit().
"""

import base64
import logging
import re
import secrets
import string
from dataclasses import dataclass, field

from anchors.supabase_client import StoreError, error_message

log = logging.getLogger(__name__)

TOTAL_STEPS = 3

STEP_TITLES = {
    1: "Personal Details",
    2: "Account Credentials",
    3: "Role, Team & ID Documents",
}

STEP_FIELDS = {
    1: ["full_name", "email", "id_number", "phone_number", "mobigo_number"],
    2: ["password", "confirm_password"],
    3: ["role", "team_id", "staff_type", "van_number", "van_location"],
}

REQUIRED_FIELDS = {
    1: ["full_name", "email", "id_number", "phone_number"],
    2: ["password", "confirm_password"],
    3: ["role"],
}

FIELD_LABELS = {
    "full_name": "Full name",
    "email": "Email",
    "id_number": "ID number",
    "phone_number": "Phone number",
    "mobigo_number": "Mobigo number",
    "password": "Password",
    "confirm_password": "Confirm password",
    "role": "Role",
    "team_id": "Team",
    "staff_type": "Staff type",
    "van_number": "Van number",
    "van_location": "Van location",
}

# slot → storage file stem
ATTACHMENT_SLOTS = {
    "id_front": "id_front",
    "id_back": "id_back",
}
REQUIRED_ATTACHMENTS = ("id_front", "id_back")

ROLES = ["admin", "team_leader", "staff"]
STAFF_TYPES = ["", "van_ba", "mpesa_only_agent"]

MIN_PASSWORD_LENGTH = 8

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^(\+\d{1,3})?\d{9,12}$")

EDITING = "editing"
SUBMITTING = "submitting"
SUCCEEDED = "succeeded"


def generate_password(length=12):
    """Random password with at least one upper, lower, digit and symbol."""
    symbols = "!@#$%^&*()_+[]{}|;:,.<>?"
    pools = [string.ascii_uppercase, string.ascii_lowercase, string.digits, symbols]
    chars = [secrets.choice(pool) for pool in pools]
    alphabet = "".join(pools)
    chars += [secrets.choice(alphabet) for _ in range(max(0, length - len(chars)))]
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)


def generate_upload_key():
    """Folder key for one wizard's ID images, e.g. team-123-456-789."""
    parts = [str(100 + secrets.randbelow(900)) for _ in range(3)]
    return "team-" + "-".join(parts)


def password_strength(password):
    """(is_valid, message) for the password rule."""
    if len(password or "") < MIN_PASSWORD_LENGTH:
        return False, f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    return True, "Strong password"


@dataclass
class Attachment:
    name: str
    content: bytes
    mime_type: str
    preview: str = None

    @property
    def extension(self):
        if "." in self.name:
            return self.name.rsplit(".", 1)[-1].lower()
        return "bin"


@dataclass
class StepValidation:
    ok: bool
    errors: dict = field(default_factory=dict)


class CreateUserWizard:

    def __init__(self, defaults=None, on_created=None, notify=None):
        self.on_created = on_created
        self.notify = notify
        self.initialize(defaults)

    def initialize(self, defaults=None):
        password = generate_password()
        self.fields = {
            "full_name": "",
            "email": "",
            "id_number": "",
            "phone_number": "",
            "mobigo_number": "",
            "password": password,
            "confirm_password": password,
            "role": "staff",
            "team_id": "",
            "staff_type": "",
            "van_number": "",
            "van_location": "",
        }
        self.fields.update(defaults or {})
        self.current_step = 1
        self.touched = {}
        self.attachments = {}
        self.error = None
        self.status = EDITING
        self.created = None
        self.upload_key = generate_upload_key()

    # ── Input ────────────────────────────────────────────────

    @property
    def progress(self):
        return self.current_step / TOTAL_STEPS

    @property
    def is_last_step(self):
        return self.current_step == TOTAL_STEPS

    def update_field(self, name, value):
        if name not in self.fields:
            raise KeyError(f"Unknown field: {name}")
        self.fields[name] = value
        self.touched[name] = True

    def set_attachment(self, slot, name, content, mime_type="application/octet-stream"):
        if slot not in ATTACHMENT_SLOTS:
            raise KeyError(f"Unknown attachment slot: {slot}")
        if not content:
            self.clear_attachment(slot)
            return None
        self.clear_attachment(slot)
        encoded = base64.b64encode(content).decode("ascii")
        attachment = Attachment(
            name=name,
            content=content,
            mime_type=mime_type,
            preview=f"data:{mime_type};base64,{encoded}",
        )
        self.attachments[slot] = attachment
        return attachment

    def clear_attachment(self, slot):
        attachment = self.attachments.pop(slot, None)
        if attachment is not None:
            attachment.preview = None

    def missing_attachments(self):
        return [s for s in REQUIRED_ATTACHMENTS if s not in self.attachments]

    # ── Validation ───────────────────────────────────────────

    def validate_step(self, step):
        f = self.fields
        touched = self.touched
        errors = {}

        for name in REQUIRED_FIELDS.get(step, []):
            if not str(f.get(name) or "").strip():
                errors[name] = f"{FIELD_LABELS[name]} is required"

        if step == 1:
            if "email" not in errors and touched.get("email") and not EMAIL_RE.match(f["email"]):
                errors["email"] = "Please enter a valid email address"
            if "phone_number" not in errors and touched.get("phone_number") \
                    and not PHONE_RE.match(f["phone_number"]):
                errors["phone_number"] = "Please enter a valid phone number"

        elif step == 2:
            if "password" not in errors:
                ok, msg = password_strength(f["password"])
                if not ok:
                    errors["password"] = msg
            if touched.get("confirm_password") and f["password"] != f["confirm_password"]:
                errors["confirm_password"] = "Passwords do not match"

        elif step == 3:
            if f.get("role") and f["role"] not in ROLES:
                errors["role"] = "Unknown role"
            for slot in self.missing_attachments():
                errors[slot] = "Both front and back ID images are required"

        return StepValidation(ok=not errors, errors=errors)

    def first_invalid_step(self):
        for step in range(1, TOTAL_STEPS + 1):
            if not self.validate_step(step).ok:
                return step
        return None

    # ── Navigation ───────────────────────────────────────────

    def go_next(self, artifacts=None, records=None):
        """
        Advance one step if the current step is valid.
        On the last step this submits. Returns True when the step changed
        or the submission succeeded.
        """
        if not self.validate_step(self.current_step).ok:
            return False
        if self.is_last_step:
            return self.submit(artifacts, records)
        self.current_step += 1
        self.error = None
        return True

    def go_previous(self):
        if self.current_step <= 1:
            return False
        self.current_step -= 1
        self.error = None
        return True

    # ── Submission ───────────────────────────────────────────

    def build_record(self, urls):
        f = self.fields
        record = {
            "full_name": f["full_name"].strip(),
            "email": f["email"].strip(),
            "id_number": f["id_number"].strip(),
            "phone_number": f["phone_number"].strip(),
            "mobigo_number": f["mobigo_number"].strip() or None,
            "role": f["role"],
            "team_id": f["team_id"] or None,
            "staff_type": f["staff_type"] or None,
            "van_number": f["van_number"].strip() or None,
            "van_location": f["van_location"].strip() or None,
            "password": f["password"],
            "id_front_url": urls["id_front"],
            "id_back_url": urls["id_back"],
        }
        return record

    def submit(self, artifacts, records):
        """
        Upload both ID images in order, then create the user.
        Any failure leaves the wizard on the last step with all input kept.
        """
        if not self.is_last_step:
            raise RuntimeError("submit() is only allowed on the last step")
        if self.status == SUBMITTING:
            return False

        if self.missing_attachments():
            self.error = "Both front and back ID images are required"
            return False
        bad_step = self.first_invalid_step()
        if bad_step is not None:
            errors = self.validate_step(bad_step).errors
            self.error = next(iter(errors.values()))
            return False

        self.status = SUBMITTING
        self.error = None

        uploaded = []
        urls = {}
        for slot in REQUIRED_ATTACHMENTS:
            attachment = self.attachments[slot]
            path = f"{self.upload_key}/{ATTACHMENT_SLOTS[slot]}.{attachment.extension}"
            try:
                urls[slot] = artifacts.upload(path, attachment.content, attachment.mime_type)
            except Exception as e:
                self._retract(artifacts, uploaded)
                return self._fail(error_message(e), e)
            uploaded.append(path)

        try:
            created = records.create(self.build_record(urls))
        except Exception as e:
            # a retry uploads both images again
            self._retract(artifacts, uploaded)
            return self._fail(error_message(e), e)

        self.status = SUCCEEDED
        self.created = created
        for slot in list(self.attachments):
            self.clear_attachment(slot)
        if self.notify:
            self.notify("success", f"User {self.fields['full_name'].strip()} created successfully")
        if self.on_created:
            self.on_created(created)
        return True

    def _fail(self, message, exc=None):
        if exc is not None and not isinstance(exc, StoreError):
            log.exception("Create user failed: %s", message)
        self.status = EDITING
        self.error = message
        if self.notify:
            self.notify("error", message)
        return False

    def _retract(self, artifacts, paths):
        if not paths:
            return
        try:
            artifacts.remove(paths)
        except Exception as e:
            log.warning("Could not remove orphaned uploads %s: %s", paths, error_message(e))
