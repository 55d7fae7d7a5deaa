"""Registration, login and the per-request view of who is logged in.

Views never touch the Flask session directly.  They get a
:class:`SessionContext`: a read-only snapshot of the session taken when the
request starts, plus the changes to write back when the response goes out.
"""
from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import Dict, List, Mapping, MutableMapping, Optional, Tuple

import config
from cipher import Cipher, hash_password, verify_password
from errors import (
    DuplicateEmail,
    DuplicateUsername,
    InvalidCredentials,
    PasswordMismatch,
    ValidationError,
)
from store import USERS, RecordStore

log = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
REGISTER_FIELDS = (
    "firstName",
    "lastName",
    "username",
    "email",
    "password",
    "confirmPassword",
)
PASSWORD_FIELDS = ("password", "confirmPassword")


class SessionContext:
    def __init__(self, snapshot: Mapping):
        self.snapshot = MappingProxyType(dict(snapshot))
        self.changes: List[Tuple] = []

    def get(self, key: str, default=None):
        """Read a value as it will look once pending changes are applied."""
        value = self.snapshot.get(key, default)
        for change in self.changes:
            if change[0] == "clear":
                value = default
            elif change[1] == key:
                value = change[2] if change[0] == "set" else default
        return value

    def set(self, key: str, value) -> None:
        self.changes.append(("set", key, value))

    def pop(self, key: str) -> None:
        self.changes.append(("pop", key))

    def clear(self) -> None:
        self.changes.append(("clear",))

    def apply_to(self, session: MutableMapping) -> None:
        for change in self.changes:
            if change[0] == "clear":
                session.clear()
            elif change[0] == "set":
                session[change[1]] = change[2]
            else:
                session.pop(change[1], None)
        self.changes = []


def find_user(users: List[Dict], username: str) -> Optional[Dict]:
    for user in users:
        if user.get("username") == username:
            return user
    return None


def find_user_by_email(users: List[Dict], cipher: Cipher, email: str) -> Optional[Dict]:
    # Emails are stored encrypted with a random IV, so the only lookup is a scan
    for user in users:
        if cipher.matches(user.get("email"), email):
            return user
    return None


def _start_session(ctx: SessionContext, user: Dict, message: str) -> None:
    ctx.set("username", user["username"])
    ctx.set("welcomeMessage", message)
    ctx.set("showWelcome", True)


def register(store: RecordStore, cipher: Cipher, ctx: SessionContext, form: Mapping) -> Dict:
    values = {field: (form.get(field) or "") for field in REGISTER_FIELDS}
    for field in REGISTER_FIELDS:
        if field not in PASSWORD_FIELDS:
            values[field] = values[field].strip()
    if not all(values[field].strip() for field in REGISTER_FIELDS):
        raise ValidationError()

    users = store.load(USERS)
    if find_user(users, values["username"]):
        raise DuplicateUsername()
    if find_user_by_email(users, cipher, values["email"]):
        raise DuplicateEmail()
    if values["password"] != values["confirmPassword"]:
        raise PasswordMismatch()

    user = {
        "firstName": values["firstName"],
        "lastName": values["lastName"],
        "username": values["username"],
        "email": cipher.encrypt(values["email"]),
        "password": hash_password(values["password"]),
        "profilePicture": config.DEFAULT_PROFILE_PICTURE,
    }
    users.append(user)
    store.save(USERS, users)
    log.info("Registered user %s", user["username"])

    _start_session(ctx, user, f"Welcome, {user['firstName']}!")
    return user


def login(
    store: RecordStore,
    cipher: Cipher,
    ctx: SessionContext,
    username_or_email: str,
    password: str,
) -> Dict:
    username_or_email = username_or_email or ""
    users = store.load(USERS)
    if EMAIL_RE.match(username_or_email):
        user = find_user_by_email(users, cipher, username_or_email)
    else:
        user = find_user(users, username_or_email)

    if not user or not verify_password(password or "", user.get("password")):
        if EMAIL_RE.match(username_or_email):
            log.info("Failed login by email")
        else:
            log.info("Failed login for %r", username_or_email)
        raise InvalidCredentials()

    ctx.clear()
    _start_session(ctx, user, f"Welcome back, {user['firstName']}!")
    log.info("User %s logged in", user["username"])
    return user


def logout(ctx: SessionContext) -> bool:
    """Forget everything in the session. Returns whether anyone was logged in."""
    was_logged_in = ctx.get("username") is not None
    ctx.clear()
    return was_logged_in


def public_profile(user: Dict) -> Dict:
    return {
        "firstName": user.get("firstName"),
        "username": user.get("username"),
        "profilePicture": user.get("profilePicture") or config.DEFAULT_PROFILE_PICTURE,
    }


def current_user(store: RecordStore, ctx: SessionContext) -> Optional[Dict]:
    """Rebuild the logged-in user's view model from the users table."""
    username = ctx.get("username")
    if not username:
        return None
    user = find_user(store.load(USERS), username)
    return public_profile(user) if user else None


def pop_welcome(ctx: SessionContext) -> Optional[str]:
    message = ctx.get("welcomeMessage") if ctx.get("showWelcome") else None
    for key in ("welcomeMessage", "showWelcome"):
        if ctx.get(key) is not None:
            ctx.pop(key)
    return message
