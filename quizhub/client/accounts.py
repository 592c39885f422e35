"""
Login, registration and the local credential list.

Credentials travel and are stored in plaintext; the server compares them
as-is. This module only keeps the client's view of who is logged in.
"""
import logging

from quizhub.client.errors import AccessDenied, NotFound, RemoteError, ValidationFailed
from quizhub.client.schemas import CurrentUser
from quizhub.client.state import AppState
from quizhub.client.store import CURRENT_USER, USERS

logger = logging.getLogger(__name__)

ROLES = ("student", "teacher", "admin")


def _set_current(state: AppState, user: CurrentUser) -> CurrentUser:
    state.store.set(CURRENT_USER, user.model_dump(mode="json"))
    state.current_user = user
    return user


def login(state: AppState, username: str, password: str) -> CurrentUser:
    if not username or not password:
        raise ValidationFailed("Please enter username and password.")
    try:
        body = state.api.login(username, password)
    except RemoteError as e:
        if e.status == 401:
            raise AccessDenied("Invalid username or password.") from e
        raise
    logger.info("Logged in as %s", username)
    return _set_current(state, CurrentUser.model_validate(body))


def register(state: AppState, username: str, password: str, confirm: str, role: str = "student") -> CurrentUser:
    if not username or not password or not confirm:
        raise ValidationFailed("Please fill all required fields.")
    if password != confirm:
        raise ValidationFailed("Passwords do not match.")
    if role not in ROLES:
        raise ValidationFailed(f"Unknown role {role!r}.")
    try:
        body = state.api.register(username, password, role)
    except RemoteError as e:
        if e.status == 409:
            raise ValidationFailed("Username already exists.") from e
        raise
    users = state.store.get(USERS, []) or []
    users.append({"username": username, "password": password, "role": role})
    state.store.set(USERS, users)
    return _set_current(state, CurrentUser.model_validate(body))


def logout(state: AppState) -> None:
    state.store.remove(CURRENT_USER)
    state.current_user = None


def change_password(state: AppState, new_password: str, confirm: str) -> None:
    """Local-only: updates the credential list kept in the store."""
    if not new_password or not confirm:
        raise ValidationFailed("Please fill both fields.")
    if new_password != confirm:
        raise ValidationFailed("Passwords do not match.")
    username = state.username
    users = state.store.get(USERS, []) or []
    for user in users:
        if user.get("username") == username:
            user["password"] = new_password
            state.store.set(USERS, users)
            return
    raise NotFound("Local user not found; cannot change password here.")


def require_role(state: AppState, role: str) -> CurrentUser:
    if state.current_user is None or state.current_user.role != role:
        raise AccessDenied(f"Please log in as a {role}.")
    return state.current_user
