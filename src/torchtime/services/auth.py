"""Registration, login and logout against the local user list.

Passwords are kept and compared in plaintext; this is a local tool for a
gaming table, not an authentication system.
"""

from __future__ import annotations

from torchtime.core.constants import MAX_USERNAME_LENGTH
from torchtime.core.exceptions import AuthenticationError, ValidationError
from torchtime.core.logging import get_logger
from torchtime.core.validation import check_length
from torchtime.models.campaign import User
from torchtime.models.enums import Role
from torchtime.models.state import AppState


logger = get_logger(__name__)


def register(state: AppState, username: str, password: str, role: Role | str = Role.PLAYER) -> User:
    """Create a user and log them in.

    Raises:
        ValidationError: If a field is empty, the username is too long or
            taken (case-insensitively), or the role is unknown.
    """
    username = (username or "").strip()
    if not username or not password:
        raise ValidationError("Please fill out all fields.")
    check_length(username, MAX_USERNAME_LENGTH, field_name="username", label="Username")
    try:
        role = Role(role)
    except ValueError:
        raise ValidationError("Unknown role", field_name="role", invalid_value=role) from None
    if state.find_user_by_username(username) is not None:
        raise ValidationError(
            "Username already exists.", field_name="username", invalid_value=username
        )

    user = User(username=username, password=password, role=role)
    state.users.append(user)
    state.current_user_id = user.id

    logger.info("User registered", user_id=user.id, role=str(role))
    return user


def login(state: AppState, username: str, password: str) -> User:
    """Log in by username (any case) and exact password.

    Raises:
        AuthenticationError: If no user matches.
    """
    user = state.find_user_by_username(username or "")
    if user is None or user.password != password:
        logger.info("Login failed", username=(username or "").strip())
        raise AuthenticationError("Invalid username or password.")

    state.current_user_id = user.id
    logger.info("User logged in", user_id=user.id)
    return user


def logout(state: AppState) -> None:
    if state.current_user_id is not None:
        logger.info("User logged out", user_id=state.current_user_id)
    state.current_user_id = None


def require_user(state: AppState) -> User:
    """The logged-in user.

    Raises:
        AuthenticationError: If nobody is logged in or the user was removed.
    """
    user = state.current_user()
    if user is None:
        raise AuthenticationError("Please log in first.")
    return user


__all__ = [
    "register",
    "login",
    "logout",
    "require_user",
]
