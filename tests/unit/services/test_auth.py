"""Tests for registration and login."""

from __future__ import annotations

import pytest

from torchtime.core.exceptions import AuthenticationError, ValidationError
from torchtime.models.enums import Role
from torchtime.services.auth import login, logout, register, require_user


class TestRegister:
    def test_register_logs_in(self, state) -> None:
        user = register(state, "  Morgan ", "secret", "dm")

        assert user.username == "Morgan"
        assert user.role is Role.DM
        assert state.current_user_id == user.id
        assert state.users == [user]

    def test_defaults_to_player(self, state) -> None:
        assert register(state, "Riley", "pw").role is Role.PLAYER

    def test_username_unique_ignoring_case(self, state) -> None:
        register(state, "Morgan", "secret")

        with pytest.raises(ValidationError) as exc_info:
            register(state, "MORGAN", "other")

        assert exc_info.value.message == "Username already exists."
        assert len(state.users) == 1

    @pytest.mark.parametrize(("username", "password"), [("", "pw"), ("   ", "pw"), ("name", "")])
    def test_required_fields(self, state, username: str, password: str) -> None:
        with pytest.raises(ValidationError):
            register(state, username, password)

    def test_unknown_role(self, state) -> None:
        with pytest.raises(ValidationError):
            register(state, "Riley", "pw", "bard")

    def test_long_username_rejected(self, state) -> None:
        with pytest.raises(ValidationError) as exc_info:
            register(state, "r" * 101, "pw")

        assert exc_info.value.details["field_name"] == "username"
        assert state.users == []


class TestLogin:
    def test_login_case_insensitive_username(self, state, dm_user) -> None:
        user = login(state, "morgan", "dragons")

        assert user is dm_user
        assert state.current_user_id == dm_user.id

    def test_password_is_exact(self, state, dm_user) -> None:
        with pytest.raises(AuthenticationError):
            login(state, "Morgan", "Dragons")
        assert state.current_user_id is None

    def test_unknown_user(self, state) -> None:
        with pytest.raises(AuthenticationError):
            login(state, "ghost", "boo")

    def test_logout(self, state, dm_user) -> None:
        login(state, "Morgan", "dragons")

        logout(state)

        assert state.current_user_id is None

    def test_require_user(self, state, dm_user) -> None:
        with pytest.raises(AuthenticationError):
            require_user(state)

        state.current_user_id = dm_user.id
        assert require_user(state) is dm_user

    def test_require_user_when_user_removed(self, state) -> None:
        state.current_user_id = "deleted-user"

        with pytest.raises(AuthenticationError):
            require_user(state)
