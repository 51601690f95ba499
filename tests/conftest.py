"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the TorchTime test suite.
"""

from __future__ import annotations

from datetime import date, time
from typing import TYPE_CHECKING, Any

import pytest


if TYPE_CHECKING:
    from collections.abc import Generator

    from torchtime.models.campaign import Campaign, User
    from torchtime.models.state import AppState
    from torchtime.storage.database import StateStore


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache and store singleton around each test."""
    from torchtime.core.config import clear_settings_cache
    from torchtime.storage.database import reset_state_store

    clear_settings_cache()
    reset_state_store()
    yield
    clear_settings_cache()
    reset_state_store()


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "TORCHTIME_DEBUG": "true",
        "TORCHTIME_LOG_LEVEL": "DEBUG",
        "TORCHTIME_API_BASE_URL": "https://example.test/api/",
        "TORCHTIME_GAME_DICE_LOG_LIMIT": "50",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


# =============================================================================
# Reference Data
# =============================================================================


FIGHTER_FEATURES: dict[int, list[str]] = {
    1: ["Fighting Style", "Second Wind"],
    2: ["Action Surge (1 use)"],
    3: ["Martial Archetype"],
    4: ["Ability Score Improvement"],
    5: ["Extra Attack"],
    6: ["Ability Score Improvement"],
}


class FakeReferenceClient:
    """In-memory stand-in for DndApiClient with canned 5e payloads."""

    def __init__(self, features: dict[int, list[str]] | None = None) -> None:
        self.features = FIGHTER_FEATURES if features is None else features
        self.feature_calls: list[tuple[str, int]] = []

    def list_races(self) -> list[dict[str, Any]]:
        return [
            {"index": "dwarf", "name": "Dwarf", "url": "/api/races/dwarf"},
            {"index": "elf", "name": "Elf", "url": "/api/races/elf"},
        ]

    def get_race(self, race_index: str) -> dict[str, Any]:
        races = {
            "dwarf": {
                "index": "dwarf",
                "name": "Dwarf",
                "ability_bonuses": [{"ability_score": {"index": "con", "name": "CON"}, "bonus": 2}],
            },
            "elf": {
                "index": "elf",
                "name": "Elf",
                "ability_bonuses": [{"ability_score": {"index": "dex", "name": "DEX"}, "bonus": 2}],
            },
        }
        return races.get(race_index, {})

    def list_classes(self) -> list[dict[str, Any]]:
        return [{"index": "fighter", "name": "Fighter", "url": "/api/classes/fighter"}]

    def get_class(self, class_index: str) -> dict[str, Any]:
        if class_index == "fighter":
            return {"index": "fighter", "name": "Fighter", "hit_die": 10}
        return {}

    def list_subclasses(self, class_index: str) -> list[dict[str, Any]]:
        if class_index == "fighter":
            return [{"index": "champion", "name": "Champion"}]
        return []

    def get_class_level_features(self, class_index: str, level: int) -> list[str]:
        self.feature_calls.append((class_index, level))
        return list(self.features.get(level, []))

    def list_equipment(self) -> list[dict[str, Any]]:
        return [
            {"index": "longsword", "name": "Longsword"},
            {"index": "rope-hempen-50-feet", "name": "Rope, hempen (50 feet)"},
        ]

    def get_equipment(self, equipment_index: str) -> dict[str, Any]:
        return {"index": equipment_index, "name": equipment_index.title()}


@pytest.fixture
def reference_client() -> FakeReferenceClient:
    """Provide a fake reference client."""
    return FakeReferenceClient()


# =============================================================================
# State Fixtures
# =============================================================================


@pytest.fixture
def state() -> AppState:
    """Provide an empty application state."""
    from torchtime.models.state import AppState

    return AppState()


@pytest.fixture
def dm_user(state: AppState) -> User:
    """Register a DM in the state."""
    from torchtime.models.campaign import User
    from torchtime.models.enums import Role

    user = User(username="Morgan", password="dragons", role=Role.DM)
    state.users.append(user)
    return user


@pytest.fixture
def player_user(state: AppState) -> User:
    """Register a player in the state."""
    from torchtime.models.campaign import User

    user = User(username="Riley", password="hunter2")
    state.users.append(user)
    return user


@pytest.fixture
def second_player(state: AppState) -> User:
    """Register a second player in the state."""
    from torchtime.models.campaign import User

    user = User(username="Sam", password="pw")
    state.users.append(user)
    return user


@pytest.fixture
def campaign(state: AppState, dm_user: User, player_user: User) -> Campaign:
    """Provide a campaign run by dm_user with player_user in it."""
    from torchtime.models.campaign import Campaign

    campaign = Campaign(
        name="Lost Mine of Phandelver",
        description="Goblins and a missing dwarf.",
        dm_id=dm_user.id,
        player_ids=[player_user.id],
    )
    state.campaigns.append(campaign)
    return campaign


@pytest.fixture
def option_drafts() -> list[Any]:
    """Provide three candidate session times."""
    from torchtime.engine.voting import OptionDraft

    return [
        OptionDraft(date(2025, 3, 7), time(19, 0), time(23, 0), "Morgan's place"),
        OptionDraft(date(2025, 3, 8), time(18, 30), None, "Game store"),
        OptionDraft(date(2025, 3, 9), time(14, 0), time(18, 0), ""),
    ]


@pytest.fixture
def memory_store() -> StateStore:
    """Provide a state store over in-memory storage."""
    from torchtime.storage.database import LocalStorage, StateStore

    return StateStore(LocalStorage(":memory:"))
