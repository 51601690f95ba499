"""Per-rerun application context handed to every view."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

import streamlit as st

from torchtime.core.config import Settings, get_settings
from torchtime.core.exceptions import StorageError
from torchtime.core.logging import get_logger
from torchtime.engine.dice import DiceRoller
from torchtime.engine.leveling import LevelingEngine
from torchtime.models.campaign import User
from torchtime.models.state import AppState
from torchtime.reference.client import DndApiClient
from torchtime.services.auth import require_user
from torchtime.storage.database import StateStore, get_state_store
from torchtime.ui.router import format_route, parse_route


logger = get_logger(__name__)


@dataclass
class AppContext:
    """Settings, loaded state and shared services for one render."""

    settings: Settings
    store: StateStore
    state: AppState
    client: DndApiClient
    roller: DiceRoller = field(default_factory=DiceRoller)

    @property
    def engine(self) -> LevelingEngine:
        return LevelingEngine(self.client)

    @property
    def user(self) -> User:
        """The logged-in user (views behind the login guard only)."""
        return require_user(self.state)

    def username(self, user_id: str | None) -> str:
        user = self.state.get_user(user_id)
        return user.username if user else "Unknown"

    def commit(self) -> bool:
        """Save the whole state document. Shows an error instead of raising."""
        try:
            self.store.save(self.state)
        except StorageError as exc:
            logger.error("State save failed", error=exc.message)
            st.error(f"Could not save: {exc.message}")
            return False
        return True

    def navigate(self, fragment: str) -> None:
        """Switch to another route and rerun the script."""
        route = parse_route(fragment, self.settings.ui.default_route)
        st.query_params.clear()
        st.query_params.update({"route": route.name, **route.params})
        st.rerun()

    def link(self, label: str, fragment: str, *, key: str, **kwargs) -> None:
        """A button that navigates to ``fragment``."""
        if st.button(label, key=key, **kwargs):
            self.navigate(fragment)


def current_fragment(query_params: Mapping[str, str]) -> str:
    """Rebuild the fragment from the page's query parameters."""
    params = {k: v for k, v in query_params.items() if k != "route"}
    return format_route(query_params.get("route", ""), params)


@st.cache_resource
def _reference_client() -> DndApiClient:
    return DndApiClient.from_settings()


def build_context() -> AppContext:
    """Load the state document and assemble the context for this rerun."""
    return AppContext(
        settings=get_settings(),
        store=get_state_store(),
        state=get_state_store().load(),
        client=_reference_client(),
    )


__all__ = [
    "AppContext",
    "build_context",
    "current_fragment",
]
