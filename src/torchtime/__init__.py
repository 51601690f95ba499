"""TorchTime - campaign scheduling and character management for D&D groups.

Players and DMs share campaigns, vote on session times, keep notes and
chat, and manage 5E characters backed by the public reference API.

Example:
    >>> from torchtime import AppState, register, create_campaign
    >>> from torchtime.engine import OptionDraft, create_proposal, finalize
    >>>
    >>> state = AppState()
    >>> dm = register(state, "morgan", "secret", "dm")
    >>> campaign = create_campaign(state, dm.id, "Lost Mines")
    >>> proposal = create_proposal(state, campaign.id, dm.id, "Session 1", [draft])
    >>> session = finalize(state, proposal.id, dm.id)

Modules:
    core: Configuration, logging, constants and base exceptions.
    models: Pydantic V2 schemas and the AppState document.
    storage: SQLite-backed key/value storage and the state store.
    engine: Voting, leveling, dice and timer logic.
    reference: D&D 5e reference API client.
    services: Auth, campaign and character operations.
    ui: Streamlit interface and fragment router.
"""

from __future__ import annotations

# Core
from torchtime.core.config import Settings, get_settings
from torchtime.core.exceptions import TorchTimeError
from torchtime.core.logging import configure_logging, get_logger

# Models
from torchtime.models.state import AppState

# Services
from torchtime.services.auth import login, logout, register
from torchtime.services.campaigns import create_campaign
from torchtime.services.characters import create_character

# Storage
from torchtime.storage.database import StateStore, get_state_store


__version__ = "0.1.0"
__all__ = [
    "__version__",
    # Core
    "TorchTimeError",
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Models
    "AppState",
    # Services
    "login",
    "logout",
    "register",
    "create_campaign",
    "create_character",
    # Storage
    "StateStore",
    "get_state_store",
]
