"""Pydantic V2 data models for TorchTime.

Modules:
    enums: Roles, vote choices and abilities.
    campaign: Users, campaigns, proposals and scheduled sessions.
    character: Ability scores, inventory and character sheets.
    state: The persisted application state document.
"""

from __future__ import annotations

from torchtime.models.campaign import (
    Campaign,
    CampaignNotes,
    ChatMessage,
    ScheduledSession,
    SessionProposal,
    TimeOption,
    User,
    new_id,
)
from torchtime.models.character import AbilityScores, Character, InventoryItem
from torchtime.models.enums import Ability, Role, VoteChoice
from torchtime.models.state import AppState, DiceRollLogEntry


__all__ = [
    # Enums
    "Ability",
    "Role",
    "VoteChoice",
    # Campaign & scheduling
    "new_id",
    "User",
    "Campaign",
    "CampaignNotes",
    "ChatMessage",
    "TimeOption",
    "SessionProposal",
    "ScheduledSession",
    # Characters
    "AbilityScores",
    "InventoryItem",
    "Character",
    # State
    "DiceRollLogEntry",
    "AppState",
]
