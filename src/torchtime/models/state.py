"""The application state document.

AppState mirrors the persisted JSON document and is the single source of
truth for every view. Lookups are linear scans over small lists.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from torchtime.core.exceptions import EntityNotFoundError
from torchtime.models.campaign import (
    Campaign,
    ScheduledSession,
    SessionProposal,
    User,
    new_id,
)
from torchtime.models.character import Character


class DiceRollLogEntry(BaseModel):
    """One roll in the shared dice log.

    Attributes:
        id: Unique entry identifier.
        timestamp: When the roll happened.
        user_id: Who rolled.
        expression: Dice expression as entered.
        total: Computed total.
        is_critical: A d20 in the roll came up 20.
    """

    model_config = ConfigDict(extra="forbid")

    id: str = Field(default_factory=new_id)
    timestamp: datetime = Field(default_factory=datetime.now)
    user_id: str | None = None
    expression: str
    total: int
    is_critical: bool = False


class AppState(BaseModel):
    """Everything TorchTime persists, stored as one JSON document."""

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    users: list[User] = Field(default_factory=list)
    campaigns: list[Campaign] = Field(default_factory=list)
    sessions: list[ScheduledSession] = Field(default_factory=list)
    proposals: list[SessionProposal] = Field(default_factory=list)
    characters: list[Character] = Field(default_factory=list)
    dice_log: list[DiceRollLogEntry] = Field(default_factory=list)
    current_user_id: str | None = None

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def get_user(self, user_id: str | None) -> User | None:
        return next((u for u in self.users if u.id == user_id), None)

    def find_user_by_username(self, username: str) -> User | None:
        """Find a user by name, ignoring case and surrounding whitespace."""
        wanted = username.strip().lower()
        return next((u for u in self.users if u.username.lower() == wanted), None)

    def get_campaign(self, campaign_id: str | None) -> Campaign | None:
        return next((c for c in self.campaigns if c.id == campaign_id), None)

    def get_proposal(self, proposal_id: str | None) -> SessionProposal | None:
        return next((p for p in self.proposals if p.id == proposal_id), None)

    def get_session(self, session_id: str | None) -> ScheduledSession | None:
        return next((s for s in self.sessions if s.id == session_id), None)

    def get_character(self, character_id: str | None) -> Character | None:
        return next((c for c in self.characters if c.id == character_id), None)

    def current_user(self) -> User | None:
        """The logged-in user, if any."""
        return self.get_user(self.current_user_id)

    # -------------------------------------------------------------------------
    # Strict lookups
    # -------------------------------------------------------------------------

    def require_campaign(self, campaign_id: str | None) -> Campaign:
        """Get a campaign or raise EntityNotFoundError."""
        campaign = self.get_campaign(campaign_id)
        if campaign is None:
            raise EntityNotFoundError(
                "Campaign not found", entity_type="campaign", entity_id=campaign_id
            )
        return campaign

    def require_proposal(self, proposal_id: str | None) -> SessionProposal:
        """Get a proposal or raise EntityNotFoundError."""
        proposal = self.get_proposal(proposal_id)
        if proposal is None:
            raise EntityNotFoundError(
                "Session proposal not found", entity_type="proposal", entity_id=proposal_id
            )
        return proposal

    def require_character(self, character_id: str | None) -> Character:
        """Get a character or raise EntityNotFoundError."""
        character = self.get_character(character_id)
        if character is None:
            raise EntityNotFoundError(
                "Character not found", entity_type="character", entity_id=character_id
            )
        return character


__all__ = [
    "DiceRollLogEntry",
    "AppState",
]
