"""Pydantic V2 schemas for users, campaigns, and session scheduling.

A campaign is owned by its DM and lists its players. Sessions are either
scheduled directly by the DM or produced by finalizing a proposal the
group has voted on.
"""

from __future__ import annotations

import datetime as dt
from datetime import datetime, time
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

from torchtime.core.constants import (
    MAX_DESCRIPTION_LENGTH,
    MAX_LOCATION_LENGTH,
    MAX_TITLE_LENGTH,
    MAX_USERNAME_LENGTH,
)
from torchtime.models.enums import Role, VoteChoice


def new_id() -> str:
    """Generate a new entity identifier."""
    return uuid4().hex


class User(BaseModel):
    """Registered user.

    Attributes:
        id: Unique user identifier.
        username: Login name, unique case-insensitively.
        password: Plaintext password.
        role: Role picked at registration.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    id: str = Field(default_factory=new_id, description="Unique user ID")
    username: str = Field(min_length=1, max_length=MAX_USERNAME_LENGTH, description="Login name")
    password: str = Field(min_length=1, description="Plaintext password")
    role: Role = Field(default=Role.PLAYER, description="DM or player")


class CampaignNotes(BaseModel):
    """Shared notes plus one private note per user."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    shared: str = Field(default="", description="Notes visible to every member")
    private: dict[str, str] = Field(default_factory=dict, description="Private notes by user ID")


class ChatMessage(BaseModel):
    """A message in a campaign's chat."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(default_factory=new_id)
    user_id: str
    text: str = Field(min_length=1)
    timestamp: datetime = Field(default_factory=datetime.now)


class Campaign(BaseModel):
    """Campaign metadata, membership, notes, and chat.

    Attributes:
        id: Unique campaign identifier.
        name: Campaign name.
        description: Campaign description/premise.
        dm_id: User ID of the owning Dungeon Master.
        player_ids: User IDs of the players.
        notes: Shared and private notes.
        messages: Chat messages in insertion order.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    id: str = Field(default_factory=new_id, description="Unique campaign ID")
    name: str = Field(min_length=1, max_length=MAX_TITLE_LENGTH, description="Campaign name")
    description: str = Field(default="", max_length=MAX_DESCRIPTION_LENGTH, description="Campaign description")
    dm_id: str = Field(description="Owner / DM user ID")
    player_ids: list[str] = Field(default_factory=list, description="Player user IDs")
    notes: CampaignNotes = Field(default_factory=CampaignNotes)
    messages: list[ChatMessage] = Field(default_factory=list)

    def is_dm(self, user_id: str | None) -> bool:
        """Check whether the user owns this campaign."""
        return user_id is not None and self.dm_id == user_id

    def is_member(self, user_id: str | None) -> bool:
        """Check whether the user is the DM or one of the players."""
        return self.is_dm(user_id) or (user_id is not None and user_id in self.player_ids)


class TimeOption(BaseModel):
    """One candidate time slot of a session proposal.

    Attributes:
        id: Unique option identifier.
        date: Calendar day of the session.
        start: Local start time.
        end: Optional local end time.
        location: Where the group meets (free text, may be empty).
        created_by: User who proposed this slot.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    id: str = Field(default_factory=new_id)
    date: dt.date
    start: time
    end: time | None = None
    location: str = Field(default="", max_length=MAX_LOCATION_LENGTH)
    created_by: str | None = None

    @property
    def starts_at(self) -> datetime:
        """Concrete start date-time derived from the date and start fields."""
        return datetime.combine(self.date, self.start)

    @property
    def ends_at(self) -> datetime | None:
        """Concrete end date-time, if an end time was given."""
        if self.end is None:
            return None
        return datetime.combine(self.date, self.end)


class SessionProposal(BaseModel):
    """A set of candidate time slots for a future session, open for voting.

    Votes are a map option_id -> user_id -> choice; each user has at most
    one choice per option.

    Attributes:
        id: Unique proposal identifier.
        campaign_id: Campaign the session belongs to.
        title: Session title.
        options: Candidate time slots.
        votes: Tagged vote per (option, user) pair.
        finalized: Whether the proposal is locked.
        chosen_index: Index into options of the chosen slot once finalized.
        scheduled_session_id: Session created by finalization.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    id: str = Field(default_factory=new_id)
    campaign_id: str
    title: str = Field(min_length=1, max_length=MAX_TITLE_LENGTH)
    options: list[TimeOption] = Field(default_factory=list)
    votes: dict[str, dict[str, VoteChoice]] = Field(default_factory=dict)
    finalized: bool = False
    chosen_index: int | None = None
    scheduled_session_id: str | None = None

    @model_validator(mode="after")
    def validate_chosen_index(self) -> SessionProposal:
        """A finalized proposal must point at one of its options."""
        if self.finalized and (
            self.chosen_index is None or not 0 <= self.chosen_index < len(self.options)
        ):
            raise ValueError("finalized proposal needs a chosen_index within its options")
        return self

    def get_option(self, option_id: str) -> TimeOption | None:
        """Find an option by ID."""
        return next((o for o in self.options if o.id == option_id), None)

    def vote_of(self, option_id: str, user_id: str) -> VoteChoice | None:
        """Get a user's current choice for an option."""
        return self.votes.get(option_id, {}).get(user_id)

    def buckets(self, option_id: str) -> dict[VoteChoice, list[str]]:
        """Group the voters of one option into yes/maybe/no lists."""
        grouped: dict[VoteChoice, list[str]] = {choice: [] for choice in VoteChoice}
        for user_id, choice in self.votes.get(option_id, {}).items():
            grouped[choice].append(user_id)
        return grouped

    def count(self, option_id: str, choice: VoteChoice) -> int:
        """Count the votes of one kind on one option."""
        return sum(1 for c in self.votes.get(option_id, {}).values() if c is choice)

    @property
    def chosen_option(self) -> TimeOption | None:
        """The finalized option, if any."""
        if not self.finalized or self.chosen_index is None:
            return None
        return self.options[self.chosen_index]


class ScheduledSession(BaseModel):
    """A session on the calendar.

    Attributes:
        id: Unique session identifier.
        campaign_id: Campaign the session belongs to.
        title: Session title.
        starts_at: Concrete start date-time.
        ends_at: Optional end date-time.
        location: Meeting place.
        proposal_id: Proposal this came from, None if scheduled directly.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    id: str = Field(default_factory=new_id)
    campaign_id: str
    title: str = Field(min_length=1, max_length=MAX_TITLE_LENGTH)
    starts_at: datetime
    ends_at: datetime | None = None
    location: str = Field(default="", max_length=MAX_LOCATION_LENGTH)
    proposal_id: str | None = None

    @property
    def dedup_key(self) -> tuple[datetime, str]:
        """Start time truncated to the minute plus location."""
        return (self.starts_at.replace(second=0, microsecond=0), self.location.strip().lower())


__all__ = [
    "new_id",
    "User",
    "CampaignNotes",
    "ChatMessage",
    "Campaign",
    "TimeOption",
    "SessionProposal",
    "ScheduledSession",
]
