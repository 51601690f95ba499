"""Campaign membership, notes and chat."""

from __future__ import annotations

from typing import Iterable

from torchtime.core.constants import MAX_DESCRIPTION_LENGTH, MAX_TITLE_LENGTH
from torchtime.core.exceptions import (
    EntityNotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from torchtime.core.logging import get_logger
from torchtime.core.validation import check_length
from torchtime.models.campaign import Campaign, ChatMessage
from torchtime.models.state import AppState


logger = get_logger(__name__)


def parse_usernames(raw: str) -> list[str]:
    """Split a comma separated username list, dropping blanks."""
    return [name.strip() for name in (raw or "").split(",") if name.strip()]


def create_campaign(
    state: AppState,
    user_id: str,
    name: str,
    description: str = "",
    player_usernames: Iterable[str] = (),
) -> Campaign:
    """Create a campaign owned by ``user_id``.

    Unknown usernames are skipped; the DM is never added as a player.

    Raises:
        ValidationError: If the name is empty or a field is too long.
    """
    name = (name or "").strip()
    if not name:
        raise ValidationError("Campaign name is required", field_name="name")
    check_length(name, MAX_TITLE_LENGTH, field_name="name", label="Campaign name")
    description = check_length(
        (description or "").strip(),
        MAX_DESCRIPTION_LENGTH,
        field_name="description",
        label="Description",
    )

    player_ids: list[str] = []
    for username in player_usernames:
        user = state.find_user_by_username(username)
        if user is not None and user.id != user_id and user.id not in player_ids:
            player_ids.append(user.id)

    campaign = Campaign(
        name=name,
        description=description,
        dm_id=user_id,
        player_ids=player_ids,
    )
    state.campaigns.append(campaign)

    logger.info("Campaign created", campaign_id=campaign.id, players=len(player_ids))
    return campaign


def campaigns_for_user(state: AppState, user_id: str) -> list[Campaign]:
    """Campaigns the user runs or plays in."""
    return [c for c in state.campaigns if c.is_member(user_id)]


def delete_campaign(state: AppState, campaign_id: str, user_id: str) -> None:
    """Delete a campaign with its sessions and proposals (DM only).

    Characters in the campaign are kept but unassigned.
    """
    campaign = state.require_campaign(campaign_id)
    if not campaign.is_dm(user_id):
        raise PermissionDeniedError(
            "Only the campaign's DM can delete it", user_id=user_id, action="delete_campaign"
        )

    state.campaigns = [c for c in state.campaigns if c.id != campaign_id]
    state.sessions = [s for s in state.sessions if s.campaign_id != campaign_id]
    state.proposals = [p for p in state.proposals if p.campaign_id != campaign_id]
    for character in state.characters:
        if character.campaign_id == campaign_id:
            character.campaign_id = None

    logger.info("Campaign deleted", campaign_id=campaign_id)


def add_player(state: AppState, campaign_id: str, user_id: str, username: str) -> str:
    """Add a registered user to the campaign (DM only).

    Returns:
        The added player's user ID.

    Raises:
        EntityNotFoundError: If no user has that name.
        ValidationError: If the user is already in the campaign.
    """
    campaign = state.require_campaign(campaign_id)
    if not campaign.is_dm(user_id):
        raise PermissionDeniedError(
            "Only the campaign's DM can add players", user_id=user_id, action="add_player"
        )

    player = state.find_user_by_username(username or "")
    if player is None:
        raise EntityNotFoundError("User not found", entity_type="user", entity_id=username)
    if campaign.is_member(player.id):
        raise ValidationError("Player already in campaign", field_name="username")

    campaign.player_ids = [*campaign.player_ids, player.id]
    logger.info("Player added", campaign_id=campaign.id, player_id=player.id)
    return player.id


def _require_member(campaign: Campaign, user_id: str, action: str) -> None:
    if not campaign.is_member(user_id):
        raise PermissionDeniedError(
            "You are not part of this campaign", user_id=user_id, action=action
        )


def update_shared_notes(state: AppState, campaign_id: str, user_id: str, text: str) -> None:
    campaign = state.require_campaign(campaign_id)
    _require_member(campaign, user_id, "update_shared_notes")
    campaign.notes.shared = text or ""
    logger.info("Shared notes updated", campaign_id=campaign.id, user_id=user_id)


def update_private_notes(state: AppState, campaign_id: str, user_id: str, text: str) -> None:
    campaign = state.require_campaign(campaign_id)
    _require_member(campaign, user_id, "update_private_notes")
    campaign.notes.private = {**campaign.notes.private, user_id: text or ""}
    logger.info("Private notes updated", campaign_id=campaign.id, user_id=user_id)


def post_message(state: AppState, campaign_id: str, user_id: str, text: str) -> ChatMessage | None:
    """Append a chat message. Blank messages are ignored.

    Returns:
        The new message, or None when the text was blank.
    """
    campaign = state.require_campaign(campaign_id)
    _require_member(campaign, user_id, "post_message")

    text = (text or "").strip()
    if not text:
        return None

    message = ChatMessage(user_id=user_id, text=text)
    campaign.messages = [*campaign.messages, message]
    logger.info("Chat message posted", campaign_id=campaign.id, message_id=message.id)
    return message


def sorted_messages(campaign: Campaign) -> list[ChatMessage]:
    """Chat messages oldest first."""
    return sorted(campaign.messages, key=lambda m: m.timestamp)


__all__ = [
    "parse_usernames",
    "create_campaign",
    "campaigns_for_user",
    "delete_campaign",
    "add_player",
    "update_shared_notes",
    "update_private_notes",
    "post_message",
    "sorted_messages",
]
