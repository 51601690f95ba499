"""Tests for campaign membership, notes and chat."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from torchtime.core.exceptions import (
    EntityNotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from torchtime.engine.voting import create_proposal, schedule_session
from torchtime.models.campaign import ChatMessage
from torchtime.models.character import Character
from torchtime.services.campaigns import (
    add_player,
    campaigns_for_user,
    create_campaign,
    delete_campaign,
    parse_usernames,
    post_message,
    sorted_messages,
    update_private_notes,
    update_shared_notes,
)


class TestCreateCampaign:
    def test_unknown_usernames_ignored(self, state, dm_user, player_user) -> None:
        campaign = create_campaign(
            state, dm_user.id, " Curse of Strahd ", "Gothic", ["riley", "nobody", "Riley"]
        )

        assert campaign.name == "Curse of Strahd"
        assert campaign.dm_id == dm_user.id
        assert campaign.player_ids == [player_user.id]

    def test_dm_not_added_as_player(self, state, dm_user) -> None:
        campaign = create_campaign(state, dm_user.id, "Solo", player_usernames=["Morgan"])

        assert campaign.player_ids == []

    def test_name_required(self, state, dm_user) -> None:
        with pytest.raises(ValidationError):
            create_campaign(state, dm_user.id, "  ")

    def test_long_fields_rejected(self, state, dm_user) -> None:
        with pytest.raises(ValidationError) as exc_info:
            create_campaign(state, dm_user.id, "N" * 201)
        assert exc_info.value.details["field_name"] == "name"

        with pytest.raises(ValidationError) as exc_info:
            create_campaign(state, dm_user.id, "Curse of Strahd", "d" * 5001)
        assert exc_info.value.details["field_name"] == "description"

        assert state.campaigns == []

    def test_parse_usernames(self) -> None:
        assert parse_usernames(" riley, ,sam ,") == ["riley", "sam"]
        assert parse_usernames("") == []


class TestMembership:
    def test_add_player(self, state, campaign, dm_user, second_player) -> None:
        player_id = add_player(state, campaign.id, dm_user.id, "SAM")

        assert player_id == second_player.id
        assert second_player.id in campaign.player_ids

    def test_add_unknown_player(self, state, campaign, dm_user) -> None:
        with pytest.raises(EntityNotFoundError) as exc_info:
            add_player(state, campaign.id, dm_user.id, "ghost")

        assert exc_info.value.message == "User not found"

    def test_add_duplicate_player(self, state, campaign, dm_user) -> None:
        with pytest.raises(ValidationError) as exc_info:
            add_player(state, campaign.id, dm_user.id, "Riley")

        assert exc_info.value.message == "Player already in campaign"

    def test_only_dm_adds_players(self, state, campaign, player_user) -> None:
        with pytest.raises(PermissionDeniedError):
            add_player(state, campaign.id, player_user.id, "Sam")

    def test_campaigns_for_user(self, state, campaign, dm_user, player_user, second_player) -> None:
        assert campaigns_for_user(state, dm_user.id) == [campaign]
        assert campaigns_for_user(state, player_user.id) == [campaign]
        assert campaigns_for_user(state, second_player.id) == []


class TestDeleteCampaign:
    def test_cascades(self, state, campaign, dm_user, player_user) -> None:
        schedule_session(state, campaign.id, dm_user.id, "S1", datetime(2025, 1, 1, 19))
        create_proposal(state, campaign.id, dm_user.id, "S2")
        character = Character(
            owner_id=player_user.id, campaign_id=campaign.id, name="Brenna", race_index="dwarf"
        )
        state.characters.append(character)

        delete_campaign(state, campaign.id, dm_user.id)

        assert state.campaigns == []
        assert state.sessions == []
        assert state.proposals == []
        assert state.characters == [character]
        assert character.campaign_id is None

    def test_player_cannot_delete(self, state, campaign, player_user) -> None:
        with pytest.raises(PermissionDeniedError):
            delete_campaign(state, campaign.id, player_user.id)
        assert state.campaigns == [campaign]

    def test_unknown_campaign(self, state, dm_user) -> None:
        with pytest.raises(EntityNotFoundError):
            delete_campaign(state, "nope", dm_user.id)


class TestNotes:
    def test_shared_notes(self, state, campaign, player_user) -> None:
        update_shared_notes(state, campaign.id, player_user.id, "The map is in the crypt.")

        assert campaign.notes.shared == "The map is in the crypt."

    def test_private_notes_per_user(self, state, campaign, dm_user, player_user) -> None:
        update_private_notes(state, campaign.id, dm_user.id, "The innkeeper is a vampire.")
        update_private_notes(state, campaign.id, player_user.id, "Trust nobody.")

        assert campaign.notes.private == {
            dm_user.id: "The innkeeper is a vampire.",
            player_user.id: "Trust nobody.",
        }

    def test_outsider_cannot_edit(self, state, campaign, second_player) -> None:
        with pytest.raises(PermissionDeniedError):
            update_shared_notes(state, campaign.id, second_player.id, "hi")


class TestChat:
    def test_post_message(self, state, campaign, player_user) -> None:
        message = post_message(state, campaign.id, player_user.id, "  Who brought snacks? ")

        assert message is not None
        assert message.text == "Who brought snacks?"
        assert campaign.messages == [message]

    def test_blank_message_ignored(self, state, campaign, player_user) -> None:
        assert post_message(state, campaign.id, player_user.id, "   ") is None
        assert campaign.messages == []

    def test_outsider_cannot_post(self, state, campaign, second_player) -> None:
        with pytest.raises(PermissionDeniedError):
            post_message(state, campaign.id, second_player.id, "hello")

    def test_sorted_by_timestamp(self, campaign, player_user) -> None:
        now = datetime(2025, 3, 1, 12, 0)
        late = ChatMessage(user_id=player_user.id, text="second", timestamp=now + timedelta(minutes=5))
        early = ChatMessage(user_id=player_user.id, text="first", timestamp=now)
        campaign.messages = [late, early]

        assert [m.text for m in sorted_messages(campaign)] == ["first", "second"]
