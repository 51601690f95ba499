"""Tests for character creation, XP awards and inventory."""

from __future__ import annotations

import pytest

from torchtime.core.exceptions import (
    EntityNotFoundError,
    LevelingError,
    PermissionDeniedError,
    ValidationError,
)
from torchtime.engine.leveling import AbilityScoreIncrease, LevelingEngine
from torchtime.models.enums import Ability
from torchtime.services.characters import (
    add_inventory_item,
    award_experience,
    build_ability_scores,
    characters_for_user,
    create_character,
    delete_character,
    remove_inventory_item,
)


@pytest.fixture
def brenna(state, reference_client, campaign, player_user):
    return create_character(
        state,
        reference_client,
        player_user.id,
        name="Brenna",
        race_index="dwarf",
        class_index="fighter",
        campaign_id=campaign.id,
    )


class TestBuildAbilityScores:
    def test_race_bonus_on_base_ten(self, reference_client) -> None:
        scores = build_ability_scores(reference_client.get_race("dwarf"))

        assert scores.constitution == 12
        assert scores.strength == 10

    def test_given_base_scores(self, reference_client) -> None:
        scores = build_ability_scores(
            reference_client.get_race("elf"), {"dexterity": 15, "bogus": 3}
        )

        assert scores.dexterity == 17


class TestCreateCharacter:
    def test_level_one_character(self, brenna, state, player_user, campaign) -> None:
        assert brenna.owner_id == player_user.id
        assert brenna.campaign_id == campaign.id
        assert brenna.race_name == "Dwarf"
        assert brenna.class_name == "Fighter"
        assert brenna.hit_die == 10
        assert brenna.abilities.constitution == 12
        assert brenna.hit_points == 11
        assert brenna.level == 1
        assert brenna.experience_points == 0
        assert brenna.features == ["Fighting Style", "Second Wind"]
        assert state.characters == [brenna]

    def test_default_hit_die_without_class(self, state, reference_client, player_user) -> None:
        character = create_character(
            state, reference_client, player_user.id, name="Pip", race_index="elf"
        )

        assert character.hit_die == 8
        assert character.hit_points == 8
        assert character.features == []

    def test_configured_default_hit_die(
        self, state, reference_client, player_user, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("TORCHTIME_GAME_DEFAULT_HIT_DIE", "12")

        character = create_character(
            state, reference_client, player_user.id, name="Pip", race_index="elf"
        )

        assert character.hit_die == 12
        assert character.hit_points == 12

    def test_given_base_scores_get_race_bonus(self, state, reference_client, player_user) -> None:
        character = create_character(
            state,
            reference_client,
            player_user.id,
            name="Brenna",
            race_index="dwarf",
            class_index="fighter",
            base_scores={"strength": 15, "constitution": 14, "charisma": 8},
        )

        assert character.abilities.strength == 15
        assert character.abilities.constitution == 16
        assert character.abilities.charisma == 8
        assert character.abilities.wisdom == 10
        assert character.hit_points == 13

    def test_subclass_name_resolved(self, state, reference_client, player_user) -> None:
        character = create_character(
            state,
            reference_client,
            player_user.id,
            name="Vex",
            race_index="elf",
            class_index="fighter",
            subclass_index="champion",
        )

        assert character.subclass_name == "Champion"

    def test_higher_starting_level_replays_levels(
        self, state, reference_client, player_user
    ) -> None:
        character = create_character(
            state,
            reference_client,
            player_user.id,
            name="Vet",
            race_index="dwarf",
            class_index="fighter",
            level=4,
            choose_asi=lambda c, level: AbilityScoreIncrease(Ability.STR),
        )

        assert character.level == 4
        assert character.experience_points == 2700
        assert character.hit_points == 11 + 3 * 11
        assert character.abilities.strength == 12
        assert "Ability Score Improvement" in character.features

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"name": "  ", "race_index": "elf"},
            {"name": "Pip", "race_index": ""},
            {"name": "Pip", "race_index": "elf", "level": 21},
            {"name": "P" * 101, "race_index": "elf"},
            {"name": "Pip", "race_index": "elf", "gender": "g" * 51},
            {"name": "Pip", "race_index": "elf", "base_scores": {"strength": 0}},
            {"name": "Pip", "race_index": "elf", "base_scores": {"dexterity": 31}},
        ],
    )
    def test_invalid_input(self, state, reference_client, player_user, kwargs) -> None:
        with pytest.raises(ValidationError):
            create_character(state, reference_client, player_user.id, **kwargs)
        assert state.characters == []

    def test_unknown_campaign(self, state, reference_client, player_user) -> None:
        with pytest.raises(EntityNotFoundError):
            create_character(
                state, reference_client, player_user.id,
                name="Pip", race_index="elf", campaign_id="nope",
            )

    def test_outsider_campaign(self, state, reference_client, campaign, second_player) -> None:
        with pytest.raises(PermissionDeniedError):
            create_character(
                state, reference_client, second_player.id,
                name="Pip", race_index="elf", campaign_id=campaign.id,
            )


class TestAccess:
    def test_characters_for_user(self, brenna, state, dm_user, player_user, second_player) -> None:
        assert characters_for_user(state, player_user.id) == [brenna]
        assert characters_for_user(state, dm_user.id) == [brenna]
        assert characters_for_user(state, second_player.id) == []

    def test_delete_by_dm(self, brenna, state, dm_user) -> None:
        delete_character(state, brenna.id, dm_user.id)

        assert state.characters == []

    def test_delete_by_stranger(self, brenna, state, second_player) -> None:
        with pytest.raises(PermissionDeniedError):
            delete_character(state, brenna.id, second_player.id)


class TestAwardExperience:
    def test_dm_awards(self, brenna, state, dm_user, reference_client) -> None:
        result = award_experience(
            state, LevelingEngine(reference_client), brenna.id, dm_user.id, 300
        )

        assert result.new_level == 2
        assert brenna.level == 2
        assert brenna.hit_points == 22

    def test_player_cannot_award_in_campaign(
        self, brenna, state, player_user, reference_client
    ) -> None:
        with pytest.raises(PermissionDeniedError):
            award_experience(state, LevelingEngine(reference_client), brenna.id, player_user.id, 300)

    def test_owner_awards_unassigned(self, state, reference_client, player_user) -> None:
        character = create_character(
            state, reference_client, player_user.id, name="Solo", race_index="elf"
        )

        award_experience(state, LevelingEngine(reference_client), character.id, player_user.id, 900)

        assert character.level == 3

    def test_negative_award(self, brenna, state, dm_user, reference_client) -> None:
        with pytest.raises(LevelingError):
            award_experience(state, LevelingEngine(reference_client), brenna.id, dm_user.id, -1)


class TestInventory:
    def test_add_and_stack(self, brenna, state, player_user) -> None:
        item = {"index": "longsword", "name": "Longsword"}

        add_inventory_item(state, brenna.id, player_user.id, item)
        entry = add_inventory_item(state, brenna.id, player_user.id, item, 2)

        assert entry.quantity == 3
        assert [(i.index, i.quantity) for i in brenna.inventory] == [("longsword", 3)]

    def test_name_falls_back_to_index(self, brenna, state, player_user) -> None:
        entry = add_inventory_item(state, brenna.id, player_user.id, {"index": "torch"})

        assert entry.name == "torch"

    def test_invalid_items(self, brenna, state, player_user) -> None:
        with pytest.raises(ValidationError):
            add_inventory_item(state, brenna.id, player_user.id, {"name": "Nameless"})
        with pytest.raises(ValidationError):
            add_inventory_item(state, brenna.id, player_user.id, {"index": "torch"}, 0)

    def test_remove(self, brenna, state, player_user) -> None:
        add_inventory_item(state, brenna.id, player_user.id, {"index": "torch", "name": "Torch"})

        assert remove_inventory_item(state, brenna.id, player_user.id, "torch") is True
        assert brenna.inventory == []
        assert remove_inventory_item(state, brenna.id, player_user.id, "torch") is False

    def test_stranger_cannot_edit(self, brenna, state, second_player) -> None:
        with pytest.raises(PermissionDeniedError):
            add_inventory_item(state, brenna.id, second_player.id, {"index": "torch"})
