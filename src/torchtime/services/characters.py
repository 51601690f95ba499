"""Character creation, experience awards and inventory."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping

from torchtime.core.config import get_settings
from torchtime.core.constants import (
    DEFAULT_ABILITY_SCORE,
    MAX_ABILITY_SCORE,
    MAX_CHARACTER_LEVEL,
    MAX_CHARACTER_NAME_LENGTH,
    MAX_GENDER_LENGTH,
    MIN_ABILITY_SCORE,
    MIN_CHARACTER_LEVEL,
)
from torchtime.core.exceptions import PermissionDeniedError, ValidationError
from torchtime.core.logging import get_logger
from torchtime.core.validation import check_length
from torchtime.engine.leveling import (
    AsiChooser,
    LevelingEngine,
    LevelUpResult,
    ability_modifier,
    xp_for_level,
)
from torchtime.models.character import AbilityScores, Character, InventoryItem
from torchtime.models.enums import Ability
from torchtime.models.state import AppState
from torchtime.reference.client import class_hit_die, race_ability_bonuses


if TYPE_CHECKING:
    from torchtime.reference.client import DndApiClient


logger = get_logger(__name__)


def build_ability_scores(
    race: Mapping[str, Any],
    base: Mapping[str, int] | None = None,
) -> AbilityScores:
    """Base scores (10 unless given) plus the race's ability bonuses.

    Raises:
        ValidationError: If a given base score is outside 1-30.
    """
    scores = {ability.value: DEFAULT_ABILITY_SCORE for ability in Ability}
    for name, value in (base or {}).items():
        if name not in scores:
            continue
        if not MIN_ABILITY_SCORE <= int(value) <= MAX_ABILITY_SCORE:
            raise ValidationError(
                f"Ability scores must be between {MIN_ABILITY_SCORE} and {MAX_ABILITY_SCORE}",
                field_name=name,
                invalid_value=value,
            )
        scores[name] = int(value)
    for name, bonus in race_ability_bonuses(dict(race)).items():
        scores[name] = min(MAX_ABILITY_SCORE, scores[name] + bonus)
    return AbilityScores(**scores)


def create_character(
    state: AppState,
    client: DndApiClient,
    user_id: str,
    *,
    name: str,
    race_index: str,
    class_index: str = "",
    subclass_index: str | None = None,
    gender: str = "",
    campaign_id: str | None = None,
    level: int = MIN_CHARACTER_LEVEL,
    base_scores: Mapping[str, int] | None = None,
    choose_asi: AsiChooser | None = None,
) -> Character:
    """Create a character from reference data.

    The character starts at level 1 with the race's ability bonuses, the
    class hit die and the class's level 1 features. Hit points are the hit
    die plus the CON modifier. A higher starting level is reached by
    awarding that level's XP, so every level in between is applied.

    Raises:
        ValidationError: If the name or race is missing, a text field is too
            long, a base score or the level is out of range.
        EntityNotFoundError: If campaign_id names no campaign.
        PermissionDeniedError: If the user is not in that campaign.
    """
    name = (name or "").strip()
    if not name:
        raise ValidationError("Character name is required", field_name="name")
    check_length(name, MAX_CHARACTER_NAME_LENGTH, field_name="name", label="Character name")
    gender = check_length(
        (gender or "").strip(), MAX_GENDER_LENGTH, field_name="gender", label="Gender"
    )
    if not race_index:
        raise ValidationError("Please choose a race", field_name="race_index")
    if not MIN_CHARACTER_LEVEL <= level <= MAX_CHARACTER_LEVEL:
        raise ValidationError(
            f"Level must be between {MIN_CHARACTER_LEVEL} and {MAX_CHARACTER_LEVEL}",
            field_name="level",
            invalid_value=level,
        )
    if campaign_id:
        campaign = state.require_campaign(campaign_id)
        if not campaign.is_member(user_id):
            raise PermissionDeniedError(
                "You are not part of this campaign", user_id=user_id, action="create_character"
            )

    race = client.get_race(race_index)
    klass = client.get_class(class_index) if class_index else {}
    hit_die = class_hit_die(klass, get_settings().game.default_hit_die)

    subclass_name = None
    if subclass_index:
        subclass_name = next(
            (s.get("name") for s in client.list_subclasses(class_index) if s.get("index") == subclass_index),
            subclass_index,
        )

    abilities = build_ability_scores(race, base_scores)
    character = Character(
        owner_id=user_id,
        campaign_id=campaign_id or None,
        name=name,
        gender=gender,
        race_index=race_index,
        race_name=race.get("name", ""),
        class_index=class_index,
        class_name=klass.get("name", ""),
        subclass_index=subclass_index or None,
        subclass_name=subclass_name,
        abilities=abilities,
        hit_die=hit_die,
        hit_points=max(0, hit_die + ability_modifier(abilities.constitution)),
        features=list(
            dict.fromkeys(client.get_class_level_features(class_index, 1) if class_index else [])
        ),
    )

    if level > MIN_CHARACTER_LEVEL:
        LevelingEngine(client).award_xp(character, xp_for_level(level), choose_asi)

    state.characters.append(character)
    logger.info(
        "Character created",
        character_id=character.id,
        race=race_index,
        character_class=class_index,
        level=character.level,
    )
    return character


def characters_for_user(state: AppState, user_id: str) -> list[Character]:
    """Characters the user owns or, as DM, oversees through a campaign."""
    dm_campaigns = {c.id for c in state.campaigns if c.is_dm(user_id)}
    return [
        c for c in state.characters
        if c.owner_id == user_id or (c.campaign_id is not None and c.campaign_id in dm_campaigns)
    ]


def can_manage(state: AppState, character: Character, user_id: str) -> bool:
    """Owner, or the DM of the character's campaign."""
    if character.owner_id == user_id:
        return True
    campaign = state.get_campaign(character.campaign_id)
    return campaign is not None and campaign.is_dm(user_id)


def can_award_experience(state: AppState, character: Character, user_id: str) -> bool:
    """The campaign's DM awards XP; an unassigned character's owner may too."""
    campaign = state.get_campaign(character.campaign_id)
    if campaign is not None:
        return campaign.is_dm(user_id)
    return character.owner_id == user_id


def delete_character(state: AppState, character_id: str, user_id: str) -> None:
    character = state.require_character(character_id)
    if not can_manage(state, character, user_id):
        raise PermissionDeniedError(
            "You cannot delete this character", user_id=user_id, action="delete_character"
        )
    state.characters = [c for c in state.characters if c.id != character_id]
    logger.info("Character deleted", character_id=character_id)


def award_experience(
    state: AppState,
    engine: LevelingEngine,
    character_id: str,
    user_id: str,
    amount: int,
    choose_asi: AsiChooser | None = None,
) -> LevelUpResult:
    """Award XP to a character and apply any level-ups.

    Raises:
        PermissionDeniedError: If the user may not award XP to this character.
        LevelingError: If the amount is negative.
    """
    character = state.require_character(character_id)
    if not can_award_experience(state, character, user_id):
        raise PermissionDeniedError(
            "Only the campaign's DM can award experience",
            user_id=user_id,
            action="award_experience",
        )
    return engine.award_xp(character, amount, choose_asi)


def add_inventory_item(
    state: AppState,
    character_id: str,
    user_id: str,
    item: Mapping[str, Any],
    quantity: int = 1,
) -> InventoryItem:
    """Add an equipment entry from the item library, stacking by index."""
    character = state.require_character(character_id)
    if not can_manage(state, character, user_id):
        raise PermissionDeniedError(
            "You cannot edit this character", user_id=user_id, action="add_inventory_item"
        )
    if quantity < 1:
        raise ValidationError("Quantity must be at least 1", field_name="quantity", invalid_value=quantity)
    index = item.get("index")
    if not index:
        raise ValidationError("Item has no index", field_name="index")

    inventory = [entry.model_copy() for entry in character.inventory]
    for entry in inventory:
        if entry.index == index:
            entry.quantity += quantity
            added = entry
            break
    else:
        added = InventoryItem(index=index, name=item.get("name") or index, quantity=quantity)
        inventory.append(added)
    character.inventory = inventory

    logger.info("Inventory item added", character_id=character.id, item=index, quantity=quantity)
    return added


def remove_inventory_item(state: AppState, character_id: str, user_id: str, item_index: str) -> bool:
    """Drop an inventory entry. Returns False if the character had none."""
    character = state.require_character(character_id)
    if not can_manage(state, character, user_id):
        raise PermissionDeniedError(
            "You cannot edit this character", user_id=user_id, action="remove_inventory_item"
        )
    remaining = [entry for entry in character.inventory if entry.index != item_index]
    if len(remaining) == len(character.inventory):
        return False
    character.inventory = remaining
    logger.info("Inventory item removed", character_id=character.id, item=item_index)
    return True


__all__ = [
    "build_ability_scores",
    "create_character",
    "characters_for_user",
    "can_manage",
    "can_award_experience",
    "delete_character",
    "award_experience",
    "add_inventory_item",
    "remove_inventory_item",
]
