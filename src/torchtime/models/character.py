"""Pydantic V2 schemas for player characters.

This module defines ability scores, inventory entries and the character
sheet itself. Derived values (level, hit points, features) are kept on the
model and maintained by the leveling engine.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from torchtime.core.constants import (
    DEFAULT_ABILITY_SCORE,
    DEFAULT_HIT_DIE,
    MAX_ABILITY_SCORE,
    MAX_CHARACTER_LEVEL,
    MAX_CHARACTER_NAME_LENGTH,
    MAX_GENDER_LENGTH,
    MIN_ABILITY_SCORE,
    MIN_CHARACTER_LEVEL,
)
from torchtime.models.campaign import new_id
from torchtime.models.enums import Ability


Score = Annotated[int, Field(ge=MIN_ABILITY_SCORE, le=MAX_ABILITY_SCORE)]


class AbilityScores(BaseModel):
    """The six ability scores of a character.

    Attributes:
        strength: Strength ability score (1-30).
        dexterity: Dexterity ability score (1-30).
        constitution: Constitution ability score (1-30).
        intelligence: Intelligence ability score (1-30).
        wisdom: Wisdom ability score (1-30).
        charisma: Charisma ability score (1-30).
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    strength: Score = DEFAULT_ABILITY_SCORE
    dexterity: Score = DEFAULT_ABILITY_SCORE
    constitution: Score = DEFAULT_ABILITY_SCORE
    intelligence: Score = DEFAULT_ABILITY_SCORE
    wisdom: Score = DEFAULT_ABILITY_SCORE
    charisma: Score = DEFAULT_ABILITY_SCORE

    def score(self, ability: Ability) -> int:
        """Get the raw score of an ability."""
        return getattr(self, ability.value)

    def modifier(self, ability: Ability) -> int:
        """Calculate the ability modifier, (score - 10) // 2."""
        return (self.score(ability) - 10) // 2


class InventoryItem(BaseModel):
    """An equipment entry carried by a character."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    index: str = Field(min_length=1, description="Reference API equipment index")
    name: str = Field(min_length=1, description="Display name")
    quantity: Annotated[int, Field(ge=1)] = 1


class Character(BaseModel):
    """Player character sheet.

    Attributes:
        id: Unique character identifier.
        owner_id: User who created the character.
        campaign_id: Campaign the character plays in, if any.
        name: Character name.
        gender: Free-text gender.
        race_index: Reference API race index (e.g. 'dwarf').
        race_name: Race display name.
        class_index: Reference API class index (e.g. 'fighter').
        class_name: Class display name.
        subclass_index: Reference API subclass index.
        subclass_name: Subclass display name.
        abilities: Ability scores.
        level: Character level, kept in step with experience_points.
        experience_points: Total XP earned.
        hit_points: Maximum hit points.
        hit_die: Hit die size of the class.
        features: Class features gained so far, without duplicates.
        inventory: Carried equipment.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    id: str = Field(default_factory=new_id)
    owner_id: str
    campaign_id: str | None = None
    name: str = Field(min_length=1, max_length=MAX_CHARACTER_NAME_LENGTH)
    gender: str = Field(default="", max_length=MAX_GENDER_LENGTH)
    race_index: str = Field(min_length=1)
    race_name: str = ""
    class_index: str = ""
    class_name: str = ""
    subclass_index: str | None = None
    subclass_name: str | None = None
    abilities: AbilityScores = Field(default_factory=AbilityScores)
    level: Annotated[int, Field(ge=MIN_CHARACTER_LEVEL, le=MAX_CHARACTER_LEVEL)] = 1
    experience_points: Annotated[int, Field(ge=0)] = 0
    hit_points: Annotated[int, Field(ge=0)] = 0
    hit_die: Annotated[int, Field(ge=4, le=12)] = DEFAULT_HIT_DIE
    features: list[str] = Field(default_factory=list)
    inventory: list[InventoryItem] = Field(default_factory=list)

    @property
    def display_race(self) -> str:
        """Race name, falling back to the index."""
        return self.race_name or self.race_index

    @property
    def proficiency_bonus(self) -> int:
        """Proficiency bonus (2-6 based on level)."""
        return (self.level - 1) // 4 + 2


__all__ = [
    "AbilityScores",
    "InventoryItem",
    "Character",
]
