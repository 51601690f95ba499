"""Experience, levels and per-level character growth.

Level is derived from experience points through the fixed 5E threshold
table. When an XP award raises the level, every intermediate level is
replayed in order: hit points, class features fetched from the reference
API, and an ability score increase when a feature calls for one. Gains are
level-specific, so a jump from 3 to 5 applies level 4 and then level 5,
never a single aggregate step.

The per-level calculations are pure functions; LevelingEngine is the thin
stateful part that talks to the reference client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Mapping, Sequence

from torchtime.core.constants import (
    ASI_FEATURE_PATTERN,
    DEFAULT_HIT_DIE,
    MAX_CHARACTER_LEVEL,
    MIN_CHARACTER_LEVEL,
    PC_ABILITY_SCORE_CAP,
    XP_THRESHOLDS,
)
from torchtime.core.exceptions import LevelingError
from torchtime.core.logging import get_logger
from torchtime.models.character import Character
from torchtime.models.enums import Ability


if TYPE_CHECKING:
    from torchtime.reference.client import DndApiClient


logger = get_logger(__name__)


# =============================================================================
# Pure Rules
# =============================================================================


def level_for_xp(xp: int | None) -> int:
    """Determine character level from experience points.

    Thresholds are scanned from the top; the highest one not exceeding
    the XP wins. Missing or negative XP is level 1.
    """
    if xp is None:
        return MIN_CHARACTER_LEVEL
    for index in range(len(XP_THRESHOLDS) - 1, -1, -1):
        if xp >= XP_THRESHOLDS[index]:
            return index + 1
    return MIN_CHARACTER_LEVEL


def xp_for_level(level: int) -> int:
    """Minimum XP of a level (clamped to 1-20)."""
    level = max(MIN_CHARACTER_LEVEL, min(MAX_CHARACTER_LEVEL, level))
    return XP_THRESHOLDS[level - 1]


def xp_to_next_level(xp: int) -> int | None:
    """XP still needed for the next level. Returns None at level 20."""
    level = level_for_xp(xp)
    if level >= MAX_CHARACTER_LEVEL:
        return None
    return XP_THRESHOLDS[level] - xp


def ability_modifier(score: int) -> int:
    """floor((score - 10) / 2)."""
    return (score - 10) // 2


def hit_point_gain(character: Character) -> int:
    """Hit points gained on one level up: the hit die plus CON modifier."""
    hit_die = character.hit_die or DEFAULT_HIT_DIE
    return hit_die + ability_modifier(character.abilities.constitution)


def is_ability_score_feature(name: str) -> bool:
    """Check whether a feature name grants an ability score increase."""
    return bool(ASI_FEATURE_PATTERN.search(name))


def merge_features(existing: Sequence[str], new: Sequence[str]) -> list[str]:
    """Union of two feature lists, keeping first-seen order."""
    merged = list(dict.fromkeys(existing))
    for name in new:
        if name not in merged:
            merged.append(name)
    return merged


@dataclass(frozen=True)
class LevelEffect:
    """What reaching one specific level gives a character.

    Attributes:
        level: The level reached.
        hp_gain: Hit points added.
        new_features: Fetched features not already on the sheet.
        ability_score_increase: A fetched feature calls for an ASI.
    """

    level: int
    hp_gain: int
    new_features: tuple[str, ...] = ()
    ability_score_increase: bool = False


def level_effect(character: Character, level: int, features: Sequence[str]) -> LevelEffect:
    """Compute the effect of reaching ``level`` from the character's current sheet."""
    fresh = tuple(name for name in dict.fromkeys(features) if name not in character.features)
    return LevelEffect(
        level=level,
        hp_gain=hit_point_gain(character),
        new_features=fresh,
        ability_score_increase=any(is_ability_score_feature(name) for name in features),
    )


def plan_level_ups(
    character: Character,
    new_level: int,
    features_by_level: Mapping[int, Sequence[str]],
) -> list[LevelEffect]:
    """Preview the per-level effects from the character's level to ``new_level``.

    Features already gained earlier in the plan are not repeated. Ability
    score increases are flagged but not applied, so hit points use the
    current CON throughout.
    """
    effects: list[LevelEffect] = []
    seen = list(character.features)
    for level in range(character.level + 1, min(new_level, MAX_CHARACTER_LEVEL) + 1):
        features = features_by_level.get(level, ())
        fresh = tuple(name for name in dict.fromkeys(features) if name not in seen)
        seen.extend(fresh)
        effects.append(
            LevelEffect(
                level=level,
                hp_gain=hit_point_gain(character),
                new_features=fresh,
                ability_score_increase=any(is_ability_score_feature(n) for n in features),
            )
        )
    return effects


# =============================================================================
# Ability Score Increase
# =============================================================================


@dataclass(frozen=True)
class AbilityScoreIncrease:
    """A player's ASI choice: one ability +2, or two different abilities +1."""

    first: Ability | str | None
    second: Ability | str | None = None


def _parse_ability(value: Ability | str | None) -> Ability | None:
    if value is None or value == "":
        return None
    if isinstance(value, Ability):
        return value
    text = str(value).strip().lower()
    for ability in Ability:
        if text in (ability.value, ability.name.lower()):
            return ability
    return None


def apply_ability_score_increase(
    character: Character, choice: AbilityScoreIncrease | None
) -> dict[Ability, int]:
    """Apply an ASI choice to the character's abilities.

    Invalid or empty input (unknown ability, nothing chosen, or the same
    ability twice) changes nothing. Scores are capped at 20.

    Returns:
        The increase actually applied per ability.
    """
    if choice is None:
        return {}

    first = _parse_ability(choice.first)
    second = _parse_ability(choice.second)
    if choice.second not in (None, "") and second is None:
        return {}
    if first is None or first == second:
        return {}

    increments = {first: 2} if second is None else {first: 1, second: 1}

    applied: dict[Ability, int] = {}
    updates: dict[str, int] = {}
    for ability, amount in increments.items():
        current = character.abilities.score(ability)
        target = min(PC_ABILITY_SCORE_CAP, current + amount)
        if target > current:
            updates[ability.value] = target
            applied[ability] = target - current

    if updates:
        character.abilities = character.abilities.model_copy(update=updates)
        logger.info(
            "Ability scores increased",
            character_id=character.id,
            increases={a.value: n for a, n in applied.items()},
        )
    return applied


# =============================================================================
# Engine
# =============================================================================


AsiChooser = Callable[[Character, int], "AbilityScoreIncrease | None"]


@dataclass
class LevelUpResult:
    """Outcome of an XP award.

    Attributes:
        old_level: Level before the award.
        new_level: Level after the award.
        effects: One entry per level gained, in order.
        ability_increases: ASIs applied, by level.
    """

    old_level: int
    new_level: int
    effects: list[LevelEffect] = field(default_factory=list)
    ability_increases: dict[int, dict[Ability, int]] = field(default_factory=dict)

    @property
    def leveled_up(self) -> bool:
        return self.new_level > self.old_level

    @property
    def hp_gained(self) -> int:
        return sum(effect.hp_gain for effect in self.effects)


class LevelingEngine:
    """Applies XP awards and replays level-ups against the reference API.

    Example:
        >>> engine = LevelingEngine(client)
        >>> result = engine.award_xp(character, 900)
        >>> result.new_level
        3
    """

    def __init__(self, client: DndApiClient) -> None:
        self.client = client

    def award_xp(
        self,
        character: Character,
        amount: int,
        choose_asi: AsiChooser | None = None,
    ) -> LevelUpResult:
        """Add experience and apply every level gained.

        Args:
            character: Character to update in place.
            amount: XP to add, must not be negative.
            choose_asi: Called with (character, level) whenever a level's
                features include an ability score improvement. Returning
                None skips the increase.

        Returns:
            LevelUpResult describing the per-level changes.

        Raises:
            LevelingError: If the amount is negative.
        """
        if amount < 0:
            raise LevelingError(
                "Experience awards cannot be negative",
                details={"character_id": character.id, "amount": amount},
            )

        old_level = character.level
        character.experience_points = character.experience_points + amount
        target_level = max(old_level, level_for_xp(character.experience_points))

        result = LevelUpResult(old_level=old_level, new_level=target_level)
        for level in range(old_level + 1, target_level + 1):
            effect, increase = self._apply_level(character, level, choose_asi)
            result.effects.append(effect)
            if increase:
                result.ability_increases[level] = increase

        logger.info(
            "Experience awarded",
            character_id=character.id,
            amount=amount,
            experience_points=character.experience_points,
            old_level=old_level,
            new_level=target_level,
        )
        return result

    def _apply_level(
        self,
        character: Character,
        level: int,
        choose_asi: AsiChooser | None,
    ) -> tuple[LevelEffect, dict[Ability, int]]:
        features = (
            self.client.get_class_level_features(character.class_index, level)
            if character.class_index
            else []
        )
        effect = level_effect(character, level, features)

        character.hit_points = character.hit_points + effect.hp_gain
        character.features = merge_features(character.features, effect.new_features)
        character.level = level

        increase: dict[Ability, int] = {}
        if effect.ability_score_increase and choose_asi is not None:
            increase = apply_ability_score_increase(character, choose_asi(character, level))

        logger.debug(
            "Level applied",
            character_id=character.id,
            level=level,
            hp_gain=effect.hp_gain,
            features=list(effect.new_features),
        )
        return effect, increase


__all__ = [
    "level_for_xp",
    "xp_for_level",
    "xp_to_next_level",
    "ability_modifier",
    "hit_point_gain",
    "is_ability_score_feature",
    "merge_features",
    "LevelEffect",
    "level_effect",
    "plan_level_ups",
    "AbilityScoreIncrease",
    "apply_ability_score_increase",
    "AsiChooser",
    "LevelUpResult",
    "LevelingEngine",
]
