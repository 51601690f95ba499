"""Application-wide constants for TorchTime.

D&D 5E rules values used by the leveling engine and character creator,
plus a few UI constants.
"""

from __future__ import annotations

import re

# =============================================================================
# Experience & Levels (PHB p.15)
# =============================================================================

XP_THRESHOLDS: tuple[int, ...] = (
    0,
    300,
    900,
    2700,
    6500,
    14000,
    23000,
    34000,
    48000,
    64000,
    85000,
    100000,
    120000,
    140000,
    165000,
    195000,
    225000,
    265000,
    305000,
    355000,
)
"""Minimum XP for levels 1-20; index i is the threshold of level i + 1."""

MIN_CHARACTER_LEVEL = 1
"""Minimum character level."""

MAX_CHARACTER_LEVEL = 20
"""Maximum character level in D&D 5E."""

# =============================================================================
# Ability Scores
# =============================================================================

DEFAULT_ABILITY_SCORE = 10
"""Base score for every ability before racial bonuses."""

PC_ABILITY_SCORE_CAP = 20
"""Ability score increases cannot raise a score above this."""

MIN_ABILITY_SCORE = 1

MAX_ABILITY_SCORE = 30

ABILITY_INDEX: dict[str, str] = {
    "str": "strength",
    "dex": "dexterity",
    "con": "constitution",
    "int": "intelligence",
    "wis": "wisdom",
    "cha": "charisma",
}
"""Reference API ability index to full ability name."""

ASI_FEATURE_PATTERN = re.compile(r"ability\s+score", re.IGNORECASE)
"""Feature names matching this trigger an ability score increase."""

# =============================================================================
# Hit Points
# =============================================================================

DEFAULT_HIT_DIE = 8
"""Hit die used when a character's class does not provide one."""

HIT_DIE_SIZES: tuple[int, ...] = (6, 8, 10, 12)
"""Hit dice used by the PHB classes."""

# =============================================================================
# Text Fields
# =============================================================================

MAX_USERNAME_LENGTH = 100

MAX_TITLE_LENGTH = 200
"""Campaign names and session titles."""

MAX_DESCRIPTION_LENGTH = 5000

MAX_LOCATION_LENGTH = 200

MAX_CHARACTER_NAME_LENGTH = 100

MAX_GENDER_LENGTH = 50

# =============================================================================
# Tools
# =============================================================================

DICE_TYPES: tuple[int, ...] = (4, 6, 8, 10, 12, 20, 100)
"""Quick-roll dice offered by the dice roller."""

TIMER_DEFAULT_MINUTES = 60


__all__ = [
    "XP_THRESHOLDS",
    "MIN_CHARACTER_LEVEL",
    "MAX_CHARACTER_LEVEL",
    "DEFAULT_ABILITY_SCORE",
    "PC_ABILITY_SCORE_CAP",
    "MIN_ABILITY_SCORE",
    "MAX_ABILITY_SCORE",
    "ABILITY_INDEX",
    "ASI_FEATURE_PATTERN",
    "DEFAULT_HIT_DIE",
    "HIT_DIE_SIZES",
    "MAX_USERNAME_LENGTH",
    "MAX_TITLE_LENGTH",
    "MAX_DESCRIPTION_LENGTH",
    "MAX_LOCATION_LENGTH",
    "MAX_CHARACTER_NAME_LENGTH",
    "MAX_GENDER_LENGTH",
    "DICE_TYPES",
    "TIMER_DEFAULT_MINUTES",
]
