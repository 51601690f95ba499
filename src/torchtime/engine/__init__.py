"""Engine module: scheduling, leveling, dice and timer logic.

Modules:
    voting: Session proposals, votes and finalization.
    leveling: XP thresholds and per-level character growth.
    dice: Dice rolling via the d20 library and the dice log.
    timer: Session countdown timer.
"""

from __future__ import annotations

from torchtime.engine.dice import DiceRoll, DiceRoller, record_roll
from torchtime.engine.leveling import (
    AbilityScoreIncrease,
    LevelEffect,
    LevelingEngine,
    LevelUpResult,
    ability_modifier,
    apply_ability_score_increase,
    level_effect,
    level_for_xp,
    plan_level_ups,
)
from torchtime.engine.timer import Countdown
from torchtime.engine.voting import (
    OptionDraft,
    cast_vote,
    clear_vote,
    create_proposal,
    finalize,
    list_scheduled_sessions,
    rank_options,
    schedule_session,
    toggle_vote,
)


__all__ = [
    # Dice
    "DiceRoll",
    "DiceRoller",
    "record_roll",
    # Leveling
    "AbilityScoreIncrease",
    "LevelEffect",
    "LevelingEngine",
    "LevelUpResult",
    "ability_modifier",
    "apply_ability_score_increase",
    "level_effect",
    "level_for_xp",
    "plan_level_ups",
    # Timer
    "Countdown",
    # Voting
    "OptionDraft",
    "cast_vote",
    "clear_vote",
    "create_proposal",
    "finalize",
    "list_scheduled_sessions",
    "rank_options",
    "schedule_session",
    "toggle_vote",
]
