"""Enumeration types for TorchTime."""

from __future__ import annotations

from enum import StrEnum


class Role(StrEnum):
    """Role a user picks at registration."""

    DM = "dm"
    PLAYER = "player"

    @property
    def display_name(self) -> str:
        """Get the label shown in the registration form."""
        return "Dungeon Master (DM)" if self is Role.DM else "Player"


class VoteChoice(StrEnum):
    """A user's answer for one time option of a session proposal.

    Stored as a single tagged value per (option, user) pair, so a user
    can never sit in two buckets of the same option.
    """

    YES = "yes"
    MAYBE = "maybe"
    NO = "no"


class Ability(StrEnum):
    """D&D 5E ability scores."""

    STR = "strength"
    DEX = "dexterity"
    CON = "constitution"
    INT = "intelligence"
    WIS = "wisdom"
    CHA = "charisma"

    @property
    def full_name(self) -> str:
        """Get the full name of the ability (e.g., 'Strength' for STR)."""
        return self.value.capitalize()

    @property
    def abbreviation(self) -> str:
        """Get the three-letter abbreviation (e.g., 'STR')."""
        return self.name


__all__ = [
    "Role",
    "VoteChoice",
    "Ability",
]
