"""Reference data from the public D&D 5e API."""

from torchtime.reference.client import DndApiClient, class_hit_die, race_ability_bonuses

__all__ = [
    "DndApiClient",
    "class_hit_die",
    "race_ability_bonuses",
]
