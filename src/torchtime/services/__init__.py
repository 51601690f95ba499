"""Application operations used by the views.

Modules:
    auth: Registration, login and logout.
    campaigns: Campaign membership, notes and chat.
    characters: Character creation, experience and inventory.
"""

from __future__ import annotations

from torchtime.services.auth import login, logout, register, require_user
from torchtime.services.campaigns import (
    add_player,
    campaigns_for_user,
    create_campaign,
    delete_campaign,
    post_message,
    sorted_messages,
    update_private_notes,
    update_shared_notes,
)
from torchtime.services.characters import (
    add_inventory_item,
    award_experience,
    characters_for_user,
    create_character,
    delete_character,
    remove_inventory_item,
)


__all__ = [
    # Auth
    "login",
    "logout",
    "register",
    "require_user",
    # Campaigns
    "add_player",
    "campaigns_for_user",
    "create_campaign",
    "delete_campaign",
    "post_message",
    "sorted_messages",
    "update_private_notes",
    "update_shared_notes",
    # Characters
    "add_inventory_item",
    "award_experience",
    "characters_for_user",
    "create_character",
    "delete_character",
    "remove_inventory_item",
]
