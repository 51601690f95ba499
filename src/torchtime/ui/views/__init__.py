"""One render function per route."""

from __future__ import annotations

from torchtime.ui.router import Router
from torchtime.ui.views.auth import render_login, render_logout, render_register
from torchtime.ui.views.campaigns import render_campaign, render_create_campaign
from torchtime.ui.views.characters import render_character_creator, render_character_sheet
from torchtime.ui.views.dashboard import render_dashboard
from torchtime.ui.views.sessions import render_session
from torchtime.ui.views.tools import render_dice, render_items, render_timer


def build_router(default: str = "dashboard") -> Router:
    """Router with every view registered."""
    router = Router(default)
    router.register("login", render_login)
    router.register("register", render_register)
    router.register("logout", render_logout)
    router.register("dashboard", render_dashboard)
    router.register("create-campaign", render_create_campaign)
    router.register("campaign", render_campaign)
    router.register("session", render_session)
    router.register("character-creator", render_character_creator)
    router.register("character-sheet", render_character_sheet)
    router.register("timer", render_timer)
    router.register("dice", render_dice)
    router.register("items", render_items)
    return router


__all__ = ["build_router"]
