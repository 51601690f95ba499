"""TorchTime - Main Application Entry Point.

Run with ``streamlit run src/torchtime/ui/app.py``. Each rerun loads the
state document, renders the route named in the query parameters, and
views save the whole document after every change.
"""

from __future__ import annotations

import streamlit as st

from torchtime.core.config import get_settings
from torchtime.core.logging import bind_context, clear_context, configure_logging
from torchtime.ui.context import AppContext, build_context, current_fragment
from torchtime.ui.theme import apply_theme
from torchtime.ui.views import build_router


settings = get_settings()

st.set_page_config(
    page_title=settings.ui.page_title,
    page_icon="🔥",
    layout="wide",
    initial_sidebar_state="expanded",
    menu_items={
        "Get Help": None,
        "Report a bug": None,
        "About": f"{settings.app_name} {settings.app_version} - campaign scheduling for D&D groups",
    },
)

apply_theme()


# =============================================================================
# Sidebar
# =============================================================================


_NAV = (
    ("🏠 Dashboard", "dashboard"),
    ("🧙 New character", "character-creator"),
    ("🎲 Dice", "dice"),
    ("⏳ Timer", "timer"),
    ("🎒 Items", "items"),
    ("🚪 Log out", "logout"),
)


def render_sidebar(ctx: AppContext) -> None:
    """Render the sidebar navigation for logged-in users."""
    user = ctx.state.current_user()
    if user is None:
        return

    with st.sidebar:
        st.markdown("# 🔥 TorchTime")
        st.caption(f"{user.username} · {user.role.display_name}")
        st.divider()
        for label, fragment in _NAV:
            ctx.link(label, fragment, key=f"nav_{fragment}", use_container_width=True)


# =============================================================================
# Main
# =============================================================================


def main() -> None:
    configure_logging(level=settings.log_level, json_format=settings.is_production)
    clear_context()

    ctx = build_context()
    if ctx.state.current_user_id:
        bind_context(user_id=ctx.state.current_user_id)

    render_sidebar(ctx)
    build_router(settings.ui.default_route).dispatch(current_fragment(st.query_params), ctx)


main()
