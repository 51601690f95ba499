"""Dashboard: the user's campaigns, characters and upcoming sessions."""

from __future__ import annotations

from datetime import datetime

import streamlit as st

from torchtime.engine.voting import list_scheduled_sessions
from torchtime.models.enums import Role
from torchtime.services.campaigns import campaigns_for_user
from torchtime.services.characters import characters_for_user
from torchtime.ui.context import AppContext
from torchtime.ui.router import Route, format_route


def render_dashboard(ctx: AppContext, route: Route) -> None:
    """Render the landing page after login."""
    user = ctx.user
    campaigns = campaigns_for_user(ctx.state, user.id)

    st.markdown(f"## Welcome, {user.username}")
    st.caption(f"Logged in as {user.role.display_name}")

    col1, col2 = st.columns(2)

    with col1:
        st.markdown("### 🗺️ Campaigns")
        if user.role is Role.DM:
            ctx.link("➕ New campaign", "create-campaign", key="dash_new_campaign")
        if not campaigns:
            st.info("You are not part of any campaign yet.")
        for campaign in campaigns:
            badge = "DM" if campaign.is_dm(user.id) else "Player"
            ctx.link(
                f"{campaign.name} ({badge})",
                format_route("campaign", {"id": campaign.id}),
                key=f"dash_campaign_{campaign.id}",
                use_container_width=True,
            )

    with col2:
        st.markdown("### 🧙 Characters")
        ctx.link("➕ New character", "character-creator", key="dash_new_character")
        characters = characters_for_user(ctx.state, user.id)
        if not characters:
            st.info("No characters yet.")
        for character in characters:
            ctx.link(
                f"{character.name} - {character.display_race} {character.class_name} {character.level}",
                format_route("character-sheet", {"id": character.id}),
                key=f"dash_character_{character.id}",
                use_container_width=True,
            )

    st.divider()
    st.markdown("### 📅 Upcoming sessions")

    now = datetime.now()
    upcoming = [
        (campaign, session)
        for campaign in campaigns
        for session in list_scheduled_sessions(ctx.state, campaign.id)
        if session.starts_at >= now
    ]
    upcoming.sort(key=lambda pair: pair[1].starts_at)

    if not upcoming:
        st.caption("Nothing scheduled.")
    for campaign, session in upcoming:
        where = f" @ {session.location}" if session.location else ""
        st.markdown(
            f"**{session.starts_at:%a %b %d, %H:%M}** · {session.title} "
            f"({campaign.name}){where}"
        )
