"""Campaign creation and the campaign detail screen."""

from __future__ import annotations

from datetime import datetime

import streamlit as st

from torchtime.core.exceptions import TorchTimeError
from torchtime.engine.voting import (
    OptionDraft,
    create_proposal,
    delete_session,
    list_scheduled_sessions,
    proposals_for_campaign,
    schedule_session,
)
from torchtime.models.campaign import Campaign
from torchtime.services.campaigns import (
    add_player,
    create_campaign,
    delete_campaign,
    parse_usernames,
    post_message,
    sorted_messages,
    update_private_notes,
    update_shared_notes,
)
from torchtime.ui.context import AppContext
from torchtime.ui.router import Route, format_route


# =============================================================================
# Create
# =============================================================================


def render_create_campaign(ctx: AppContext, route: Route) -> None:
    user = ctx.user
    st.markdown("## 🗺️ New campaign")

    with st.form("create_campaign_form"):
        name = st.text_input("Campaign name")
        description = st.text_area("Description")
        players = st.text_input("Players", help="Comma separated usernames")
        submitted = st.form_submit_button("Create campaign")

    if submitted:
        try:
            campaign = create_campaign(
                ctx.state, user.id, name, description, parse_usernames(players)
            )
        except TorchTimeError as exc:
            st.error(exc.message)
        else:
            if ctx.commit():
                ctx.navigate(format_route("campaign", {"id": campaign.id}))

    ctx.link("← Dashboard", "dashboard", key="create_back")


# =============================================================================
# Detail
# =============================================================================


def render_campaign(ctx: AppContext, route: Route) -> None:
    """Render one campaign: members, sessions, notes and chat."""
    user = ctx.user
    campaign = ctx.state.get_campaign(route.get("id"))
    if campaign is None or not campaign.is_member(user.id):
        st.error("Campaign not found.")
        ctx.link("← Dashboard", "dashboard", key="campaign_missing_back")
        return

    is_dm = campaign.is_dm(user.id)

    ctx.link("← Dashboard", "dashboard", key="campaign_back")
    st.markdown(f"## {campaign.name}")
    if campaign.description:
        st.markdown(campaign.description)

    members_tab, sessions_tab, notes_tab, chat_tab = st.tabs(
        ["👥 Party", "📅 Sessions", "📝 Notes", "💬 Chat"]
    )

    with members_tab:
        _render_members(ctx, campaign, is_dm)
    with sessions_tab:
        _render_sessions(ctx, campaign, is_dm)
    with notes_tab:
        _render_notes(ctx, campaign, user.id)
    with chat_tab:
        _render_chat(ctx, campaign, user.id)

    if is_dm:
        st.divider()
        with st.expander("Danger zone"):
            st.warning("Deleting a campaign also deletes its sessions and proposals.")
            if st.button("Delete campaign", key="delete_campaign"):
                delete_campaign(ctx.state, campaign.id, user.id)
                if ctx.commit():
                    ctx.navigate("dashboard")


def _render_members(ctx: AppContext, campaign: Campaign, is_dm: bool) -> None:
    st.markdown(f"**DM:** {ctx.username(campaign.dm_id)}")
    if campaign.player_ids:
        st.markdown("**Players:** " + ", ".join(ctx.username(p) for p in campaign.player_ids))
    else:
        st.caption("No players yet.")

    characters = [c for c in ctx.state.characters if c.campaign_id == campaign.id]
    if characters:
        st.markdown("**Characters**")
        for character in characters:
            ctx.link(
                f"{character.name} ({ctx.username(character.owner_id)}) - level {character.level}",
                format_route("character-sheet", {"id": character.id}),
                key=f"campaign_char_{character.id}",
            )

    if is_dm:
        with st.form("add_player_form", clear_on_submit=True):
            username = st.text_input("Add player by username")
            if st.form_submit_button("Add player"):
                try:
                    add_player(ctx.state, campaign.id, campaign.dm_id, username)
                except TorchTimeError as exc:
                    st.error(exc.message)
                else:
                    if ctx.commit():
                        st.rerun()


def _render_sessions(ctx: AppContext, campaign: Campaign, is_dm: bool) -> None:
    st.markdown("### Scheduled")
    sessions = list_scheduled_sessions(ctx.state, campaign.id)
    if not sessions:
        st.caption("No sessions scheduled.")
    for session in sessions:
        col1, col2 = st.columns([5, 1])
        with col1:
            where = f" @ {session.location}" if session.location else ""
            until = f" - {session.ends_at:%H:%M}" if session.ends_at else ""
            st.markdown(f"**{session.starts_at:%a %b %d, %H:%M}{until}** · {session.title}{where}")
        with col2:
            stored = ctx.state.get_session(session.id) is not None
            if is_dm and stored and st.button("🗑️", key=f"del_session_{session.id}"):
                delete_session(ctx.state, session.id, campaign.dm_id)
                if ctx.commit():
                    st.rerun()

    st.markdown("### Proposals")
    for proposal in proposals_for_campaign(ctx.state, campaign.id):
        status = "✅ scheduled" if proposal.finalized else f"🗳️ {len(proposal.options)} option(s)"
        ctx.link(
            f"{proposal.title} - {status}",
            format_route("session", {"id": proposal.id}),
            key=f"proposal_{proposal.id}",
        )

    if not is_dm:
        return

    with st.expander("Propose a session"):
        with st.form("proposal_form", clear_on_submit=True):
            title = st.text_input("Title")
            day = st.date_input("Date", value=None)
            start = st.time_input("Start", value=None)
            end = st.time_input("End (optional)", value=None)
            location = st.text_input("Location")
            if st.form_submit_button("Create proposal"):
                drafts = [OptionDraft(day, start, end, location)] if day or start else []
                try:
                    proposal = create_proposal(ctx.state, campaign.id, campaign.dm_id, title, drafts)
                except TorchTimeError as exc:
                    st.error(exc.message)
                else:
                    if ctx.commit():
                        ctx.navigate(format_route("session", {"id": proposal.id}))

    with st.expander("Schedule directly"):
        with st.form("schedule_form", clear_on_submit=True):
            title = st.text_input("Title", key="schedule_title")
            day = st.date_input("Date", value=None, key="schedule_date")
            start = st.time_input("Start", value=None, key="schedule_start")
            end = st.time_input("End (optional)", value=None, key="schedule_end")
            location = st.text_input("Location", key="schedule_location")
            if st.form_submit_button("Schedule"):
                starts_at = datetime.combine(day, start) if day and start else None
                ends_at = datetime.combine(day, end) if day and end else None
                try:
                    schedule_session(
                        ctx.state,
                        campaign.id,
                        campaign.dm_id,
                        title,
                        starts_at,
                        ends_at=ends_at,
                        location=location,
                    )
                except TorchTimeError as exc:
                    st.error(exc.message)
                else:
                    if ctx.commit():
                        st.rerun()


def _render_notes(ctx: AppContext, campaign: Campaign, user_id: str) -> None:
    shared = st.text_area("Shared notes", value=campaign.notes.shared, height=200)
    private = st.text_area(
        "Private notes (only you)",
        value=campaign.notes.private.get(user_id, ""),
        height=150,
    )
    if st.button("Save notes", key="save_notes"):
        update_shared_notes(ctx.state, campaign.id, user_id, shared)
        update_private_notes(ctx.state, campaign.id, user_id, private)
        if ctx.commit():
            st.success("Notes saved.")


def _render_chat(ctx: AppContext, campaign: Campaign, user_id: str) -> None:
    messages = sorted_messages(campaign)
    if not messages:
        st.caption("No messages yet.")
    for message in messages:
        with st.chat_message("user" if message.user_id == user_id else "assistant"):
            st.markdown(f"**{ctx.username(message.user_id)}** · {message.timestamp:%b %d %H:%M}")
            st.markdown(message.text)

    text = st.chat_input("Say something to the party")
    if text and post_message(ctx.state, campaign.id, user_id, text) is not None:
        if ctx.commit():
            st.rerun()
