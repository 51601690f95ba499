"""Session proposal screen: vote on times, and for the DM, finalize."""

from __future__ import annotations

import streamlit as st

from torchtime.core.exceptions import TorchTimeError
from torchtime.engine.voting import (
    OptionDraft,
    add_option,
    cast_vote,
    clear_vote,
    delete_proposal,
    finalize,
    rank_options,
    remove_option,
)
from torchtime.models.campaign import SessionProposal, TimeOption
from torchtime.models.enums import VoteChoice
from torchtime.ui.context import AppContext
from torchtime.ui.router import Route, format_route


_VOTE_LABELS = {
    VoteChoice.YES: "✅ Yes",
    VoteChoice.MAYBE: "🤔 Maybe",
    VoteChoice.NO: "❌ No",
}


def render_session(ctx: AppContext, route: Route) -> None:
    user = ctx.user
    proposal = ctx.state.get_proposal(route.get("id"))
    campaign = ctx.state.get_campaign(proposal.campaign_id) if proposal else None
    if proposal is None or campaign is None or not campaign.is_member(user.id):
        st.error("Session not found.")
        ctx.link("← Dashboard", "dashboard", key="session_missing_back")
        return

    is_dm = campaign.is_dm(user.id)
    campaign_fragment = format_route("campaign", {"id": campaign.id})

    ctx.link(f"← {campaign.name}", campaign_fragment, key="session_back")
    st.markdown(f"## {proposal.title}")

    chosen = proposal.chosen_option
    if chosen is not None:
        st.success(f"Scheduled for {_describe(chosen)}")

    if not proposal.options:
        st.info("No times proposed yet.")

    best = rank_options(proposal)[0].id if proposal.options else None
    for index, option in enumerate(proposal.options):
        _render_option(ctx, proposal, option, index, user.id, is_dm, best)

    if not is_dm:
        return

    if not proposal.finalized:
        with st.expander("Add a time"):
            with st.form("add_option_form", clear_on_submit=True):
                day = st.date_input("Date", value=None)
                start = st.time_input("Start", value=None)
                end = st.time_input("End (optional)", value=None)
                location = st.text_input("Location")
                if st.form_submit_button("Add time"):
                    try:
                        add_option(ctx.state, proposal.id, user.id, OptionDraft(day, start, end, location))
                    except TorchTimeError as exc:
                        st.error(exc.message)
                    else:
                        if ctx.commit():
                            st.rerun()

    st.divider()
    if st.button("Delete proposal", key="delete_proposal"):
        delete_proposal(ctx.state, proposal.id, user.id)
        if ctx.commit():
            ctx.navigate(campaign_fragment)


def _describe(option: TimeOption) -> str:
    until = f"-{option.end:%H:%M}" if option.end else ""
    where = f" @ {option.location}" if option.location else ""
    return f"{option.starts_at:%a %b %d, %H:%M}{until}{where}"


def _render_option(
    ctx: AppContext,
    proposal: SessionProposal,
    option: TimeOption,
    index: int,
    user_id: str,
    is_dm: bool,
    best: str | None,
) -> None:
    with st.container(border=True):
        star = " ⭐" if option.id == best and not proposal.finalized else ""
        st.markdown(f"**{_describe(option)}**{star}")

        buckets = proposal.buckets(option.id)
        cols = st.columns(3)
        for col, choice in zip(cols, VoteChoice):
            names = ", ".join(ctx.username(u) for u in buckets[choice]) or "-"
            col.markdown(f"{_VOTE_LABELS[choice]} ({len(buckets[choice])})  \n{names}")

        if proposal.finalized:
            return

        current = proposal.vote_of(option.id, user_id)
        vote_cols = st.columns(5)
        for col, choice in zip(vote_cols, VoteChoice):
            label = _VOTE_LABELS[choice] + (" •" if current is choice else "")
            if col.button(label, key=f"vote_{option.id}_{choice}"):
                _apply(ctx, lambda c=choice: cast_vote(ctx.state, proposal.id, option.id, user_id, c))
        if current is not None and vote_cols[3].button("Clear", key=f"clear_{option.id}"):
            _apply(ctx, lambda: clear_vote(ctx.state, proposal.id, option.id, user_id))

        if is_dm:
            if vote_cols[4].button("Finalize", key=f"finalize_{option.id}", type="primary"):
                _apply(ctx, lambda: finalize(ctx.state, proposal.id, user_id, index))
            if st.button("Remove time", key=f"remove_{option.id}"):
                _apply(ctx, lambda: remove_option(ctx.state, proposal.id, option.id, user_id))


def _apply(ctx: AppContext, action) -> None:
    try:
        action()
    except TorchTimeError as exc:
        st.error(exc.message)
        return
    if ctx.commit():
        st.rerun()
