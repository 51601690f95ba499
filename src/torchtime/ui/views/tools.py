"""Table tools: countdown timer, dice roller and item library."""

from __future__ import annotations

import time

import streamlit as st

from torchtime.core.constants import DICE_TYPES, TIMER_DEFAULT_MINUTES
from torchtime.core.exceptions import TorchTimeError
from torchtime.engine.dice import DiceRoll, record_roll
from torchtime.engine.timer import Countdown
from torchtime.services.characters import add_inventory_item, characters_for_user
from torchtime.ui.context import AppContext
from torchtime.ui.router import Route


# =============================================================================
# Timer
# =============================================================================


def render_timer(ctx: AppContext, route: Route) -> None:
    st.markdown("## ⏳ Session timer")

    with st.form("timer_form"):
        minutes = st.text_input("Minutes", value=str(TIMER_DEFAULT_MINUTES))
        col1, col2 = st.columns(2)
        start = col1.form_submit_button("Start")
        stop = col2.form_submit_button("Stop")

    if start:
        try:
            st.session_state.countdown = Countdown.start(
                minutes, max_minutes=ctx.settings.game.timer_max_minutes
            )
        except TorchTimeError as exc:
            st.error(exc.message)
    if stop:
        st.session_state.pop("countdown", None)

    countdown: Countdown | None = st.session_state.get("countdown")
    if countdown is None:
        return

    st.markdown(f'<div class="tt-timer">{countdown.display()}</div>', unsafe_allow_html=True)
    if not countdown.is_expired():
        time.sleep(1)
        st.rerun()


# =============================================================================
# Dice
# =============================================================================


def _show_roll(roll: DiceRoll) -> None:
    if roll.is_critical:
        st.markdown(f'<span class="tt-crit">Critical! {roll.total}</span>', unsafe_allow_html=True)
    else:
        st.markdown(f"### {roll.total}")
    st.caption(roll.detail)


def render_dice(ctx: AppContext, route: Route) -> None:
    user = ctx.user
    st.markdown("## 🎲 Dice")

    rolled: DiceRoll | None = None

    cols = st.columns(len(DICE_TYPES))
    for col, sides in zip(cols, DICE_TYPES):
        if col.button(f"d{sides}", key=f"quick_d{sides}", use_container_width=True):
            rolled = ctx.roller.roll_die(sides)

    with st.form("dice_form"):
        expression = st.text_input("Expression", placeholder="2d6+3, 4d6kh3, 1d20+5")
        if st.form_submit_button("Roll"):
            try:
                rolled = ctx.roller.roll(expression)
            except TorchTimeError as exc:
                st.error(exc.message)

    if rolled is not None:
        record_roll(ctx.state, user.id, rolled, limit=ctx.settings.game.dice_log_limit)
        ctx.commit()
        _show_roll(rolled)

    st.markdown("### Log")
    if not ctx.state.dice_log:
        st.caption("No rolls yet.")
    for entry in reversed(ctx.state.dice_log[-20:]):
        crit = " 🌟" if entry.is_critical else ""
        st.markdown(
            f"{entry.timestamp:%H:%M:%S} · **{ctx.username(entry.user_id)}** "
            f"rolled `{entry.expression}` = **{entry.total}**{crit}"
        )


# =============================================================================
# Items
# =============================================================================


def render_items(ctx: AppContext, route: Route) -> None:
    user = ctx.user
    st.markdown("## 🎒 Item library")

    equipment = ctx.client.list_equipment()
    if not equipment:
        st.warning("Item data is unavailable right now.")
        return

    query = st.text_input("Search", placeholder="longsword, rope, ...").strip().lower()
    matches = [e for e in equipment if query in e.get("name", "").lower()] if query else equipment
    st.caption(f"{len(matches)} of {len(equipment)} items")

    item = st.selectbox("Item", matches, format_func=lambda e: e.get("name", "?"), index=None)
    if item is None:
        return

    details = ctx.client.get_equipment(item["index"])
    category = (details.get("equipment_category") or {}).get("name")
    cost = details.get("cost") or {}
    facts = [
        f"**Category:** {category}" if category else "",
        f"**Cost:** {cost.get('quantity')} {cost.get('unit')}" if cost else "",
        f"**Weight:** {details['weight']} lb" if details.get("weight") is not None else "",
    ]
    st.markdown("  \n".join(f for f in facts if f) or "No details available.")
    for line in details.get("desc") or []:
        st.markdown(line)

    characters = characters_for_user(ctx.state, user.id)
    if not characters:
        st.caption("Create a character to carry items.")
        return

    col1, col2 = st.columns([3, 1])
    character = col1.selectbox("Give to", characters, format_func=lambda c: c.name)
    quantity = col2.number_input("Qty", min_value=1, value=1)
    if st.button("Add to inventory", type="primary"):
        try:
            add_inventory_item(ctx.state, character.id, user.id, item, int(quantity))
        except TorchTimeError as exc:
            st.error(exc.message)
        else:
            if ctx.commit():
                st.success(f"Added {item.get('name')} to {character.name}.")
