"""Character creator and character sheet."""

from __future__ import annotations

import streamlit as st

from torchtime.core.constants import (
    DEFAULT_ABILITY_SCORE,
    MAX_ABILITY_SCORE,
    MAX_CHARACTER_LEVEL,
    MIN_ABILITY_SCORE,
)
from torchtime.core.exceptions import TorchTimeError
from torchtime.engine.leveling import (
    AbilityScoreIncrease,
    level_for_xp,
    plan_level_ups,
    xp_to_next_level,
)
from torchtime.models.character import Character
from torchtime.models.enums import Ability
from torchtime.services.campaigns import campaigns_for_user
from torchtime.services.characters import (
    award_experience,
    build_ability_scores,
    can_award_experience,
    can_manage,
    create_character,
    delete_character,
    remove_inventory_item,
)
from torchtime.ui.context import AppContext
from torchtime.ui.router import Route, format_route
from torchtime.ui.theme import render_ability_scores


# =============================================================================
# Creator
# =============================================================================


def render_character_creator(ctx: AppContext, route: Route) -> None:
    user = ctx.user
    client = ctx.client

    ctx.link("← Dashboard", "dashboard", key="creator_back")
    st.markdown("## 🧙 New character")

    races = client.list_races()
    classes = client.list_classes()
    if not races or not classes:
        st.warning("Reference data is unavailable right now; race and class lists may be empty.")

    name = st.text_input("Name")
    gender = st.text_input("Gender")

    race = st.selectbox("Race", races, format_func=lambda r: r.get("name", "?"), index=None)
    klass = st.selectbox("Class", classes, format_func=lambda c: c.get("name", "?"), index=None)

    subclass = None
    if klass:
        subclasses = client.list_subclasses(klass["index"])
        if subclasses:
            subclass = st.selectbox(
                "Subclass", subclasses, format_func=lambda s: s.get("name", "?"), index=None
            )

    campaigns = campaigns_for_user(ctx.state, user.id)
    campaign = st.selectbox(
        "Campaign", [None, *campaigns], format_func=lambda c: c.name if c else "None"
    )
    level = st.number_input("Starting level", min_value=1, max_value=MAX_CHARACTER_LEVEL, value=1)

    st.markdown("**Base ability scores**")
    base_scores: dict[str, int] = {}
    for column, ability in zip(st.columns(len(Ability)), Ability):
        base_scores[ability.value] = int(
            column.number_input(
                ability.abbreviation,
                min_value=MIN_ABILITY_SCORE,
                max_value=MAX_ABILITY_SCORE,
                value=DEFAULT_ABILITY_SCORE,
                key=f"base_{ability.value}",
            )
        )

    if race:
        st.markdown("**With racial bonuses**")
        render_ability_scores(
            build_ability_scores(client.get_race(race["index"]), base_scores).model_dump()
        )

    if st.button("Create character", type="primary"):
        try:
            character = create_character(
                ctx.state,
                client,
                user.id,
                name=name,
                race_index=race["index"] if race else "",
                class_index=klass["index"] if klass else "",
                subclass_index=subclass["index"] if subclass else None,
                gender=gender,
                campaign_id=campaign.id if campaign else None,
                level=int(level),
                base_scores=base_scores,
            )
        except TorchTimeError as exc:
            st.error(exc.message)
        else:
            if ctx.commit():
                ctx.navigate(format_route("character-sheet", {"id": character.id}))


# =============================================================================
# Sheet
# =============================================================================


def render_character_sheet(ctx: AppContext, route: Route) -> None:
    """Render a character with XP awards and inventory."""
    user = ctx.user
    character = ctx.state.get_character(route.get("id"))
    if character is None or not can_manage(ctx.state, character, user.id):
        st.error("Character not found.")
        ctx.link("← Dashboard", "dashboard", key="sheet_missing_back")
        return

    ctx.link("← Dashboard", "dashboard", key="sheet_back")

    level_up = st.session_state.pop(f"level_up_{character.id}", None)
    if level_up:
        st.success(level_up)

    subclass = f" ({character.subclass_name})" if character.subclass_name else ""
    st.markdown(f"## {character.name}")
    st.markdown(
        f"**{character.display_race} {character.class_name}{subclass}** · Level {character.level}"
        + (f" · {character.gender}" if character.gender else "")
    )
    campaign = ctx.state.get_campaign(character.campaign_id)
    if campaign:
        st.caption(f"Campaign: {campaign.name} · Player: {ctx.username(character.owner_id)}")

    render_ability_scores(character.abilities.model_dump())

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Hit Points", character.hit_points)
    col2.metric("Hit Die", f"d{character.hit_die}")
    col3.metric("Proficiency", f"+{character.proficiency_bonus}")
    remaining = xp_to_next_level(character.experience_points)
    col4.metric(
        "Experience",
        character.experience_points,
        f"{remaining} to next level" if remaining is not None else "max level",
        delta_color="off",
    )

    st.markdown("### Features")
    if character.features:
        st.markdown("\n".join(f"- {name}" for name in character.features))
    else:
        st.caption("No features yet.")

    _render_inventory(ctx, character, user.id)

    if can_award_experience(ctx.state, character, user.id):
        _render_award_xp(ctx, character, user.id)

    st.divider()
    if st.button("Delete character", key="delete_character"):
        delete_character(ctx.state, character.id, user.id)
        if ctx.commit():
            ctx.navigate("dashboard")


def _render_inventory(ctx: AppContext, character: Character, user_id: str) -> None:
    st.markdown("### Inventory")
    if not character.inventory:
        st.caption("Empty. Add gear from the item library.")
    for item in character.inventory:
        col1, col2 = st.columns([5, 1])
        col1.markdown(f"{item.name} × {item.quantity}")
        if col2.button("🗑️", key=f"drop_{item.index}"):
            remove_inventory_item(ctx.state, character.id, user_id, item.index)
            if ctx.commit():
                st.rerun()
    ctx.link("Open item library", "items", key="sheet_items")


def _render_award_xp(ctx: AppContext, character: Character, user_id: str) -> None:
    st.markdown("### Award experience")
    amount = st.number_input("XP", min_value=0, step=50, value=0, key="xp_amount")

    target = level_for_xp(character.experience_points + int(amount))
    features_by_level = {
        level: ctx.client.get_class_level_features(character.class_index, level)
        for level in range(character.level + 1, target + 1)
    } if character.class_index else {}
    effects = plan_level_ups(character, target, features_by_level)

    choices: dict[int, AbilityScoreIncrease] = {}
    for effect in effects:
        gained = ", ".join(effect.new_features) or "no new features"
        st.markdown(f"**Level {effect.level}:** +{effect.hp_gain} HP, {gained}")
        if effect.ability_score_increase:
            col1, col2 = st.columns(2)
            first = col1.selectbox(
                "Increase (+2, or +1 with a second pick)",
                list(Ability),
                format_func=lambda a: a.full_name,
                index=None,
                key=f"asi_first_{effect.level}",
            )
            second = col2.selectbox(
                "Second ability (+1)",
                list(Ability),
                format_func=lambda a: a.full_name,
                index=None,
                key=f"asi_second_{effect.level}",
            )
            choices[effect.level] = AbilityScoreIncrease(first, second)

    if st.button("Award", key="award_xp", disabled=amount <= 0):
        try:
            result = award_experience(
                ctx.state,
                ctx.engine,
                character.id,
                user_id,
                int(amount),
                lambda _character, level: choices.get(level),
            )
        except TorchTimeError as exc:
            st.error(exc.message)
            return
        if ctx.commit():
            if result.leveled_up:
                st.session_state[f"level_up_{character.id}"] = (
                    f"{character.name} reached level {result.new_level}!"
                )
            st.rerun()
