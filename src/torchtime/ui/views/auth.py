"""Login, registration and logout screens."""

from __future__ import annotations

import streamlit as st

from torchtime.core.exceptions import TorchTimeError
from torchtime.core.logging import bind_context
from torchtime.models.enums import Role
from torchtime.services.auth import login, logout, register
from torchtime.ui.context import AppContext
from torchtime.ui.router import Route


def render_login(ctx: AppContext, route: Route) -> None:
    st.markdown("## 🔥 Log in to TorchTime")

    with st.form("login_form"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Log in", use_container_width=True)

    if submitted:
        try:
            user = login(ctx.state, username, password)
        except TorchTimeError as exc:
            st.error(exc.message)
        else:
            bind_context(user_id=user.id)
            if ctx.commit():
                ctx.navigate(ctx.settings.ui.default_route)

    st.markdown("No account yet?")
    ctx.link("Create an account", "register", key="to_register")


def render_register(ctx: AppContext, route: Route) -> None:
    st.markdown("## 🔥 Create an account")

    with st.form("register_form"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        role = st.radio(
            "I am a",
            list(Role),
            format_func=lambda r: r.display_name,
            horizontal=True,
        )
        submitted = st.form_submit_button("Register", use_container_width=True)

    if submitted:
        try:
            user = register(ctx.state, username, password, role)
        except TorchTimeError as exc:
            st.error(exc.message)
        else:
            bind_context(user_id=user.id)
            if ctx.commit():
                ctx.navigate(ctx.settings.ui.default_route)

    ctx.link("Back to login", "login", key="to_login")


def render_logout(ctx: AppContext, route: Route) -> None:
    logout(ctx.state)
    ctx.commit()
    st.session_state.pop("countdown", None)
    ctx.navigate("login")
