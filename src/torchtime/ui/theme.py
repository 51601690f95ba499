"""TorchTime theme - warm torchlight on dark parchment."""

from __future__ import annotations

import html

import streamlit as st


# =============================================================================
# Color Palette
# =============================================================================


class Colors:
    """Torchlight palette."""

    FLAME = "#E8772E"
    EMBER = "#B4461F"
    GOLD = "#D9A441"

    BG_DARK = "#1C1410"
    BG_CARD = "#2A201A"

    TEXT_PRIMARY = "#F5EDE4"
    TEXT_MUTED = "#8B7355"

    BORDER = "#5C4A3A"

    SUCCESS = "#22C55E"
    ERROR = "#EF4444"


THEME_CSS = f"""
<style>
    @import url('https://fonts.googleapis.com/css2?family=Inter:wght@400;600&family=Cinzel:wght@600&display=swap');

    .stApp {{
        background-color: {Colors.BG_DARK};
        color: {Colors.TEXT_PRIMARY};
        font-family: 'Inter', sans-serif;
    }}

    h1, h2, h3 {{
        font-family: 'Cinzel', serif !important;
        color: {Colors.GOLD} !important;
    }}

    .tt-card {{
        background: {Colors.BG_CARD};
        border: 1px solid {Colors.BORDER};
        border-left: 4px solid {Colors.FLAME};
        border-radius: 8px;
        padding: 0.75rem 1rem;
        margin-bottom: 0.75rem;
    }}

    .tt-muted {{
        color: {Colors.TEXT_MUTED};
        font-size: 0.85rem;
    }}

    .tt-timer {{
        font-family: 'Cinzel', serif;
        font-size: 4rem;
        text-align: center;
        color: {Colors.FLAME};
    }}

    .tt-crit {{
        color: {Colors.GOLD};
        font-weight: 600;
    }}
</style>
"""


def apply_theme() -> None:
    """Apply the theme to the Streamlit app."""
    st.markdown(THEME_CSS, unsafe_allow_html=True)


def render_card(title: str, body: str = "", muted: str = "") -> None:
    """Render a bordered card with an optional muted footer line."""
    footer = f'<div class="tt-muted">{html.escape(muted)}</div>' if muted else ""
    st.markdown(
        f'<div class="tt-card"><strong>{html.escape(title)}</strong><br>{html.escape(body)}{footer}</div>',
        unsafe_allow_html=True,
    )


def signed(value: int) -> str:
    """Format a modifier with its sign, e.g. +2 or -1."""
    return f"+{value}" if value >= 0 else str(value)


def render_ability_scores(scores: dict[str, int]) -> None:
    """Render the six ability scores with modifiers."""
    cols = st.columns(6)
    for col, (name, score) in zip(cols, scores.items()):
        with col:
            st.metric(name[:3].upper(), score, signed((score - 10) // 2), delta_color="off")
