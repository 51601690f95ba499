"""Fragment routing.

Every screen is addressed by a fragment such as ``campaign?id=abc``. In
Streamlit the fragment travels in the page's query parameters (``route``
plus the route's own parameters), so links survive a reload.

This module has no Streamlit dependency; views receive the parsed Route.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Mapping
from urllib.parse import parse_qsl, urlencode

from torchtime.core.logging import get_logger


if TYPE_CHECKING:
    from torchtime.ui.context import AppContext


logger = get_logger(__name__)


ROUTES: tuple[str, ...] = (
    "login",
    "register",
    "dashboard",
    "create-campaign",
    "campaign",
    "session",
    "character-creator",
    "character-sheet",
    "timer",
    "dice",
    "items",
    "logout",
)

PUBLIC_ROUTES: frozenset[str] = frozenset({"login", "register"})
"""Routes reachable without logging in."""

FALLBACK_ROUTE = "dashboard"


@dataclass(frozen=True)
class Route:
    """A parsed fragment: route name plus string parameters."""

    name: str
    params: dict[str, str] = field(default_factory=dict)

    def get(self, key: str, default: str | None = None) -> str | None:
        return self.params.get(key, default)

    @property
    def fragment(self) -> str:
        return format_route(self.name, self.params)


def format_route(name: str, params: Mapping[str, str] | None = None) -> str:
    """Build a fragment, e.g. ``format_route("campaign", {"id": "c1"})`` -> ``campaign?id=c1``."""
    params = {k: v for k, v in (params or {}).items() if v is not None and v != ""}
    return f"{name}?{urlencode(params)}" if params else name


def parse_route(fragment: str | None, default: str = FALLBACK_ROUTE) -> Route:
    """Parse a fragment into a Route.

    A leading ``#`` is optional and everything after ``?`` is a query
    string. An empty fragment yields the default route.
    """
    text = (fragment or "").strip().lstrip("#")
    name, _, query = text.partition("?")
    name = name.strip().strip("/").lower()
    params = dict(parse_qsl(query, keep_blank_values=False))
    return Route(name=name or default, params=params)


def resolve(route: Route, logged_in: bool) -> Route:
    """Apply the authentication guard and the unknown-route fallback."""
    if not logged_in:
        if route.name in PUBLIC_ROUTES:
            return route
        return Route(name="login")
    if route.name not in ROUTES:
        return Route(name=FALLBACK_ROUTE)
    return route


View = Callable[["AppContext", Route], None]


class Router:
    """Maps route names to view functions.

    Example:
        >>> router = Router()
        >>> router.register("dashboard", render_dashboard)
        >>> router.dispatch("#dashboard", ctx)
        Route(name='dashboard', params={})
    """

    def __init__(self, default: str = FALLBACK_ROUTE) -> None:
        self.default = default
        self._views: dict[str, View] = {}

    def register(self, name: str, view: View) -> None:
        if name not in ROUTES:
            raise ValueError(f"Unknown route: {name}")
        self._views[name] = view

    @property
    def registered(self) -> list[str]:
        return list(self._views)

    def dispatch(self, fragment: str | None, ctx: AppContext) -> Route:
        """Render the view for ``fragment`` and return the route actually shown."""
        requested = parse_route(fragment, self.default)
        route = resolve(requested, ctx.state.current_user_id is not None)
        if route.name not in self._views:
            route = Route(name=FALLBACK_ROUTE)
        if route != requested:
            logger.debug("Route redirected", requested=requested.name, shown=route.name)
        self._views[route.name](ctx, route)
        return route


__all__ = [
    "ROUTES",
    "PUBLIC_ROUTES",
    "Route",
    "format_route",
    "parse_route",
    "resolve",
    "View",
    "Router",
]
