"""Read-only client for the public D&D 5e reference API.

Races, classes, subclasses, class features per level and equipment come
from https://www.dnd5eapi.co. The API needs no authentication and is only
ever read.

Failures never propagate: any HTTP, connection, timeout or decoding error
is logged and the call returns an empty list or dict, so the UI simply
shows fewer choices.
"""

from __future__ import annotations

from typing import Any

import requests

from torchtime.core.constants import ABILITY_INDEX
from torchtime.core.exceptions import ReferenceDataError
from torchtime.core.logging import get_logger


logger = get_logger(__name__)


class DndApiClient:
    """Client for the D&D 5e reference API.

    Example:
        >>> client = DndApiClient()
        >>> [race["name"] for race in client.list_races()][:2]
        ['Dragonborn', 'Dwarf']
    """

    def __init__(
        self,
        base_url: str = "https://www.dnd5eapi.co/api",
        *,
        timeout: float = 15.0,
        enable_cache: bool = True,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: API root, without trailing slash.
            timeout: Per-request timeout in seconds.
            enable_cache: Keep successful responses in memory.
            session: Optional requests session (injected in tests).
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.enable_cache = enable_cache
        self.session = session or requests.Session()
        self._cache: dict[str, Any] = {}

    @classmethod
    def from_settings(cls) -> DndApiClient:
        """Build a client from the application settings."""
        from torchtime.core.config import get_settings

        api = get_settings().api
        return cls(api.base_url, timeout=api.timeout_seconds, enable_cache=api.enable_cache)

    # =========================================================================
    # HTTP
    # =========================================================================

    def _get(self, path: str) -> Any:
        """GET a path and decode the JSON body.

        Raises:
            ReferenceDataError: On any request or decoding failure.
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        if self.enable_cache and url in self._cache:
            return self._cache[url]

        try:
            response = self.session.get(
                url,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as exc:
            raise ReferenceDataError(f"Request failed: {exc}", url=url) from exc
        except ValueError as exc:
            raise ReferenceDataError(f"Invalid JSON: {exc}", url=url) from exc

        if self.enable_cache:
            self._cache[url] = data
        return data

    def _fetch_object(self, path: str) -> dict[str, Any]:
        try:
            data = self._get(path)
        except ReferenceDataError as exc:
            logger.warning("Reference data unavailable", error=exc.message, **exc.details)
            return {}
        return data if isinstance(data, dict) else {}

    def _fetch_results(self, path: str) -> list[dict[str, Any]]:
        """Fetch a list endpoint and return its ``results`` array."""
        results = self._fetch_object(path).get("results", [])
        return [r for r in results if isinstance(r, dict)] if isinstance(results, list) else []

    def clear_cache(self) -> None:
        self._cache.clear()

    # =========================================================================
    # Races
    # =========================================================================

    def list_races(self) -> list[dict[str, Any]]:
        """All races as ``{"index", "name", "url"}`` entries."""
        return self._fetch_results("races")

    def get_race(self, race_index: str) -> dict[str, Any]:
        """Full race payload (ability_bonuses, traits, alignment, ...)."""
        if not race_index:
            return {}
        return self._fetch_object(f"races/{race_index}")

    # =========================================================================
    # Classes
    # =========================================================================

    def list_classes(self) -> list[dict[str, Any]]:
        return self._fetch_results("classes")

    def get_class(self, class_index: str) -> dict[str, Any]:
        """Full class payload (hit_die, proficiencies, ...)."""
        if not class_index:
            return {}
        return self._fetch_object(f"classes/{class_index}")

    def list_subclasses(self, class_index: str) -> list[dict[str, Any]]:
        if not class_index:
            return []
        return self._fetch_results(f"classes/{class_index}/subclasses")

    def get_class_level_features(self, class_index: str, level: int) -> list[str]:
        """Names of the class features gained at one level."""
        if not class_index:
            return []
        payload = self._fetch_object(f"classes/{class_index}/levels/{level}")
        features = payload.get("features", [])
        if not isinstance(features, list):
            return []
        return [f["name"] for f in features if isinstance(f, dict) and f.get("name")]

    # =========================================================================
    # Equipment
    # =========================================================================

    def list_equipment(self) -> list[dict[str, Any]]:
        return self._fetch_results("equipment")

    def get_equipment(self, equipment_index: str) -> dict[str, Any]:
        if not equipment_index:
            return {}
        return self._fetch_object(f"equipment/{equipment_index}")


# =============================================================================
# Payload Helpers
# =============================================================================


def race_ability_bonuses(race: dict[str, Any]) -> dict[str, int]:
    """Map a race payload's ability bonuses to full ability names.

    Example:
        >>> race_ability_bonuses({"ability_bonuses": [
        ...     {"ability_score": {"index": "con"}, "bonus": 2}]})
        {'constitution': 2}
    """
    bonuses: dict[str, int] = {}
    for entry in race.get("ability_bonuses", []) or []:
        index = (entry.get("ability_score") or {}).get("index")
        name = ABILITY_INDEX.get(index or "")
        if name is None:
            continue
        try:
            bonuses[name] = bonuses.get(name, 0) + int(entry.get("bonus", 0))
        except (TypeError, ValueError):
            continue
    return bonuses


def class_hit_die(klass: dict[str, Any], default: int) -> int:
    """Hit die of a class payload, or ``default`` when missing."""
    value = klass.get("hit_die")
    return value if isinstance(value, int) and value > 0 else default


__all__ = [
    "DndApiClient",
    "race_ability_bonuses",
    "class_hit_die",
]
