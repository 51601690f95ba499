"""SQLite persistence layer for TorchTime.

Provides a small key/value store (the stand-in for browser local storage)
and a StateStore that keeps the whole application state as one JSON
document under a single key.

Default location: data/torchtime.db (see StorageSettings).
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from pydantic import ValidationError as PydanticValidationError

from torchtime.core.exceptions import StorageError
from torchtime.core.logging import get_logger
from torchtime.models.state import AppState

logger = get_logger(__name__)


# =============================================================================
# Key/Value Storage
# =============================================================================


class LocalStorage:
    """String key/value storage backed by a single SQLite table.

    Pass ``":memory:"`` as the path for a throwaway store; the connection
    is then kept open for the lifetime of the object.
    """

    SCHEMA_VERSION = 1

    def __init__(self, db_path: str | Path) -> None:
        """Initialize storage.

        Args:
            db_path: Path to database file, or ":memory:".
        """
        self._memory_conn: sqlite3.Connection | None = None
        if str(db_path) == ":memory:":
            self.db_path = Path(":memory:")
            self._memory_conn = sqlite3.connect(":memory:")
        else:
            self.db_path = Path(db_path)
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_schema()

        logger.info("Local storage initialized", path=str(self.db_path))

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection with proper cleanup."""
        if self._memory_conn is not None:
            try:
                yield self._memory_conn
                self._memory_conn.commit()
            except Exception:
                self._memory_conn.rollback()
                raise
            return

        conn = sqlite3.connect(str(self.db_path))
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                )
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS storage (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            cursor.execute("""
                INSERT OR REPLACE INTO schema_version (version) VALUES (?)
            """, (self.SCHEMA_VERSION,))

    def get_item(self, key: str) -> str | None:
        """Get the value stored under a key, or None."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT value FROM storage WHERE key = ?", (key,))
            row = cursor.fetchone()
            return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        with self._get_connection() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO storage (key, value) VALUES (?, ?)",
                (key, value),
            )

    def remove_item(self, key: str) -> bool:
        """Remove a key.

        Returns:
            True if deleted, False if not found.
        """
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM storage WHERE key = ?", (key,))
            return cursor.rowcount > 0

    def keys(self) -> list[str]:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT key FROM storage ORDER BY key")
            return [row[0] for row in cursor.fetchall()]

    def clear(self) -> None:
        """Remove every key."""
        with self._get_connection() as conn:
            conn.execute("DELETE FROM storage")


# =============================================================================
# State Store
# =============================================================================


class StateStore:
    """Loads and saves the whole AppState document under one storage key.

    Writes are synchronous and whole-document. Reads never fail: a missing
    or corrupt document falls back to a blank state.
    """

    def __init__(self, storage: LocalStorage, key: str = "torchtimeData") -> None:
        self.storage = storage
        self.key = key

    def load(self) -> AppState:
        """Load the persisted state, or a blank default.

        Returns:
            The stored AppState, or a new empty AppState if nothing is
            stored or the document cannot be parsed.
        """
        raw = self.storage.get_item(self.key)
        if not raw:
            return AppState()
        try:
            return AppState.model_validate_json(raw)
        except PydanticValidationError as exc:
            logger.error("Failed to parse state", key=self.key, error=str(exc))
            return AppState()

    def save(self, state: AppState) -> None:
        """Persist the full state document.

        Raises:
            StorageError: If the document cannot be written.
        """
        try:
            self.storage.set_item(self.key, state.model_dump_json())
        except sqlite3.Error as exc:
            raise StorageError(
                f"Failed to save state: {exc}",
                details={"key": self.key},
            ) from exc
        logger.debug(
            "State saved",
            key=self.key,
            users=len(state.users),
            campaigns=len(state.campaigns),
        )

    def reset(self) -> None:
        """Delete the stored document."""
        if self.storage.remove_item(self.key):
            logger.info("State reset", key=self.key)


# =============================================================================
# Singleton Instance
# =============================================================================


_store_instance: StateStore | None = None


def get_state_store() -> StateStore:
    """Get the global state store built from settings.

    Returns:
        StateStore singleton instance.
    """
    global _store_instance

    if _store_instance is None:
        from torchtime.core.config import get_settings

        settings = get_settings()
        _store_instance = StateStore(
            LocalStorage(settings.storage.database_path),
            key=settings.storage.storage_key,
        )

    return _store_instance


def reset_state_store() -> None:
    """Drop the global state store so the next call rebuilds it."""
    global _store_instance
    _store_instance = None


__all__ = [
    "LocalStorage",
    "StateStore",
    "get_state_store",
    "reset_state_store",
]
