"""Storage module for TorchTime persistence.

Provides SQLite-based local storage holding the application state as a
single JSON document.
"""

from torchtime.storage.database import (
    LocalStorage,
    StateStore,
    get_state_store,
    reset_state_store,
)

__all__ = [
    "LocalStorage",
    "StateStore",
    "get_state_store",
    "reset_state_store",
]
