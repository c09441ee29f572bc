"""Store collaborator and the bundled SQLite implementation."""

from oracle.lib.store.core import (
    COLLECTIONS,
    Record,
    SqliteStore,
    Store,
    from_row,
    open_store,
)

__all__ = [
    "COLLECTIONS",
    "Record",
    "SqliteStore",
    "Store",
    "from_row",
    "open_store",
]
