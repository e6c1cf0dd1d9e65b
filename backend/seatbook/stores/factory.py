"""
Store factory.
Provides the process-wide tabular store used by the API routes.
"""

from seatbook.core.config import get_settings
from seatbook.stores.interfaces import TabularStore
from seatbook.stores.sheets_store import GoogleSheetsStore


# Singleton instance
_store: TabularStore = None


def get_store() -> TabularStore:
    """
    FastAPI dependency returning the configured store.

    Tests swap it out through app.dependency_overrides.
    """
    global _store
    if _store is None:
        _store = GoogleSheetsStore(get_settings())
    return _store
