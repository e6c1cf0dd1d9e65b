"""
Storage layer - the spreadsheet that holds schedules and registrations.
Services depend on TabularStore only, never on gspread directly.
"""

from .interfaces import Row, TabularStore
from .memory_store import InMemoryStore
from .sheets_store import GoogleSheetsStore
from .factory import get_store

__all__ = ['Row', 'TabularStore', 'InMemoryStore', 'GoogleSheetsStore', 'get_store']
