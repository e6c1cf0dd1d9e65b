"""
Google Sheets implementation of the tabular store.

gspread is synchronous, so every call runs in a worker thread to keep the
event loop free. The spreadsheet handle is opened lazily once per store.
Any failure (bad credentials, network, API error, odd payload) surfaces as
a single StoreAccessError; callers never see partial data.
"""

import asyncio
import time
from typing import Optional, Sequence

import gspread

from seatbook.core.config import Settings
from seatbook.core.errors import StoreAccessError
from seatbook.core.logging import get_logger
from seatbook.core.metrics import store_latency
from seatbook.stores.interfaces import Row, TabularStore

logger = get_logger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


class GoogleSheetsStore(TabularStore):

    def __init__(self, settings: Settings):
        self._settings = settings
        self._spreadsheet: Optional[gspread.Spreadsheet] = None

    def _open(self) -> gspread.Spreadsheet:
        if self._spreadsheet is None:
            if not self._settings.SPREADSHEET_ID:
                raise StoreAccessError("SPREADSHEET_ID is not configured")
            client = gspread.service_account_from_dict(
                self._settings.service_account_info(),
                scopes=SCOPES,
            )
            self._spreadsheet = client.open_by_key(self._settings.SPREADSHEET_ID)
            logger.info("sheet_opened", spreadsheet_id=self._settings.SPREADSHEET_ID)
        return self._spreadsheet

    def _read_sync(self, cell_range: str) -> list[Row]:
        response = self._open().values_get(cell_range)
        values = response.get("values", [])
        if not isinstance(values, list):
            raise StoreAccessError(f"Unexpected payload for range {cell_range}")
        return [[str(cell) for cell in row] for row in values]

    def _append_sync(self, cell_range: str, values: Sequence[object]) -> None:
        self._open().values_append(
            cell_range,
            params={"valueInputOption": "RAW", "insertDataOption": "INSERT_ROWS"},
            body={"values": [list(values)]},
        )

    async def _run(self, operation: str, cell_range: str, func, *args):
        start = time.perf_counter()
        try:
            return await asyncio.to_thread(func, cell_range, *args)
        except StoreAccessError:
            raise
        except Exception as e:
            logger.error("sheet_call_failed", operation=operation, range=cell_range, error=str(e))
            raise StoreAccessError(f"Spreadsheet {operation} failed: {e}") from e
        finally:
            store_latency.labels(operation=operation).observe(time.perf_counter() - start)

    async def read_rows(self, cell_range: str) -> list[Row]:
        return await self._run("read", cell_range, self._read_sync)

    async def append_row(self, cell_range: str, values: Sequence[object]) -> None:
        await self._run("append", cell_range, self._append_sync, values)
