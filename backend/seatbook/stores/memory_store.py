"""
In-memory tabular store for tests and local development without a sheet.
"""

from typing import Sequence

from seatbook.core.errors import StoreAccessError
from seatbook.stores.interfaces import Row, TabularStore


def _sheet_name(cell_range: str) -> str:
    return cell_range.split("!", 1)[0]


class InMemoryStore(TabularStore):
    """
    Keeps rows per sheet name; the cell part of a range is ignored.

    Set `fail_with` to make every call raise StoreAccessError, which is how
    tests simulate an unreachable spreadsheet.
    """

    def __init__(self, sheets: dict[str, list[Sequence[object]]] | None = None):
        self._sheets: dict[str, list[Row]] = {}
        for name, rows in (sheets or {}).items():
            self._sheets[name] = [self._to_cells(row) for row in rows]
        self.fail_with: str | None = None
        self.reads = 0

    @staticmethod
    def _to_cells(values: Sequence[object]) -> Row:
        return ["" if value is None else str(value) for value in values]

    def _check(self) -> None:
        if self.fail_with:
            raise StoreAccessError(self.fail_with)

    async def read_rows(self, cell_range: str) -> list[Row]:
        self._check()
        self.reads += 1
        return [list(row) for row in self._sheets.get(_sheet_name(cell_range), [])]

    async def append_row(self, cell_range: str, values: Sequence[object]) -> None:
        self._check()
        self._sheets.setdefault(_sheet_name(cell_range), []).append(self._to_cells(values))

    def rows(self, sheet_name: str) -> list[Row]:
        return [list(row) for row in self._sheets.get(sheet_name, [])]

    def replace_rows(self, sheet_name: str, rows: list[Sequence[object]]) -> None:
        self._sheets[sheet_name] = [self._to_cells(row) for row in rows]
