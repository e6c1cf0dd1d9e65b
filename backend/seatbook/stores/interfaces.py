"""
Tabular store interface.

The schedule and the registrations both live in a spreadsheet. Services
only ever read a fixed A1 range or append a row, so that is all a store
has to provide. Implementations must raise StoreAccessError on failure.
"""

from abc import ABC, abstractmethod
from typing import Sequence

Row = list[str]


class TabularStore(ABC):

    @abstractmethod
    async def read_rows(self, cell_range: str) -> list[Row]:
        """
        Return every row in `cell_range`, first to last.

        Cells come back as strings; trailing empty cells may be trimmed,
        so rows can be shorter than the range is wide. An empty range is
        an empty list, not an error.
        """

    @abstractmethod
    async def append_row(self, cell_range: str, values: Sequence[object]) -> None:
        """Append one row after the last row of `cell_range`."""
