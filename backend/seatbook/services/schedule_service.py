"""
Schedule aggregation over the Schedules sheet.

ROW POLICY
==========

Each row is (Date, Time, TotalSeats, IsActive). A row counts only when:
  - Date and Time are both non-empty            -> is_row_complete
  - IsActive, upper-cased, is exactly "TRUE"    -> is_row_active

Counted rows add their time to schedule[date] (sheet order is kept, both for
dates and for times within a date) and add TotalSeats to the running total.
A TotalSeats cell that is not a number adds 0; the row still shows up in the
schedule. Malformed rows are a data-quality issue in the sheet, not a
runtime error, so they are skipped without complaint.

The sheet is read fresh on every call. Nothing is cached between requests.
"""

import math
import re
from dataclasses import dataclass, field
from typing import Sequence

from seatbook.core.config import get_settings
from seatbook.core.logging import get_logger
from seatbook.core.metrics import record_schedule_read
from seatbook.stores.interfaces import Row, TabularStore

logger = get_logger(__name__)

ACTIVE_TOKEN = "TRUE"

# Plain decimal or exponent form; no underscores, hex or nan/inf words
_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

ScheduleMap = dict[str, list[str]]


@dataclass
class ScheduleSummary:
    schedule: ScheduleMap = field(default_factory=dict)
    total: int = 0


def _cell(row: Sequence[object], index: int) -> str:
    if index >= len(row) or row[index] is None:
        return ""
    return str(row[index])


def is_row_complete(row: Sequence[object]) -> bool:
    return bool(_cell(row, 0)) and bool(_cell(row, 1))


def is_row_active(row: Sequence[object]) -> bool:
    return _cell(row, 3).upper() == ACTIVE_TOKEN


def parse_seat_count(raw: object) -> int:
    """Numeric value of a TotalSeats cell, 0 when it is not a plain decimal number."""
    text = "" if raw is None else str(raw).strip()
    if not _NUMBER_RE.fullmatch(text):
        return 0
    value = float(text)
    if not math.isfinite(value):
        return 0
    return int(value)


def aggregate_schedule(rows: Sequence[Sequence[object]]) -> ScheduleSummary:
    summary = ScheduleSummary()
    for row in rows:
        if not is_row_complete(row) or not is_row_active(row):
            continue
        date, time = _cell(row, 0), _cell(row, 1)
        summary.schedule.setdefault(date, []).append(time)
        summary.total += parse_seat_count(_cell(row, 2))
    return summary


async def _read_schedule_rows(store: TabularStore) -> list[Row]:
    return await store.read_rows(get_settings().schedule_range)


async def get_schedule(store: TabularStore) -> ScheduleSummary:
    """
    Read the Schedules sheet and aggregate it.
    StoreAccessError propagates untouched: the whole call fails.
    """
    try:
        rows = await _read_schedule_rows(store)
    except Exception:
        record_schedule_read(success=False)
        raise

    summary = aggregate_schedule(rows)
    record_schedule_read(success=True)
    logger.info(
        "schedule_loaded",
        rows=len(rows),
        dates=len(summary.schedule),
        sessions=sum(len(times) for times in summary.schedule.values()),
        total_seats=summary.total,
    )
    return summary


async def is_session_active(store: TabularStore, date: str, time: str) -> bool:
    """Whether (date, time) is an active session. Not counted as a schedule read."""
    summary = aggregate_schedule(await _read_schedule_rows(store))
    return time in summary.schedule.get(date, [])
