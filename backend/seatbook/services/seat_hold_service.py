"""
Seat holds around the registration write.

CONCURRENCY STRATEGY: check-then-append under a hold
=====================================================

Problem:
  The spreadsheet has no transactions. Two visitors submitting seat 5 for the
  same session both read "5 is free", both append, and the seat is booked
  twice.

Solution:
  Serialise the read-check-append sequence per session.

  1. Process-local asyncio.Lock keyed by (date, time). One event loop per
     worker, so this is enough for a single worker.
  2. With Redis enabled, also SET NX a key per (date, time, seat) with a
     short TTL, so two workers can't write the same seat at once.

Circuit breaker:
  A Redis failure fails open to the process lock alone. The sheet stays the
  source of truth and the in-lock re-read still catches most duplicates.
"""

import asyncio
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as redis
from redis.exceptions import RedisError

from seatbook.core.config import get_settings
from seatbook.core.errors import SeatTakenError
from seatbook.core.logging import get_logger
from seatbook.core.metrics import seat_hold_errors
from seatbook.infrastructure.redis_client import get_redis

logger = get_logger(__name__)

_session_locks: dict[tuple[str, str], asyncio.Lock] = {}

# Delete the hold only if we still own it
_RELEASE_SCRIPT = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
end
return 0
"""


def _session_lock(date: str, time: str) -> asyncio.Lock:
    key = (date, time)
    lock = _session_locks.get(key)
    if lock is None:
        lock = _session_locks[key] = asyncio.Lock()
    return lock


def _hold_key(date: str, time: str, seat: int) -> str:
    return f"seat-hold:{date}:{time}:{seat}"


async def _acquire_remote(date: str, time: str, seat: int) -> tuple[redis.Redis, str, str] | None:
    client = await get_redis()
    if client is None:
        return None

    key = _hold_key(date, time, seat)
    token = uuid.uuid4().hex
    try:
        acquired = await client.set(key, token, nx=True, ex=get_settings().SEAT_HOLD_TTL)
    except RedisError as e:
        seat_hold_errors.inc()
        logger.warning("seat_hold_redis_error", key=key, error=str(e))
        return None

    if not acquired:
        logger.info("seat_hold_contended", date=date, time=time, seat=seat)
        raise SeatTakenError(seat)
    return client, key, token


async def _release_remote(client: redis.Redis, key: str, token: str) -> None:
    try:
        await client.eval(_RELEASE_SCRIPT, 1, key, token)
    except RedisError as e:
        # The TTL reclaims the key anyway
        seat_hold_errors.inc()
        logger.warning("seat_hold_release_failed", key=key, error=str(e))


@asynccontextmanager
async def hold_seat(date: str, time: str, seat: int) -> AsyncIterator[None]:
    """
    Hold (date, time, seat) for the duration of the block.

    Raises SeatTakenError straight away if another worker holds the seat.
    """
    async with _session_lock(date, time):
        remote = await _acquire_remote(date, time, seat)
        try:
            yield
        finally:
            if remote is not None:
                await _release_remote(*remote)
