"""
Attendance clock: one record per employee per UTC calendar day.

Lifecycle of ``attendance:{userId}:{date}``::

    NOT_CLOCKED_IN --clock_in--> CLOCKED_IN --clock_out--> CLOCKED_OUT

With strict transitions (the default) re-entering a state is a conflict.
Without them the legacy behaviour applies: a second clock-in overwrites
the day's record and a repeated clock-out recomputes the total from the
stored clock-in.
"""

from __future__ import annotations

import logging
from datetime import datetime

from storefront.core.clock import Clock, date_key, parse_iso, to_iso, utc_now
from storefront.core.exceptions import ConflictError, NotFoundError
from storefront.db.kv import KeyValueStore

logger = logging.getLogger(__name__)

NOT_CLOCKED_IN = "NOT_CLOCKED_IN"
CLOCKED_IN = "CLOCKED_IN"
CLOCKED_OUT = "CLOCKED_OUT"

OWNER_ROLE = "owner"


def attendance_key(user_id: str, date_str: str) -> str:
    return f"attendance:{user_id}:{date_str}"


def compute_total_hours(clock_in: datetime, clock_out: datetime) -> str:
    """Elapsed hours between two instants, two decimals (``"2.50"``)."""
    hours = (clock_out - clock_in).total_seconds() / 3600
    return f"{hours:.2f}"


def state_of(record: dict | None) -> str:
    if record is None:
        return NOT_CLOCKED_IN
    if record.get("clockOut") is None:
        return CLOCKED_IN
    return CLOCKED_OUT


class AttendanceService:
    def __init__(self, store: KeyValueStore, clock: Clock = utc_now, strict: bool = True) -> None:
        self._store = store
        self._clock = clock
        self._strict = strict

    async def today(self, user_id: str) -> tuple[str, dict | None]:
        record = await self._store.get(attendance_key(user_id, date_key(self._clock())))
        return state_of(record), record

    async def clock_in(self, user_id: str) -> dict:
        now = self._clock()
        key = attendance_key(user_id, date_key(now))

        if self._strict:
            existing = await self._store.get(key)
            if existing is not None:
                raise ConflictError("Already clocked in today")

        record = {
            "userId": user_id,
            "date": date_key(now),
            "clockIn": to_iso(now),
            "clockOut": None,
            "totalHours": None,
        }
        await self._store.set(key, record)
        logger.info("Clock-in %s at %s", user_id, record["clockIn"])
        return record

    async def clock_out(self, user_id: str) -> dict:
        now = self._clock()
        key = attendance_key(user_id, date_key(now))

        record = await self._store.get(key)
        if record is None:
            raise NotFoundError("No clock in record found for today")
        if self._strict and record.get("clockOut") is not None:
            raise ConflictError("Already clocked out today")

        record["clockOut"] = to_iso(now)
        record["totalHours"] = compute_total_hours(parse_iso(record["clockIn"]), now)
        await self._store.set(key, record)
        logger.info("Clock-out %s after %s h", user_id, record["totalHours"])
        return record

    async def list_for(self, user_id: str, role: str | None) -> list[dict]:
        """Owners see every record; everyone else only their own."""
        if role == OWNER_ROLE:
            records = await self._store.get_by_prefix("attendance:")
        else:
            records = [
                r for r in await self._store.get_by_prefix(f"attendance:{user_id}:")
                if r.get("userId") == user_id
            ]
        records.sort(key=lambda r: r.get("userId") or "")
        records.sort(key=lambda r: r.get("date") or "", reverse=True)
        return records
