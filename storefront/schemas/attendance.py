"""Pydantic schemas for attendance records."""

from __future__ import annotations

from pydantic import BaseModel

from storefront.schemas.base import CamelModel


class AttendanceRecord(CamelModel):
    user_id: str
    date: str  # YYYY-MM-DD (UTC)
    clock_in: str
    clock_out: str | None = None
    total_hours: str | None = None  # two decimals, e.g. "2.50"


class AttendanceResponse(BaseModel):
    success: bool = True
    attendance: AttendanceRecord


class AttendanceListResponse(BaseModel):
    attendance: list[AttendanceRecord]


class AttendanceTodayResponse(BaseModel):
    state: str  # NOT_CLOCKED_IN | CLOCKED_IN | CLOCKED_OUT
    attendance: AttendanceRecord | None = None
