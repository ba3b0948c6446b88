"""
Attendance endpoints.

- Clock-in / clock-out are restricted to the employee role.
- Reads are open to any authenticated user; owners see every record,
  everyone else only their own.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from storefront.api.v1.deps import (get_attendance_service, get_current_identity,
                                    get_current_user, require_roles)
from storefront.schemas.attendance import (AttendanceListResponse, AttendanceResponse,
                                           AttendanceTodayResponse)
from storefront.services.attendance import AttendanceService
from storefront.services.identity import Identity

router = APIRouter(prefix="/attendance", tags=["attendance"])

_can_clock_in = require_roles("employee", message="Only employees can clock in")
_can_clock_out = require_roles("employee", message="Only employees can clock out")


@router.post("/clock-in", response_model=AttendanceResponse)
async def clock_in(
    user: dict = Depends(_can_clock_in),
    attendance: AttendanceService = Depends(get_attendance_service),
) -> AttendanceResponse:
    return AttendanceResponse(attendance=await attendance.clock_in(user["id"]))


@router.post("/clock-out", response_model=AttendanceResponse)
async def clock_out(
    user: dict = Depends(_can_clock_out),
    attendance: AttendanceService = Depends(get_attendance_service),
) -> AttendanceResponse:
    return AttendanceResponse(attendance=await attendance.clock_out(user["id"]))


@router.get("", response_model=AttendanceListResponse)
async def list_attendance(
    identity: Identity = Depends(get_current_identity),
    user: dict | None = Depends(get_current_user),
    attendance: AttendanceService = Depends(get_attendance_service),
) -> AttendanceListResponse:
    role = user.get("role") if user else None
    return AttendanceListResponse(attendance=await attendance.list_for(identity.id, role))


@router.get("/today", response_model=AttendanceTodayResponse)
async def attendance_today(
    identity: Identity = Depends(get_current_identity),
    attendance: AttendanceService = Depends(get_attendance_service),
) -> AttendanceTodayResponse:
    """Today's record for the caller plus its derived state."""
    state, record = await attendance.today(identity.id)
    return AttendanceTodayResponse(state=state, attendance=record)
