from __future__ import annotations

from datetime import date

from flask import Blueprint, request

from wages_api.common.auth import principal_required
from wages_api.common.errors import NotFound, ValidationError
from wages_api.common.http import ok
from wages_api.common.paging import paginate
from wages_api.common.parsing import opt_date, opt_int, opt_str
from wages_api.models.attendance import Attendance
from wages_api.services.access_policy import Entity, get_visible
from wages_api.services import attendance_store

bp = Blueprint("attendance", __name__, url_prefix="/api/v1/attendance")

# ---------- helpers ----------
def _row(x: Attendance):
    return {
        "id": x.id,
        "employee_id": x.employee_id,
        "employee_name": x.employee.full_name if x.employee else None,
        "date": x.date.isoformat(),
        "status": x.status,
        "overtime_hours": float(x.overtime_hours or 0),
        "advance_taken": float(x.advance_taken or 0),
        "notes": x.notes,
        "created_at": x.created_at.isoformat() if x.created_at else None,
    }

# ---------- routes ----------
@bp.get("")
@principal_required
def list_attendance(principal):
    """
    Attendance visible to the caller. With no filters at all, today's sheet
    is returned.
    """
    on_date = opt_date(request.args.get("date"), "date")
    date_from = opt_date(request.args.get("from"), "from")
    date_to = opt_date(request.args.get("to"), "to")
    employee_id = opt_int(request.args.get("employee_id"), "employee_id")
    if on_date is None and not (date_from or date_to or employee_id):
        on_date = date.today()

    q = attendance_store.list_attendance(
        principal,
        on_date=on_date,
        employee_id=employee_id,
        date_from=date_from,
        date_to=date_to,
    )
    rows, meta = paginate(q)
    return ok([_row(x) for x in rows], **meta)

@bp.get("/<int:att_id>")
@principal_required
def get_attendance(principal, att_id: int):
    x = get_visible(principal, Entity.ATTENDANCE, att_id)
    if x is None:
        raise NotFound("Attendance record not found")
    return ok(_row(x))

@bp.post("")
@principal_required
def mark_attendance(principal):
    j = request.get_json(silent=True)
    if not isinstance(j, dict):
        j = {}
    employee_id = opt_int(j.get("employee_id"), "employee_id")
    on_date = opt_date(j.get("date"), "date")
    status = opt_str(j.get("status"), "status", lower=True)
    if employee_id is None or on_date is None or status is None:
        raise ValidationError("employee_id, date, status are required")

    row = attendance_store.record_attendance(
        principal,
        employee_id=employee_id,
        on_date=on_date,
        status=status,
        overtime_hours=j.get("overtime_hours", 0),
        advance_taken=j.get("advance_taken", 0),
        notes=opt_str(j.get("notes"), "notes"),
    )
    return ok(_row(row), status=201)
