from __future__ import annotations

from typing import Optional

from flask import Blueprint, request

from wages_api.common.auth import principal_required
from wages_api.common.errors import NotFound, ValidationError
from wages_api.common.http import jsonable, ok
from wages_api.common.paging import paginate
from wages_api.common.parsing import opt_date, opt_int, opt_str
from wages_api.models.wage import Wage
from wages_api.services.access_policy import Entity, get_visible
from wages_api.services import wage_engine

bp = Blueprint("wages", __name__, url_prefix="/api/v1/wages")

# ---------- helpers ----------
def _bool_arg(val) -> Optional[bool]:
    if val is None or val == "":
        return None
    s = str(val).strip().lower()
    if s in ("1", "true", "yes"):
        return True
    if s in ("0", "false", "no"):
        return False
    raise ValidationError("paid must be true or false")

ROW_FIELDS = (
    "id", "employee_id", "period_start", "period_end", "calculation_type",
    "base_wage", "overtime_amount", "advance_deductions", "total_wage",
    "paid", "paid_at", "created_at",
)

def _row(w: Wage):
    out = {f: jsonable(getattr(w, f)) for f in ROW_FIELDS}
    out["paid"] = bool(w.paid)
    out["employee_name"] = w.employee.full_name if w.employee else None
    return out

# ---------- routes ----------
@bp.get("")
@principal_required
def list_wages(principal):
    q = wage_engine.list_wages(
        principal,
        employee_id=opt_int(request.args.get("employee_id"), "employee_id"),
        paid=_bool_arg(request.args.get("paid")),
    )
    rows, meta = paginate(q)
    return ok([_row(w) for w in rows], **meta)

@bp.get("/<int:wage_id>")
@principal_required
def get_wage(principal, wage_id: int):
    w = get_visible(principal, Entity.WAGE, wage_id)
    if w is None:
        raise NotFound("Wage record not found")
    return ok(_row(w))

@bp.post("/calculate")
@principal_required
def calculate_wage(principal):
    """
    Body: {employee_id, period_start, period_end, calculation_type?}
    Persists one unpaid wage record computed from attendance in the period.
    """
    j = request.get_json(silent=True)
    if not isinstance(j, dict):
        j = {}
    employee_id = opt_int(j.get("employee_id"), "employee_id")
    period_start = opt_date(j.get("period_start"), "period_start")
    period_end = opt_date(j.get("period_end"), "period_end")
    if employee_id is None or period_start is None or period_end is None:
        raise ValidationError("employee_id, period_start, period_end are required")

    w = wage_engine.calculate(
        principal,
        employee_id=employee_id,
        period_start=period_start,
        period_end=period_end,
        calculation_type=opt_str(j.get("calculation_type"), "calculation_type", lower=True) or "monthly",
    )
    return ok(_row(w), status=201)

@bp.post("/<int:wage_id>/mark-paid")
@principal_required
def mark_paid(principal, wage_id: int):
    w = wage_engine.mark_paid(principal, wage_id)
    return ok(_row(w))
