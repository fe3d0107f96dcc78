from __future__ import annotations

from decimal import Decimal

from flask import Blueprint, request
from sqlalchemy import or_

from wages_api.common.auth import principal_required
from wages_api.common.errors import NotFound, ValidationError
from wages_api.common.http import jsonable, ok
from wages_api.common.paging import apply_sort, paginate
from wages_api.common.parsing import amount, opt_int, opt_str
from wages_api.extensions import db
from wages_api.models.employee import EMPLOYEE_STATUSES, Employee
from wages_api.models.user import User
from wages_api.services.access_policy import (
    Entity, Operation, authorize, get_visible, scoped_query,
)

bp = Blueprint("employees", __name__, url_prefix="/api/v1/employees")

RATE_FIELDS = ("daily_wage", "overtime_rate", "half_day_rate")

# ---------- helpers ----------
def _json():
    j = request.get_json(silent=True)
    return j if isinstance(j, dict) else {}

def _user_link(val):
    uid = opt_int(val, "user_id")
    if uid is not None and db.session.get(User, uid) is None:
        raise NotFound("Linked user not found")
    return uid

ROW_FIELDS = (
    "id", "user_id", "full_name", "email", "phone",
    "daily_wage", "overtime_rate", "half_day_rate", "status",
    "created_at", "updated_at",
)

def _row(x: Employee):
    return {f: jsonable(getattr(x, f)) for f in ROW_FIELDS}

def _apply(emp: Employee, j: dict, creating: bool):
    if creating or "full_name" in j:
        name = opt_str(j.get("full_name"), "full_name")
        if not name:
            raise ValidationError("full_name is required")
        emp.full_name = name
    if "email" in j:
        emp.email = opt_str(j.get("email"), "email", lower=True)
    if "phone" in j:
        emp.phone = opt_str(j.get("phone"), "phone")

    for f in RATE_FIELDS:
        if f in j:
            if j.get(f) in (None, ""):
                raise ValidationError(f"{f} must be a number")
            setattr(emp, f, amount(j.get(f), f))
        elif creating and f != "overtime_rate":
            raise ValidationError(f"{f} is required")
    if creating and emp.overtime_rate is None:
        emp.overtime_rate = Decimal("0")

    if "status" in j:
        st = opt_str(j.get("status"), "status", lower=True)
        if st not in EMPLOYEE_STATUSES:
            raise ValidationError("status must be active or inactive")
        emp.status = st
    elif creating:
        emp.status = "active"

    if "user_id" in j:
        emp.user_id = _user_link(j.get("user_id"))

# ---------- routes ----------
@bp.get("")
@principal_required
def list_employees(principal):
    q = scoped_query(principal, Entity.EMPLOYEE)

    status = (request.args.get("status") or "").strip().lower()
    if status:
        if status not in EMPLOYEE_STATUSES:
            raise ValidationError("status must be active or inactive")
        q = q.filter(Employee.status == status)

    s = (request.args.get("q") or "").strip()
    if s:
        like = f"%{s}%"
        q = q.filter(or_(Employee.full_name.ilike(like), Employee.email.ilike(like), Employee.phone.ilike(like)))

    q = apply_sort(
        q,
        {"full_name": Employee.full_name, "created_at": Employee.created_at, "daily_wage": Employee.daily_wage},
        Employee.created_at.desc(), Employee.id.desc(),
    )
    rows, meta = paginate(q)
    return ok([_row(x) for x in rows], **meta)

@bp.get("/<int:emp_id>")
@principal_required
def get_employee(principal, emp_id: int):
    x = get_visible(principal, Entity.EMPLOYEE, emp_id)
    if x is None:
        raise NotFound("Employee not found")
    return ok(_row(x))

@bp.post("")
@principal_required
def create_employee(principal):
    authorize(principal, Entity.EMPLOYEE, Operation.INSERT)
    emp = Employee()
    _apply(emp, _json(), creating=True)
    db.session.add(emp)
    db.session.commit()
    return ok(_row(emp), status=201)

@bp.patch("/<int:emp_id>")
@principal_required
def update_employee(principal, emp_id: int):
    emp = get_visible(principal, Entity.EMPLOYEE, emp_id)
    if emp is None:
        raise NotFound("Employee not found")
    authorize(principal, Entity.EMPLOYEE, Operation.UPDATE, emp)
    _apply(emp, _json(), creating=False)
    db.session.commit()
    return ok(_row(emp))

@bp.delete("/<int:emp_id>")
@principal_required
def delete_employee(principal, emp_id: int):
    emp = get_visible(principal, Entity.EMPLOYEE, emp_id)
    if emp is None:
        raise NotFound("Employee not found")
    authorize(principal, Entity.EMPLOYEE, Operation.DELETE, emp)
    db.session.delete(emp)
    db.session.commit()
    return ok({"deleted": emp_id})
