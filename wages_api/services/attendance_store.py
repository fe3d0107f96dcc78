# wages_api/services/attendance_store.py
from __future__ import annotations

from datetime import date
import logging
from typing import List, Optional

from sqlalchemy.exc import DataError, IntegrityError, OperationalError

from wages_api.common.errors import (
    ConstraintViolation, NotFound, TransientStorageError, ValidationError,
)
from wages_api.common.parsing import HOURS_MAX, amount, opt_str
from wages_api.extensions import db
from wages_api.models.attendance import ATTENDANCE_STATUSES, Attendance
from wages_api.models.employee import Employee
from wages_api.services.access_policy import (
    Entity, Operation, Principal, authorize, scoped_query,
)

log = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "Attendance already marked for this employee on this date"


def record_attendance(
    principal: Principal,
    employee_id: int,
    on_date: date,
    status: str,
    overtime_hours=0,
    advance_taken=0,
    notes: Optional[str] = None,
) -> Attendance:
    """
    Insert one attendance row. A second row for the same (employee, date) is
    rejected with ConstraintViolation; the existing row is left untouched.
    """
    authorize(principal, Entity.ATTENDANCE, Operation.INSERT)

    if not isinstance(on_date, date):
        raise ValidationError("date must be YYYY-MM-DD")
    if status not in ATTENDANCE_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(ATTENDANCE_STATUSES)}")
    note = opt_str(notes, "notes")
    ot = amount(overtime_hours, "overtime_hours", HOURS_MAX)
    adv = amount(advance_taken, "advance_taken")

    emp = db.session.get(Employee, employee_id)
    if emp is None:
        raise NotFound("Employee not found")
    if not emp.is_active:
        raise ValidationError("Employee is inactive")

    exists = Attendance.query.filter_by(employee_id=emp.id, date=on_date).first()
    if exists is not None:
        log.warning("duplicate attendance employee=%s date=%s", emp.id, on_date)
        raise ConstraintViolation(DUPLICATE_MESSAGE)

    row = Attendance(
        employee_id=emp.id,
        date=on_date,
        status=status,
        overtime_hours=ot,
        advance_taken=adv,
        notes=note,
    )
    db.session.add(row)
    try:
        db.session.commit()
    except IntegrityError:
        # lost a race against a concurrent insert for the same pair
        db.session.rollback()
        log.warning("duplicate attendance (constraint) employee=%s date=%s", emp.id, on_date)
        raise ConstraintViolation(DUPLICATE_MESSAGE)
    except DataError as e:
        db.session.rollback()
        raise ValidationError("Attendance values out of range") from e
    except OperationalError as e:
        db.session.rollback()
        raise TransientStorageError("Could not save attendance, retry later") from e
    return row


def attendance_for_period(employee_id: int, period_start: date, period_end: date) -> List[Attendance]:
    """
    Every attendance row of one employee with date in [period_start, period_end].
    Unscoped: callers authorize before reading.
    """
    return (
        Attendance.query
        .filter(
            Attendance.employee_id == employee_id,
            Attendance.date >= period_start,
            Attendance.date <= period_end,
        )
        .all()
    )


def list_attendance(
    principal: Principal,
    on_date: Optional[date] = None,
    employee_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
):
    """Scoped attendance query, newest first."""
    q = scoped_query(principal, Entity.ATTENDANCE)
    if on_date is not None:
        q = q.filter(Attendance.date == on_date)
    if employee_id is not None:
        q = q.filter(Attendance.employee_id == employee_id)
    if date_from is not None:
        q = q.filter(Attendance.date >= date_from)
    if date_to is not None:
        q = q.filter(Attendance.date <= date_to)
    return q.order_by(Attendance.date.desc(), Attendance.created_at.desc(), Attendance.id.desc())
