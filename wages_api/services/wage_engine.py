# wages_api/services/wage_engine.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
import logging
from typing import Iterable, Optional

from sqlalchemy.exc import DataError, OperationalError

from wages_api.common.errors import NotFound, TransientStorageError, ValidationError
from wages_api.common.parsing import MONEY_MAX
from wages_api.extensions import db
from wages_api.models.employee import Employee
from wages_api.models.wage import CALCULATION_TYPES, Wage
from wages_api.services.access_policy import (
    Entity, Operation, Principal, authorize, get_visible, scoped_query,
)
from wages_api.services.attendance_store import attendance_for_period

log = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0")


def _dec(x) -> Decimal:
    if x is None or x == "":
        return ZERO
    return x if isinstance(x, Decimal) else Decimal(str(x))


def money(x) -> Decimal:
    return _dec(x).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PayRates:
    daily_wage: Decimal
    half_day_rate: Decimal
    overtime_rate: Decimal

    @classmethod
    def of(cls, emp: Employee) -> "PayRates":
        return cls(
            daily_wage=_dec(emp.daily_wage),
            half_day_rate=_dec(emp.half_day_rate),
            overtime_rate=_dec(emp.overtime_rate),
        )


@dataclass(frozen=True)
class WageBreakdown:
    base_wage: Decimal
    overtime_amount: Decimal
    advance_deductions: Decimal

    @property
    def total_wage(self) -> Decimal:
        # may go negative when advances exceed earnings; not clamped
        return self.base_wage + self.overtime_amount - self.advance_deductions

    def as_dict(self) -> dict:
        return {
            "base_wage": self.base_wage,
            "overtime_amount": self.overtime_amount,
            "advance_deductions": self.advance_deductions,
            "total_wage": self.total_wage,
        }


def fold_attendance(rates: PayRates, records: Iterable) -> WageBreakdown:
    """
    Reduce attendance rows into wage components.

      present  -> + daily_wage
      half_day -> + half_day_rate
      absent   -> nothing
      any      -> + overtime_hours * overtime_rate, and advance_taken is deducted

    Components are rounded to cents before the total is derived, so
    total == base + overtime - advances holds on the stored row.
    """
    base = ZERO
    overtime = ZERO
    advances = ZERO
    for rec in records:
        if rec.status == "present":
            base += rates.daily_wage
        elif rec.status == "half_day":
            base += rates.half_day_rate

        ot_hours = _dec(rec.overtime_hours)
        if ot_hours > 0:
            overtime += ot_hours * rates.overtime_rate
        adv = _dec(rec.advance_taken)
        if adv > 0:
            advances += adv

    return WageBreakdown(
        base_wage=money(base),
        overtime_amount=money(overtime),
        advance_deductions=money(advances),
    )


def calculate(
    principal: Principal,
    employee_id: int,
    period_start: date,
    period_end: date,
    calculation_type: str = "monthly",
) -> Wage:
    """
    Compute and persist a wage record for one employee over an inclusive date
    range. Attendance rows are read, never modified. Overlapping periods for
    the same employee are accepted and produce separate records.
    """
    authorize(principal, Entity.WAGE, Operation.INSERT)

    if not isinstance(period_start, date) or not isinstance(period_end, date):
        raise ValidationError("period_start and period_end must be YYYY-MM-DD")
    if period_end < period_start:
        raise ValidationError("period_end must be >= period_start")
    if calculation_type not in CALCULATION_TYPES:
        raise ValidationError(f"calculation_type must be one of: {', '.join(CALCULATION_TYPES)}")

    emp = db.session.get(Employee, employee_id)
    if emp is None:
        raise NotFound("Employee not found")
    if not emp.is_active:
        raise ValidationError("Employee is inactive")

    try:
        records = attendance_for_period(emp.id, period_start, period_end)
    except OperationalError as e:
        db.session.rollback()
        log.warning("attendance fetch failed employee=%s: %s", emp.id, e)
        raise TransientStorageError("Could not load attendance, retry later") from e

    breakdown = fold_attendance(PayRates.of(emp), records)
    for name, value in breakdown.as_dict().items():
        if abs(value) > MONEY_MAX:
            raise ValidationError(f"{name} exceeds {MONEY_MAX} for this period")

    wage = Wage(
        employee_id=emp.id,
        period_start=period_start,
        period_end=period_end,
        calculation_type=calculation_type,
        paid=False,
        paid_at=None,
        **breakdown.as_dict(),
    )
    db.session.add(wage)
    try:
        db.session.commit()
    except OperationalError as e:
        db.session.rollback()
        log.warning("wage persist failed employee=%s: %s", emp.id, e)
        raise TransientStorageError("Could not save wage, retry later") from e
    except DataError as e:
        db.session.rollback()
        raise ValidationError("Wage amounts out of range") from e
    except Exception:
        db.session.rollback()
        raise

    log.info(
        "wage calculated id=%s employee=%s period=%s..%s days=%d total=%s",
        wage.id, emp.id, period_start, period_end, len(records), breakdown.total_wage,
    )
    return wage


def mark_paid(principal: Principal, wage_id: int, now: Optional[datetime] = None) -> Wage:
    """
    Flip a wage to paid and stamp paid_at. Calling it again on a paid wage is
    a no-op that returns the record unchanged.
    """
    wage = get_visible(principal, Entity.WAGE, wage_id)
    if wage is None:
        raise NotFound("Wage record not found")
    authorize(principal, Entity.WAGE, Operation.UPDATE, wage)

    if wage.paid:
        return wage

    wage.paid = True
    wage.paid_at = now or datetime.utcnow()
    try:
        db.session.commit()
    except OperationalError as e:
        db.session.rollback()
        raise TransientStorageError("Could not update wage, retry later") from e
    except Exception:
        db.session.rollback()
        raise

    log.info("wage marked paid id=%s employee=%s total=%s", wage.id, wage.employee_id, wage.total_wage)
    return wage


def list_wages(principal: Principal, employee_id: Optional[int] = None, paid: Optional[bool] = None):
    """Scoped wage query, newest first."""
    q = scoped_query(principal, Entity.WAGE)
    if employee_id is not None:
        q = q.filter(Wage.employee_id == employee_id)
    if paid is not None:
        q = q.filter(Wage.paid.is_(paid))
    return q.order_by(Wage.created_at.desc(), Wage.id.desc())
