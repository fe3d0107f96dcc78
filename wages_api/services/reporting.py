# wages_api/services/reporting.py
from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, List

import openpyxl
from sqlalchemy import func

from wages_api.common.errors import ValidationError
from wages_api.extensions import db
from wages_api.models.attendance import Attendance
from wages_api.models.employee import Employee
from wages_api.models.wage import Wage
from wages_api.services.access_policy import Entity, Principal, row_filter, scoped_query

ZERO = Decimal("0")


@dataclass(frozen=True)
class WageSummary:
    total_paid: Decimal
    total_pending: Decimal
    unique_employees_paid: int
    average_paid_wage: Decimal

    def as_dict(self) -> dict:
        return {
            "total_paid": float(self.total_paid),
            "total_pending": float(self.total_pending),
            "unique_employees_paid": self.unique_employees_paid,
            "average_paid_wage": float(self.average_paid_wage),
        }


def summarize(wages: Iterable) -> WageSummary:
    """
    Fold wage records into payment totals. Pure and order-independent;
    the average is 0 when nothing has been paid.
    """
    total_paid = ZERO
    total_pending = ZERO
    paid_count = 0
    payees = set()
    for w in wages:
        amount = Decimal(str(w.total_wage or 0))
        if w.paid:
            total_paid += amount
            paid_count += 1
            payees.add(w.employee_id)
        else:
            total_pending += amount

    average = (total_paid / paid_count) if paid_count else ZERO
    return WageSummary(
        total_paid=total_paid,
        total_pending=total_pending,
        unique_employees_paid=len(payees),
        average_paid_wage=average,
    )


def summarize_for(principal: Principal) -> WageSummary:
    return summarize(scoped_query(principal, Entity.WAGE).all())


def dashboard_stats(principal: Principal, today: date) -> dict:
    """Headline counters for the landing page, all within the caller's scope."""
    month_start = datetime(today.year, today.month, 1)
    if today.month == 12:
        next_month = datetime(today.year + 1, 1, 1)
    else:
        next_month = datetime(today.year, today.month + 1, 1)

    active_employees = (
        scoped_query(principal, Entity.EMPLOYEE)
        .filter(Employee.status == "active")
        .count()
    )
    present_today = (
        scoped_query(principal, Entity.ATTENDANCE)
        .filter(Attendance.date == today, Attendance.status == "present")
        .count()
    )
    pending_wages = (
        scoped_query(principal, Entity.WAGE)
        .filter(Wage.paid.is_(False))
        .count()
    )
    paid_this_month = (
        db.session.query(func.coalesce(func.sum(Wage.total_wage), 0))
        .filter(row_filter(principal, Entity.WAGE))
        .filter(Wage.paid.is_(True), Wage.paid_at >= month_start, Wage.paid_at < next_month)
        .scalar()
    )
    return {
        "date": today.isoformat(),
        "active_employees": active_employees,
        "present_today": present_today,
        "pending_wages": pending_wages,
        "total_paid_this_month": float(paid_this_month or 0),
    }


# ---------- report rows / export ----------

EXPORT_HEADERS = [
    "wage_id", "employee_id", "employee_name", "period_start", "period_end",
    "calculation_type", "base_wage", "overtime_amount", "advance_deductions",
    "total_wage", "paid", "paid_at",
]


def report_wages(principal: Principal) -> List[Wage]:
    """Scoped wages, most recently paid first, unpaid last."""
    return (
        scoped_query(principal, Entity.WAGE)
        .order_by(Wage.paid_at.is_(None), Wage.paid_at.desc(), Wage.id.desc())
        .all()
    )


def report_row(w: Wage) -> dict:
    return {
        "wage_id": w.id,
        "employee_id": w.employee_id,
        "employee_name": w.employee.full_name if w.employee else None,
        "period_start": w.period_start.isoformat(),
        "period_end": w.period_end.isoformat(),
        "calculation_type": w.calculation_type,
        "base_wage": float(w.base_wage),
        "overtime_amount": float(w.overtime_amount),
        "advance_deductions": float(w.advance_deductions),
        "total_wage": float(w.total_wage),
        "paid": bool(w.paid),
        "paid_at": w.paid_at.isoformat() if w.paid_at else None,
    }


def export_wages(principal: Principal, output_format: str = "csv"):
    """
    Render the caller's wage report as a file.
    Returns (content_bytes, file_name, mime_type).
    """
    rows = [report_row(w) for w in report_wages(principal)]
    file_name_base = f"wages_{datetime.utcnow().strftime('%Y%m%d_%H%M%S')}"

    if output_format == "csv":
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=EXPORT_HEADERS)
        writer.writeheader()
        writer.writerows(rows)
        content = output.getvalue().encode("utf-8")
        ext = "csv"
        mime = "text/csv"
    elif output_format == "xlsx":
        output = io.BytesIO()
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = "Wages"
        ws.append(EXPORT_HEADERS)
        for row in rows:
            ws.append([row.get(h) for h in EXPORT_HEADERS])
        wb.save(output)
        content = output.getvalue()
        ext = "xlsx"
        mime = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    else:
        raise ValidationError(f"Format {output_format} not supported")

    return content, f"{file_name_base}.{ext}", mime
