from datetime import date, datetime
from decimal import Decimal

import pytest

from wages_api.common.errors import AuthorizationDenied, NotFound, ValidationError
from wages_api.extensions import db
from wages_api.models.attendance import Attendance
from wages_api.models.wage import Wage
from wages_api.services import wage_engine


def _wage(people, emp_key="ravi"):
    emp = people[emp_key]
    db.session.add(Attendance(employee_id=emp.id, date=date(2025, 3, 1), status="present"))
    db.session.commit()
    return wage_engine.calculate(people["as_admin"], emp.id, date(2025, 3, 1), date(2025, 3, 31))


def test_mark_paid_sets_flag_and_timestamp(people):
    w = _wage(people)
    stamp = datetime(2025, 4, 1, 9, 30)
    out = wage_engine.mark_paid(people["as_admin"], w.id, now=stamp)
    assert out.paid is True
    assert out.paid_at == stamp


def test_mark_paid_twice_keeps_first_timestamp(people):
    w = _wage(people)
    first = wage_engine.mark_paid(people["as_admin"], w.id, now=datetime(2025, 4, 1, 9, 0))
    again = wage_engine.mark_paid(people["as_admin"], w.id, now=datetime(2025, 5, 1, 9, 0))
    assert again.id == first.id
    assert again.paid is True
    assert again.paid_at == datetime(2025, 4, 1, 9, 0)


def test_mark_paid_leaves_amounts_alone(people):
    w = _wage(people)
    amounts = (w.base_wage, w.overtime_amount, w.advance_deductions, w.total_wage)
    out = wage_engine.mark_paid(people["as_admin"], w.id)
    assert (out.base_wage, out.overtime_amount, out.advance_deductions, out.total_wage) == amounts


def test_mark_paid_unknown_id(people):
    with pytest.raises(NotFound):
        wage_engine.mark_paid(people["as_admin"], 12345)


def test_owner_cannot_mark_own_wage_paid(people):
    w = _wage(people, "ravi")
    with pytest.raises(AuthorizationDenied):
        wage_engine.mark_paid(people["as_worker"], w.id)
    db.session.refresh(w)
    assert w.paid is False


def test_other_users_wage_looks_missing(people):
    w = _wage(people, "sita")
    with pytest.raises(NotFound):
        wage_engine.mark_paid(people["as_worker"], w.id)


def test_amounts_are_write_once(people):
    w = _wage(people)
    w.total_wage = Decimal("1.00")
    with pytest.raises(ValidationError):
        db.session.commit()
    db.session.rollback()
    assert Decimal(db.session.get(Wage, w.id).total_wage) == Decimal("500.00")


def test_paid_cannot_be_reverted(people):
    w = _wage(people)
    wage_engine.mark_paid(people["as_admin"], w.id)
    db.session.expire_all()
    w = db.session.get(Wage, w.id)
    w.paid = False
    with pytest.raises(ValidationError):
        db.session.commit()
    db.session.rollback()
    assert db.session.get(Wage, w.id).paid is True
