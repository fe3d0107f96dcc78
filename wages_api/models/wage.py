from datetime import datetime
from sqlalchemy import event, inspect, select
from wages_api.extensions import db
from wages_api.common.errors import ValidationError

CALCULATION_TYPES = ("daily", "weekly", "monthly")
MONEY_FIELDS = ("base_wage", "overtime_amount", "advance_deductions", "total_wage")

class Wage(db.Model):
    __tablename__ = "wages"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    period_start = db.Column(db.Date, nullable=False)
    period_end   = db.Column(db.Date, nullable=False)
    calculation_type = db.Column(db.String(16), nullable=False)   # label only: daily/weekly/monthly

    # write-once, snapshot of attendance at creation
    base_wage          = db.Column(db.Numeric(10, 2), nullable=False)
    overtime_amount    = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    advance_deductions = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    total_wage         = db.Column(db.Numeric(10, 2), nullable=False)

    paid    = db.Column(db.Boolean, nullable=False, default=False)
    paid_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.CheckConstraint("period_start <= period_end", name="ck_wage_period"),
        db.CheckConstraint("calculation_type IN ('daily', 'weekly', 'monthly')", name="ck_wage_calculation_type"),
        db.Index("ix_wages_paid", "paid"),
    )

    employee = db.relationship(
        "Employee",
        lazy="joined",
        backref=db.backref("wages", cascade="all, delete-orphan", passive_deletes=True),
    )


@event.listens_for(Wage, "before_update")
def _guard_wage_update(mapper, connection, target: Wage):
    """Only paid/paid_at may move after creation, and only false -> true."""
    state = inspect(target)
    changed = [f for f in MONEY_FIELDS if state.attrs[f].history.has_changes()]
    if changed:
        raise ValidationError(
            "Wage amounts are fixed once calculated; create a new wage record instead",
            payload={"fields": changed},
        )
    if state.attrs.paid.history.has_changes() and not target.paid:
        # old value may not be loaded; ask the row itself
        tbl = Wage.__table__
        was_paid = connection.execute(select(tbl.c.paid).where(tbl.c.id == target.id)).scalar()
        if was_paid:
            raise ValidationError("A paid wage cannot be marked unpaid")
