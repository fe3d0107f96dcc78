from datetime import datetime
from wages_api.extensions import db

EMPLOYEE_STATUSES = ("active", "inactive")

class Employee(db.Model):
    __tablename__ = "employees"

    id = db.Column(db.Integer, primary_key=True)
    # own login (optional); unowned employees are admin-managed only
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, unique=True)

    full_name = db.Column(db.String(255), nullable=False)
    email     = db.Column(db.String(255), nullable=True)
    phone     = db.Column(db.String(20), nullable=True)

    daily_wage    = db.Column(db.Numeric(10, 2), nullable=False)
    overtime_rate = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    half_day_rate = db.Column(db.Numeric(10, 2), nullable=False)
    status = db.Column(db.String(16), default="active", nullable=False)   # active/inactive

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.CheckConstraint("status IN ('active', 'inactive')", name="ck_employee_status"),
        db.CheckConstraint("daily_wage >= 0", name="ck_employee_daily_wage"),
        db.CheckConstraint("overtime_rate >= 0", name="ck_employee_overtime_rate"),
        db.CheckConstraint("half_day_rate >= 0", name="ck_employee_half_day_rate"),
        db.Index("ix_emp_status", "status"),
    )

    user = db.relationship("User", lazy="joined", backref=db.backref("employee", uselist=False))

    @property
    def is_active(self) -> bool:
        return self.status == "active"
