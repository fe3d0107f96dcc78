from datetime import datetime
from wages_api.extensions import db

ATTENDANCE_STATUSES = ("present", "absent", "half_day")

class Attendance(db.Model):
    __tablename__ = "attendance"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    date   = db.Column(db.Date, nullable=False)
    status = db.Column(db.String(16), nullable=False)   # present/absent/half_day
    overtime_hours = db.Column(db.Numeric(5, 2), nullable=False, default=0)
    advance_taken  = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),
        db.CheckConstraint("status IN ('present', 'absent', 'half_day')", name="ck_attendance_status"),
        db.CheckConstraint("overtime_hours >= 0", name="ck_attendance_overtime_hours"),
        db.CheckConstraint("advance_taken >= 0", name="ck_attendance_advance_taken"),
        db.Index("ix_attendance_date", "date"),
    )

    employee = db.relationship(
        "Employee",
        lazy="joined",
        backref=db.backref("attendance", cascade="all, delete-orphan", passive_deletes=True),
    )
