from datetime import datetime
from wages_api.extensions import db
from werkzeug.security import generate_password_hash, check_password_hash

class User(db.Model):
    """A login. Payroll data hangs off ``Employee``; ``user.employee`` is the optional link."""
    __tablename__ = "users"

    id            = db.Column(db.Integer, primary_key=True)
    email         = db.Column(db.String(255), unique=True, index=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    full_name     = db.Column(db.String(255), nullable=False)
    phone         = db.Column(db.String(20))
    status        = db.Column(db.String(20), default="active")
    created_at    = db.Column(db.DateTime, default=datetime.utcnow)

    @classmethod
    def by_email(cls, email: str):
        return cls.query.filter_by(email=(email or "").strip().lower()).first()

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def set_password(self, raw: str):
        self.password_hash = generate_password_hash(raw)

    def check_password(self, raw: str) -> bool:
        return bool(self.password_hash) and check_password_hash(self.password_hash, raw)

    def role_codes(self):
        return sorted(ur.role for ur in self.user_roles)

    @property
    def employee_id(self):
        emp = getattr(self, "employee", None)
        return emp.id if emp is not None else None
