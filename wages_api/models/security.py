# wages_api/models/security.py
from datetime import datetime
from wages_api.extensions import db

ROLE_ADMIN = "admin"
ROLE_EMPLOYEE = "employee"
ROLES = (ROLE_ADMIN, ROLE_EMPLOYEE)


class UserRole(db.Model):
    __tablename__ = "user_roles"

    id         = db.Column(db.Integer, primary_key=True)
    user_id    = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role       = db.Column(db.Enum(*ROLES, name="app_role"), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),
    )

    # relationships (do not affect schema)
    user = db.relationship(
        "User",
        backref=db.backref(
            "user_roles",
            cascade="all, delete-orphan",
            passive_deletes=True,
        ),
    )

    def __repr__(self) -> str:
        return f"<UserRole user_id={self.user_id} role={self.role!r}>"


def user_role_codes(user_id: int) -> set[str]:
    """
    Fresh read of the role codes held by a user. Used for every request's
    principal so a revoked role takes effect without waiting for token expiry.
    """
    q = db.session.query(UserRole.role).filter(UserRole.user_id == user_id)
    return {row[0] for row in q.all()}
