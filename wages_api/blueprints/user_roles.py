from flask import Blueprint

from wages_api.common.auth import principal_required
from wages_api.common.http import ok
from wages_api.models.security import UserRole
from wages_api.services.access_policy import Entity, scoped_query

bp = Blueprint("user_roles", __name__, url_prefix="/api/v1/user-roles")


@bp.get("")
@principal_required
def list_user_roles(principal):
    """Admins see every grant; everyone else sees only their own."""
    rows = scoped_query(principal, Entity.USER_ROLE).order_by(UserRole.user_id, UserRole.role).all()
    return ok([
        {
            "id": r.id,
            "user_id": r.user_id,
            "email": r.user.email if r.user else None,
            "role": r.role,
            "created_at": r.created_at.isoformat() if r.created_at else None,
        }
        for r in rows
    ])
