# wages_api/common/auth.py
from __future__ import annotations

from functools import wraps

from flask_jwt_extended import verify_jwt_in_request, get_jwt_identity

from wages_api.common.http import fail
from wages_api.extensions import db
from wages_api.models.security import user_role_codes
from wages_api.models.user import User
from wages_api.services.access_policy import Principal


def load_principal(user_id) -> Principal:
    """
    Build the request principal from a token identity. Roles are always read
    fresh from user_roles; roles carried in the token are for display only.
    """
    try:
        uid = int(user_id) if user_id is not None else None
    except (TypeError, ValueError):
        uid = None
    if uid is None:
        return Principal.anonymous()
    user = db.session.get(User, uid)
    if user is None or not user.is_active:
        return Principal.anonymous()
    return Principal(user_id=user.id, roles=frozenset(user_role_codes(user.id)))


def principal_required(fn):
    """
    Require a valid access token and pass the acting ``Principal`` as the first
    positional argument of the view.
    """
    @wraps(fn)
    def inner(*args, **kwargs):
        verify_jwt_in_request()
        principal = load_principal(get_jwt_identity())
        if principal.user_id is None:
            return fail("Unauthorized", status=401)
        return fn(principal, *args, **kwargs)
    return inner
