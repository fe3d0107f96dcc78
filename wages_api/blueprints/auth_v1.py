
from flask import Blueprint, request
from flask_jwt_extended import (
    create_access_token, create_refresh_token,
    jwt_required, get_jwt_identity
)

from wages_api.common.auth import load_principal, principal_required
from wages_api.common.errors import NotFound, ValidationError
from wages_api.common.http import ok, fail
from wages_api.common.parsing import opt_str
from wages_api.extensions import db
from wages_api.models.user import User
from wages_api.services.access_policy import Entity, Operation, authorize, get_visible

bp = Blueprint("auth_v1", __name__, url_prefix="/api/v1/auth")

PHONE_MAX = 20

def _own_profile(principal):
    u = get_visible(principal, Entity.PROFILE, principal.user_id)
    if u is None:
        raise NotFound("Profile not found")
    return u

def _user_payload(u: User):
    roles = u.role_codes()
    return {
        "id": u.id,
        "email": u.email,
        "full_name": u.full_name,
        "phone": u.phone,
        "roles": roles,
        "is_admin": "admin" in roles,
        "employee_id": u.employee_id,
    }

@bp.post("/login")
def login():
    data = request.get_json(silent=True, force=True)
    if not isinstance(data, dict):
        data = {}
    email = data.get("email")
    password = data.get("password")
    if not isinstance(email, str) or not isinstance(password, str):
        return fail("Invalid credentials", status=401)
    email = email.strip().lower()
    u = User.by_email(email)
    if not u or not u.is_active or not u.check_password(password):
        return fail("Invalid credentials", status=401)

    roles = u.role_codes()
    add_claims = {"roles": roles, "email": u.email, "name": u.full_name}

    access  = create_access_token(identity=str(u.id), additional_claims=add_claims)
    refresh = create_refresh_token(identity=str(u.id), additional_claims={"roles": roles})
    return ok({"access": access, "refresh": refresh, "user": _user_payload(u)})

@bp.post("/refresh")
@jwt_required(refresh=True)
def refresh():
    principal = load_principal(get_jwt_identity())
    if principal.user_id is None:
        return fail("Unauthorized", status=401)
    u = db.session.get(User, principal.user_id)
    add_claims = {"roles": sorted(principal.roles), "email": u.email, "name": u.full_name}
    new_access = create_access_token(identity=str(u.id), additional_claims=add_claims)
    return ok({"access": new_access})

@bp.get("/me")
@principal_required
def me(principal):
    u = _own_profile(principal)
    return ok(_user_payload(u))

@bp.patch("/me")
@principal_required
def update_me(principal):
    """Body: {full_name?, phone?}. Only the caller's own profile is writable."""
    u = _own_profile(principal)
    authorize(principal, Entity.PROFILE, Operation.UPDATE, u)
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}

    if "full_name" in data:
        name = opt_str(data.get("full_name"), "full_name")
        if not name:
            raise ValidationError("full_name is required")
        u.full_name = name
    if "phone" in data:
        phone = opt_str(data.get("phone"), "phone")
        if phone is not None and len(phone) > PHONE_MAX:
            raise ValidationError(f"phone must be at most {PHONE_MAX} characters")
        u.phone = phone

    db.session.commit()
    return ok(_user_payload(u))
