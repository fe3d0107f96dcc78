import os
from decimal import Decimal

import pytest

from wages_api import create_app
from wages_api.extensions import db
from wages_api.models.employee import Employee
from wages_api.models.security import UserRole
from wages_api.models.user import User
from wages_api.services.access_policy import Principal

PASSWORD = "secret-pass"


def _mk_app():
    os.environ["DATABASE_URL"] = "sqlite:///:memory:"
    app = create_app({"TESTING": True, "JWT_SECRET_KEY": "test-secret-key-with-enough-length"})
    return app


def _mk_user(email, roles=(), full_name=None, status="active"):
    u = User(email=email, full_name=full_name or email.split("@")[0], status=status)
    u.set_password(PASSWORD)
    db.session.add(u)
    db.session.commit()
    for r in roles:
        db.session.add(UserRole(user_id=u.id, role=r))
    db.session.commit()
    return u


def _mk_employee(name, daily="500", half="250", ot="50", user=None, status="active"):
    e = Employee(
        full_name=name,
        daily_wage=Decimal(daily),
        half_day_rate=Decimal(half),
        overtime_rate=Decimal(ot),
        status=status,
        user_id=user.id if user else None,
    )
    db.session.add(e)
    db.session.commit()
    return e


def principal_of(user):
    return Principal(user_id=user.id, roles=frozenset(user.role_codes()))


@pytest.fixture
def app():
    app = _mk_app()
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def people(app):
    """
    admin        - admin role, no employee row
    worker       - employee role, linked to employee ``ravi``
    stranger     - employee role, no linked employee
    ravi, sita   - employees; only ravi has a login
    """
    admin = _mk_user("admin@example.com", roles=("admin",))
    worker = _mk_user("worker@example.com", roles=("employee",))
    stranger = _mk_user("stranger@example.com", roles=("employee",))
    ravi = _mk_employee("Ravi", user=worker)
    sita = _mk_employee("Sita", daily="600", half="300", ot="60")
    return {
        "admin": admin,
        "worker": worker,
        "stranger": stranger,
        "ravi": ravi,
        "sita": sita,
        "as_admin": principal_of(admin),
        "as_worker": principal_of(worker),
        "as_stranger": principal_of(stranger),
    }


@pytest.fixture
def login(client):
    """login(email) -> Authorization header for a real access token."""
    def _login(email):
        r = client.post("/api/v1/auth/login", json={"email": email, "password": PASSWORD})
        assert r.status_code == 200, r.get_json()
        token = r.get_json()["data"]["access"]
        return {"Authorization": f"Bearer {token}"}
    return _login
