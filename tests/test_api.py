from sqlalchemy.exc import OperationalError

from wages_api.services import wage_engine


def test_health(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.get_json()["data"]["status"] == "ok"


def test_login_rejects_bad_password(client, people):
    r = client.post("/api/v1/auth/login", json={"email": "admin@example.com", "password": "nope"})
    assert r.status_code == 401
    assert r.get_json()["success"] is False


def test_requires_token(client, people):
    assert client.get("/api/v1/employees").status_code == 401


def test_me_reports_roles_and_link(client, people, login):
    r = client.get("/api/v1/auth/me", headers=login("worker@example.com"))
    body = r.get_json()["data"]
    assert body["is_admin"] is False
    assert body["roles"] == ["employee"]
    assert body["employee_id"] == people["ravi"].id

    r = client.get("/api/v1/auth/me", headers=login("admin@example.com"))
    assert r.get_json()["data"]["is_admin"] is True


def test_employee_crud_is_admin_only(client, people, login):
    admin = login("admin@example.com")
    worker = login("worker@example.com")
    payload = {"full_name": "Meena", "daily_wage": 450, "half_day_rate": 225, "overtime_rate": 40}

    assert client.post("/api/v1/employees", json=payload, headers=worker).status_code == 403

    r = client.post("/api/v1/employees", json=payload, headers=admin)
    assert r.status_code == 201
    emp = r.get_json()["data"]
    assert emp["status"] == "active"

    r = client.patch(f"/api/v1/employees/{emp['id']}", json={"status": "inactive"}, headers=admin)
    assert r.get_json()["data"]["status"] == "inactive"

    r = client.post("/api/v1/employees", json={"full_name": "Bad", "daily_wage": -1, "half_day_rate": 0}, headers=admin)
    assert r.status_code == 422

    assert client.delete(f"/api/v1/employees/{emp['id']}", headers=admin).status_code == 200
    assert client.get(f"/api/v1/employees/{emp['id']}", headers=admin).status_code == 404


def test_employee_visibility(client, people, login):
    r = client.get("/api/v1/employees", headers=login("worker@example.com"))
    names = [e["full_name"] for e in r.get_json()["data"]]
    assert names == ["Ravi"]

    r = client.get(f"/api/v1/employees/{people['sita'].id}", headers=login("worker@example.com"))
    assert r.status_code == 404

    r = client.get("/api/v1/employees", headers=login("stranger@example.com"))
    assert r.get_json()["data"] == []
    assert r.get_json()["meta"]["total"] == 0


def test_duplicate_attendance_returns_409(client, people, login):
    admin = login("admin@example.com")
    body = {"employee_id": people["ravi"].id, "date": "2025-03-01", "status": "present"}
    assert client.post("/api/v1/attendance", json=body, headers=admin).status_code == 201

    r = client.post("/api/v1/attendance", json={**body, "status": "absent"}, headers=admin)
    assert r.status_code == 409
    err = r.get_json()["error"]
    assert err["code"] == "CONSTRAINT_VIOLATION"
    assert err["message"] == "Attendance already marked for this employee on this date"


def test_attendance_validation_errors(client, people, login):
    admin = login("admin@example.com")
    r = client.post("/api/v1/attendance", json={"employee_id": people["ravi"].id, "date": "01/03/2025", "status": "present"}, headers=admin)
    assert r.status_code == 422
    r = client.post("/api/v1/attendance", json={"employee_id": people["ravi"].id, "date": "2025-03-01", "status": "present", "overtime_hours": -2}, headers=admin)
    assert r.status_code == 422


def test_wage_flow_end_to_end(client, people, login):
    admin = login("admin@example.com")
    ravi = people["ravi"].id
    for d, status, ot, adv in (
        ("2025-03-01", "present", 0, 0),
        ("2025-03-02", "half_day", 2, 0),
        ("2025-03-03", "absent", 0, 100),
    ):
        r = client.post("/api/v1/attendance", headers=admin, json={
            "employee_id": ravi, "date": d, "status": status, "overtime_hours": ot, "advance_taken": adv,
        })
        assert r.status_code == 201

    r = client.get("/api/v1/attendance?date=2025-03-02", headers=admin)
    rows = r.get_json()["data"]
    assert len(rows) == 1 and rows[0]["employee_name"] == "Ravi"

    r = client.post("/api/v1/wages/calculate", headers=admin, json={
        "employee_id": ravi, "period_start": "2025-03-01", "period_end": "2025-03-03", "calculation_type": "weekly",
    })
    assert r.status_code == 201
    w = r.get_json()["data"]
    assert (w["base_wage"], w["overtime_amount"], w["advance_deductions"], w["total_wage"]) == (750.0, 100.0, 100.0, 750.0)
    assert w["paid"] is False

    worker = login("worker@example.com")
    assert client.post(f"/api/v1/wages/{w['id']}/mark-paid", headers=worker).status_code == 403
    assert client.get(f"/api/v1/wages/{w['id']}", headers=worker).status_code == 200

    r = client.post(f"/api/v1/wages/{w['id']}/mark-paid", headers=admin)
    paid = r.get_json()["data"]
    assert paid["paid"] is True and paid["paid_at"]
    r = client.post(f"/api/v1/wages/{w['id']}/mark-paid", headers=admin)
    assert r.get_json()["data"]["paid_at"] == paid["paid_at"]

    r = client.get("/api/v1/reports/summary", headers=worker)
    assert r.get_json()["data"]["total_paid"] == 750.0

    r = client.get("/api/v1/wages?paid=true", headers=admin)
    assert [x["id"] for x in r.get_json()["data"]] == [w["id"]]


def test_wage_calculate_errors(client, people, login):
    admin = login("admin@example.com")
    r = client.post("/api/v1/wages/calculate", headers=admin, json={
        "employee_id": people["ravi"].id, "period_start": "2025-03-10", "period_end": "2025-03-01",
    })
    assert r.status_code == 422
    r = client.post("/api/v1/wages/calculate", headers=admin, json={
        "employee_id": 4040, "period_start": "2025-03-01", "period_end": "2025-03-02",
    })
    assert r.status_code == 404
    r = client.post("/api/v1/wages/calculate", headers=login("worker@example.com"), json={
        "employee_id": people["ravi"].id, "period_start": "2025-03-01", "period_end": "2025-03-02",
    })
    assert r.status_code == 403


def test_dashboard_and_export(client, people, login):
    admin = login("admin@example.com")
    r = client.get("/api/v1/reports/dashboard?date=2025-03-01", headers=admin)
    assert r.get_json()["data"]["active_employees"] == 2

    r = client.get("/api/v1/reports/wages/export?format=csv", headers=admin)
    assert r.status_code == 200
    assert r.headers["Content-Disposition"].startswith("attachment; filename=wages_")
    assert r.data.decode("utf-8").splitlines()[0].startswith("wage_id,employee_id")

    r = client.get("/api/v1/reports/wages/export?format=xlsx", headers=admin)
    assert r.status_code == 200
    assert r.data[:2] == b"PK"

    assert client.get("/api/v1/reports/wages/export?format=pdf", headers=admin).status_code == 422


def test_user_roles_listing(client, people, login):
    r = client.get("/api/v1/user-roles", headers=login("worker@example.com"))
    rows = r.get_json()["data"]
    assert [(x["email"], x["role"]) for x in rows] == [("worker@example.com", "employee")]

    r = client.get("/api/v1/user-roles", headers=login("admin@example.com"))
    assert len(r.get_json()["data"]) == 3


def test_wrongly_typed_json_fields_are_422(client, people, login):
    admin = login("admin@example.com")
    ravi = people["ravi"].id
    att = {"employee_id": ravi, "date": "2025-03-01", "status": "present"}
    calc = {"employee_id": ravi, "period_start": "2025-03-01", "period_end": "2025-03-31"}
    cases = [
        ("post", "/api/v1/attendance", {**att, "status": 1}),
        ("post", "/api/v1/attendance", {**att, "notes": 5}),
        ("post", "/api/v1/attendance", {**att, "date": 20250301}),
        ("post", "/api/v1/attendance", {**att, "overtime_hours": 1000}),
        ("post", "/api/v1/wages/calculate", {**calc, "calculation_type": 7}),
        ("patch", f"/api/v1/employees/{ravi}", {"email": 5}),
        ("patch", f"/api/v1/employees/{ravi}", {"status": ["active"]}),
        ("patch", f"/api/v1/employees/{ravi}", {"daily_wage": None}),
        ("patch", f"/api/v1/employees/{ravi}", {"daily_wage": 100000000}),
    ]
    for method, url, body in cases:
        r = getattr(client, method)(url, json=body, headers=admin)
        assert r.status_code == 422, (url, body, r.get_json())
        assert r.get_json()["error"]["code"] == "VALIDATION_ERROR"


def test_login_rejects_non_string_credentials(client, people):
    for body in ({"email": 5, "password": "x"}, {"email": "admin@example.com", "password": 123}, ["x"]):
        r = client.post("/api/v1/auth/login", json=body)
        assert r.status_code == 401


def test_calculate_returns_503_when_storage_is_down(client, people, login, monkeypatch):
    def _down(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("could not connect to server"))

    monkeypatch.setattr(wage_engine, "attendance_for_period", _down)
    r = client.post("/api/v1/wages/calculate", headers=login("admin@example.com"), json={
        "employee_id": people["ravi"].id, "period_start": "2025-03-01", "period_end": "2025-03-31",
    })
    assert r.status_code == 503
    assert r.get_json()["error"]["code"] == "STORAGE_UNAVAILABLE"


def test_profile_update_is_own_only(client, people, login):
    worker = login("worker@example.com")
    r = client.patch("/api/v1/auth/me", headers=worker, json={"full_name": "  Ravi Kumar ", "phone": "98450 12345"})
    assert r.status_code == 200
    body = r.get_json()["data"]
    assert (body["full_name"], body["phone"]) == ("Ravi Kumar", "98450 12345")
    assert client.get("/api/v1/auth/me", headers=worker).get_json()["data"]["phone"] == "98450 12345"

    # the admin's call edits the admin's own row, never the worker's
    r = client.patch("/api/v1/auth/me", headers=login("admin@example.com"), json={"phone": "111"})
    assert r.get_json()["data"]["email"] == "admin@example.com"
    assert client.get("/api/v1/auth/me", headers=worker).get_json()["data"]["phone"] == "98450 12345"

    assert client.patch("/api/v1/auth/me", headers=worker, json={"full_name": ""}).status_code == 422
    assert client.patch("/api/v1/auth/me", headers=worker, json={"phone": 98450}).status_code == 422
    assert client.patch("/api/v1/auth/me", headers=worker, json={"phone": "9" * 21}).status_code == 422
    assert client.patch("/api/v1/auth/me", json={"phone": "1"}).status_code == 401

    r = client.patch("/api/v1/auth/me", headers=worker, json={"phone": None})
    assert r.get_json()["data"]["phone"] is None
