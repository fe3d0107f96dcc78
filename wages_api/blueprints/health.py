from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from wages_api.common.http import fail, ok
from wages_api.extensions import db

bp = Blueprint("health", __name__)


@bp.get("/api/health")
def health():
    try:
        db.session.execute(text("SELECT 1"))
    except OperationalError as e:
        db.session.rollback()
        current_app.logger.warning("health check: database unreachable: %s", e)
        return fail("Database unreachable", status=503, code="STORAGE_UNAVAILABLE")
    return ok({"status": "ok", "db": "ok"})
