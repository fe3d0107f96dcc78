from __future__ import annotations

from datetime import date

from flask import Blueprint, request

from wages_api.common.auth import principal_required
from wages_api.common.errors import ValidationError
from wages_api.common.http import attachment, ok
from wages_api.services import reporting

bp = Blueprint("reports", __name__, url_prefix="/api/v1/reports")


@bp.get("/summary")
@principal_required
def summary(principal):
    return ok(reporting.summarize_for(principal).as_dict())


@bp.get("/dashboard")
@principal_required
def dashboard(principal):
    raw = request.args.get("date")
    if raw:
        try:
            today = date.fromisoformat(raw)
        except ValueError:
            raise ValidationError("date must be YYYY-MM-DD")
    else:
        today = date.today()
    return ok(reporting.dashboard_stats(principal, today))


@bp.get("/wages")
@principal_required
def wage_report(principal):
    rows = [reporting.report_row(w) for w in reporting.report_wages(principal)]
    return ok(rows, total=len(rows))


@bp.get("/wages/export")
@principal_required
def export_wages(principal):
    """?format=csv|xlsx (default csv)"""
    fmt = (request.args.get("format") or "csv").strip().lower()
    return attachment(*reporting.export_wages(principal, fmt))
