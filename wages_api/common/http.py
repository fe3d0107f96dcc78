# wages_api/common/http.py
from datetime import date, datetime
from decimal import Decimal

from flask import jsonify, make_response


def jsonable(v):
    """Money goes out as float, dates as ISO strings."""
    if isinstance(v, Decimal):
        return float(v)
    if isinstance(v, (datetime, date)):
        return v.isoformat()
    return v


def ok(data=None, status=200, **meta):
    payload = {"success": True, "data": data}
    if meta:
        payload["meta"] = meta
    return jsonify(payload), status


def fail(message="Bad Request", status=400, code=None, detail=None):
    err = {"message": message}
    if code:
        err["code"] = code
    if detail:
        err["detail"] = detail
    return jsonify({"success": False, "error": err}), status


def attachment(content: bytes, filename: str, mime: str):
    resp = make_response(content)
    resp.headers["Content-Type"] = mime
    resp.headers["Content-Disposition"] = f"attachment; filename={filename}"
    return resp
