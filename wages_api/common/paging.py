# wages_api/common/paging.py
from flask import request

DEFAULT_SIZE = 20
MAX_SIZE = 100


def _arg_int(name, default, lo, hi=None):
    try:
        v = int(request.args.get(name, default))
    except (TypeError, ValueError):
        return default
    v = max(v, lo)
    return min(v, hi) if hi is not None else v


def apply_sort(q, allowed: dict, *default):
    """
    ?sort=full_name,-created_at  against {"full_name": Model.full_name, ...}.
    Unknown keys are ignored; with nothing usable the ``default`` ordering applies.
    """
    cols = []
    for part in (p.strip() for p in request.args.get("sort", "").split(",")):
        if not part:
            continue
        col = allowed.get(part.lstrip("-"))
        if col is not None:
            cols.append(col.desc() if part.startswith("-") else col.asc())
    return q.order_by(*(cols or default))


def paginate(q):
    """?page=&size= on an ordered query; returns (rows, meta)."""
    page = _arg_int("page", 1, 1)
    size = _arg_int("size", DEFAULT_SIZE, 1, MAX_SIZE)
    total = q.order_by(None).count()
    rows = q.offset((page - 1) * size).limit(size).all()
    return rows, {"page": page, "size": size, "total": total}
