"""JSON backup export/import of the whole client collection.

Import is all-or-nothing: if any row fails validation the response lists every
problem and nothing is written.
"""

from __future__ import annotations

from flask import jsonify, request

from . import bp
from .helpers import get_store, json_body, request_today
from app.errors import ValidationError

IMPORT_MODES = ("replace", "merge")


@bp.route("/backup", methods=["GET"])
def backup_export():
    snapshot = get_store().snapshot()
    response = jsonify([c.to_dict() for c in snapshot])
    filename = f"backup_clients_{request_today().isoformat()}.json"
    response.headers["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response


@bp.route("/backup", methods=["POST"])
def backup_import():
    mode = (request.args.get("mode") or "replace").strip().lower()
    if mode not in IMPORT_MODES:
        raise ValidationError([f"mode must be one of: {', '.join(IMPORT_MODES)}"])

    store = get_store()
    payloads = json_body()
    if mode == "replace":
        count = store.replace_all(payloads)
        return jsonify({"mode": mode, "imported": count})

    result = store.merge(payloads)
    return jsonify({"mode": mode, **result})
