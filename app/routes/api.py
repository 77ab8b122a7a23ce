from __future__ import annotations

import time

from flask import current_app, jsonify

from . import bp
from app.extensions import db
from app.system.health import basic_health_snapshot

_STARTED_AT = time.time()


@bp.route("/health", methods=["GET"])
def health():
    snapshot = basic_health_snapshot(
        db.session,
        version=current_app.config["APP_VERSION"],
        app_start_time=_STARTED_AT,
    )
    status = 200 if snapshot["status"] == "ok" else 503
    return jsonify(snapshot), status
