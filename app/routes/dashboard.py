from __future__ import annotations

from flask import jsonify, request

from . import bp
from .helpers import get_store, request_today
from app.services.analytics_service import DEFAULT_WINDOW, get_monthly_analytics, parse_window
from app.services.dashboard_service import compute_stats, compute_status_counts


@bp.route("/stats", methods=["GET"])
def stats():
    snapshot = get_store().load().clients
    return jsonify(compute_stats(snapshot, request_today()).to_dict())


@bp.route("/status-counts", methods=["GET"])
def status_counts():
    snapshot = get_store().load().clients
    return jsonify(compute_status_counts(snapshot, request_today()).to_dict())


@bp.route("/analytics", methods=["GET"])
def analytics():
    months = parse_window(request.args.get("months", DEFAULT_WINDOW))
    snapshot = get_store().load().clients
    summary = get_monthly_analytics(snapshot, months=months, today=request_today())
    return jsonify(summary.to_dict())
