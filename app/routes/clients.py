"""Client CRUD + renewal endpoints.

Every write returns the stored client (with its new ``version``) so the caller
can replace its local copy. A 409 means the client changed since it was read;
a 503 means the write was rolled back. In both cases the caller should reload
the collection instead of keeping its optimistic edit.
"""

from __future__ import annotations

from flask import current_app, jsonify, request

from . import bp
from .helpers import client_payload, expected_version, get_store, json_body, request_today
from app.services import message_service
from app.services.dashboard_service import build_dashboard_context


@bp.route("/clients", methods=["GET"])
def clients_list():
    today = request_today()
    loaded = get_store().load()
    ctx = build_dashboard_context(
        loaded.clients,
        query=request.args.get("q", ""),
        status_filter=request.args.get("status", "all"),
        today=today,
        skipped=loaded.skipped,
    )
    return jsonify(ctx)


@bp.route("/clients", methods=["POST"])
def client_create():
    store = get_store()
    today = request_today()
    row = store.create(json_body(), today=today)
    return jsonify(client_payload(row, today)), 201


@bp.route("/clients/<string:client_id>", methods=["GET"])
def client_detail(client_id: str):
    row = get_store().get_row(client_id)
    return jsonify(client_payload(row, request_today()))


@bp.route("/clients/<string:client_id>", methods=["PUT", "PATCH"])
def client_edit(client_id: str):
    data = json_body()
    row = get_store().update(client_id, data, expected_version=expected_version(data))
    return jsonify(client_payload(row, request_today()))


@bp.route("/clients/<string:client_id>", methods=["DELETE"])
def client_delete(client_id: str):
    get_store().delete(client_id)
    return "", 204


@bp.route("/clients/<string:client_id>/renew", methods=["POST"])
def client_renew(client_id: str):
    data = request.get_json(silent=True) or {}
    today = request_today()
    row = get_store().renew(client_id, today=today, expected_version=expected_version(data))
    return jsonify(client_payload(row, today))


@bp.route("/clients/<string:client_id>/renewal-message", methods=["GET"])
def client_renewal_message(client_id: str):
    record = get_store().get(client_id)
    result = message_service.generate_renewal_message(
        record,
        settings=current_app.config,
        today=request_today(),
    )
    return jsonify(result)
