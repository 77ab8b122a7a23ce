"""Shared route helpers.

This module exists to keep route modules small and avoid duplicating common
logic across the client and dashboard endpoints.

Intentionally **no Blueprint routes** should live here.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

from flask import current_app, jsonify, request

from app.errors import ManagerError, ValidationError
from app.models import Client
from app.services.client_store import ClientStore, OperatorContext
from app.services.dashboard_service import client_row
from app.utils.dates import InvalidDateError, parse_iso_date, today_local

OPERATOR_HEADER = "X-Operator-Id"
# Client.owner_id is String(120)
MAX_OPERATOR_ID_LENGTH = 120


# -----------------------------------------------------------------------------
# Request context
# -----------------------------------------------------------------------------

def operator_context() -> OperatorContext:
    owner = (request.headers.get(OPERATOR_HEADER) or "").strip()
    if len(owner) > MAX_OPERATOR_ID_LENGTH:
        raise ValidationError([f"{OPERATOR_HEADER} must be at most {MAX_OPERATOR_ID_LENGTH} characters"])
    return OperatorContext(owner_id=owner or current_app.config["DEFAULT_OPERATOR_ID"])


def get_store() -> ClientStore:
    return ClientStore(
        operator_context(),
        default_price=float(current_app.config.get("DEFAULT_CLIENT_PRICE") or 0),
    )


def request_today() -> date:
    """Today, or the ``as_of`` query arg (YYYY-MM-DD) when given."""
    raw = (request.args.get("as_of") or "").strip()
    if not raw:
        return today_local()
    return parse_iso_date(raw)


def json_body() -> Any:
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationError(["Request body must be JSON"])
    return data


def expected_version(data: Any) -> Optional[int]:
    v = data.get("version") if isinstance(data, dict) else None
    if v is None:
        return None
    if isinstance(v, bool) or not isinstance(v, int):
        raise ValidationError(["version must be an integer"])
    return v


def client_payload(row: Client, today: date) -> Dict[str, Any]:
    out = client_row(row.to_record(), today)
    out["version"] = row.version
    return out


# -----------------------------------------------------------------------------
# Errors
# -----------------------------------------------------------------------------

def json_error(message: str, status: int, details=None):
    body: Dict[str, Any] = {"error": message}
    if details:
        body["details"] = list(details)
    return jsonify(body), status


def register_error_handlers(app) -> None:
    @app.errorhandler(InvalidDateError)
    def _invalid_date(e):
        return json_error(str(e), 400)

    @app.errorhandler(ValidationError)
    def _validation(e):
        return json_error("Validation failed", 400, e.errors)

    @app.errorhandler(ManagerError)
    def _manager_error(e):
        if e.status_code >= 500:
            current_app.logger.warning("%s: %s", type(e).__name__, e)
        return json_error(str(e), e.status_code)

    @app.errorhandler(404)
    def _not_found(e):
        return json_error("Not found", 404)

    @app.errorhandler(405)
    def _method_not_allowed(e):
        return json_error("Method not allowed", 405)
