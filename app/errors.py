"""Exception types shared by services and routes.

Calendar-date problems use :class:`app.utils.dates.InvalidDateError` (a
``ValueError``); everything else raised on purpose by the app derives from
:class:`ManagerError` so routes can map it to an HTTP status in one place.
"""

from __future__ import annotations

from typing import Iterable, List, Optional


class ManagerError(Exception):
    status_code = 500


class ValidationError(ManagerError, ValueError):
    """One or more fields failed validation. ``errors`` lists every problem."""

    status_code = 400

    def __init__(self, errors: Iterable[str], message: Optional[str] = None):
        self.errors: List[str] = list(errors)
        super().__init__(message or "; ".join(self.errors) or "Validation failed.")


class ClientNotFoundError(ManagerError):
    status_code = 404

    def __init__(self, client_id: str):
        self.client_id = client_id
        super().__init__(f"Client {client_id!r} not found.")


class ConcurrentUpdateError(ManagerError):
    """The row changed underneath us (version check failed)."""

    status_code = 409


class PersistenceError(ManagerError):
    """The database rejected a write; the session was rolled back."""

    status_code = 503


class MessageGenerationError(ManagerError):
    status_code = 502
