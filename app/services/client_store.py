"""Client persistence for one operator.

The dashboard treats the operator's client collection as the single source of
truth. Reads return a snapshot (a list of ClientRecord) that the pure services
work on; writes go through this class, which commits immediately.

Failure handling:
- A write that loses a version check (another request changed the row first)
  is rolled back and raised as ConcurrentUpdateError.
- Any other database error is rolled back, the session is expired so the next
  read reloads the authoritative rows, and PersistenceError is raised.

Nothing here is retried automatically.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from app.errors import (
    ClientNotFoundError,
    ConcurrentUpdateError,
    PersistenceError,
    ValidationError,
)
from app.extensions import db
from app.models import Client
from app.records import ClientRecord, LoadResult
from app.services.dashboard_service import load_client_records
from app.services.renewal_service import default_renewal_date, renew_client
from app.utils.dates import InvalidDateError, format_iso_date, today_local
from app.utils.validation import validate_client_payload

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperatorContext:
    """Who the current request acts for. Passed explicitly, never global."""

    owner_id: str


class ClientStore:
    def __init__(self, context: OperatorContext, *, default_price: float = 0.0, session=None):
        self.context = context
        self.default_price = default_price
        self.session = session if session is not None else db.session

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _query(self):
        return self.session.query(Client).filter(Client.owner_id == self.context.owner_id)

    def rows(self) -> List[Client]:
        return self._query().order_by(Client.created_at.asc(), Client.id.asc()).all()

    def snapshot(self) -> List[ClientRecord]:
        return [row.to_record() for row in self.rows()]

    def load(self) -> LoadResult:
        """Snapshot through the record loader.

        Rows that no longer validate (written by a migration or by hand) are
        reported as skipped and kept out of every aggregate.
        """
        result = load_client_records(row.to_wire() for row in self.rows())
        if result.skipped:
            logger.warning(
                "Skipped %d invalid stored clients for owner=%s",
                len(result.skipped),
                self.context.owner_id,
            )
        return result

    def get_row(self, client_id: str) -> Client:
        row = self._query().filter(Client.id == client_id).one_or_none()
        if row is None:
            raise ClientNotFoundError(client_id)
        return row

    def get(self, client_id: str) -> ClientRecord:
        return self.get_row(client_id).to_record()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _commit(self, action: str, client_id: Optional[str] = None) -> None:
        try:
            self.session.commit()
        except StaleDataError as e:
            self.session.rollback()
            logger.warning("%s lost a version check for client_id=%s", action, client_id)
            raise ConcurrentUpdateError(
                f"Client {client_id!r} was changed by another request; reload and retry."
            ) from e
        except SQLAlchemyError as e:
            self.session.rollback()
            self.session.expire_all()
            logger.exception("%s failed for owner=%s client_id=%s", action, self.context.owner_id, client_id)
            raise PersistenceError(f"Could not save changes ({action}).") from e

    def _check_version(self, row: Client, expected_version: Optional[int]) -> None:
        if expected_version is None:
            return
        if int(expected_version) != row.version:
            raise ConcurrentUpdateError(
                f"Client {row.id!r} is at version {row.version}, not {expected_version}; reload and retry."
            )

    def _with_create_defaults(self, payload: Dict[str, Any], today: date) -> Dict[str, Any]:
        data = dict(payload)
        data.pop("id", None)
        start = data.get("startDate", data.get("start_date"))
        if start is None or (isinstance(start, str) and not start.strip()):
            start = format_iso_date(today)
            data["startDate"] = start
        if data.get("renewalDate", data.get("renewal_date")) in (None, ""):
            try:
                data["renewalDate"] = format_iso_date(default_renewal_date(start))
            except InvalidDateError:
                pass  # validation reports the bad startDate
        if data.get("price") is None:
            data["price"] = self.default_price
        return data

    def create(self, payload: Dict[str, Any], today: Optional[date] = None) -> Client:
        if not isinstance(payload, dict):
            raise ValidationError(["Client payload must be an object"])
        data = validate_client_payload(self._with_create_defaults(payload, today_local(today)))

        row = Client(id=str(uuid.uuid4()), owner_id=self.context.owner_id)
        row.apply(data)
        self.session.add(row)
        self._commit("create", row.id)
        logger.info("Created client %s for owner=%s", row.id, self.context.owner_id)
        return row

    def update(self, client_id: str, payload: Dict[str, Any], expected_version: Optional[int] = None) -> Client:
        if isinstance(payload, dict):
            payload = {k: v for k, v in payload.items() if k != "id"}
        data = validate_client_payload(payload, partial=True)

        row = self.get_row(client_id)
        self._check_version(row, expected_version)
        row.apply(data)
        self._commit("update", client_id)
        return row

    def delete(self, client_id: str) -> None:
        row = self.get_row(client_id)
        self.session.delete(row)
        self._commit("delete", client_id)
        logger.info("Deleted client %s for owner=%s", client_id, self.context.owner_id)

    def renew(self, client_id: str, today: Optional[date] = None, expected_version: Optional[int] = None) -> Client:
        """Advance one renewal cycle and persist it (read-then-write under the row version)."""
        row = self.get_row(client_id)
        self._check_version(row, expected_version)

        before = row.renewal_date
        renewed = renew_client(row.to_record(), today)
        row.renewal_date = renewed.renewal_date
        self._commit("renew", client_id)

        logger.info("Renewed client %s: %s -> %s", client_id, before, renewed.renewal_date)
        return row

    # ------------------------------------------------------------------
    # Whole-collection operations (backup import)
    # ------------------------------------------------------------------

    def _validate_many(self, payloads: Iterable[Any]) -> List[Dict[str, Any]]:
        if not isinstance(payloads, list):
            raise ValidationError(["Backup must be a list of clients"])

        valid: List[Dict[str, Any]] = []
        errors: List[str] = []
        seen = set()
        for i, payload in enumerate(payloads):
            try:
                data = validate_client_payload(payload)
            except ValidationError as e:
                label = payload.get("id") if isinstance(payload, dict) else None
                errors.extend(f"row {i} ({label or 'no id'}): {msg}" for msg in e.errors)
                continue
            data["id"] = data.get("id") or str(uuid.uuid4())
            if data["id"] in seen:
                errors.append(f"row {i} ({data['id']}): duplicate id")
                continue
            seen.add(data["id"])
            valid.append(data)

        if errors:
            raise ValidationError(errors)
        return valid

    def _foreign_ids(self, ids: Iterable[str]) -> List[str]:
        ids = list(ids)
        if not ids:
            return []
        rows = (
            self.session.query(Client.id)
            .filter(Client.id.in_(ids))
            .filter(Client.owner_id != self.context.owner_id)
            .all()
        )
        return [r.id for r in rows]

    def replace_all(self, payloads: List[Any]) -> int:
        """Swap the whole collection for an imported one. All-or-nothing."""
        items = self._validate_many(payloads)
        clash = self._foreign_ids(d["id"] for d in items)
        if clash:
            raise ValidationError([f"id {cid} belongs to another operator" for cid in clash])

        for row in self.rows():
            self.session.delete(row)
        try:
            # Deletes must hit the table before rows with the same ids come back
            self.session.flush()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("replace_all failed for owner=%s", self.context.owner_id)
            raise PersistenceError("Could not save changes (replace_all).") from e

        for data in items:
            row = Client(id=data.pop("id"), owner_id=self.context.owner_id)
            row.apply(data)
            self.session.add(row)
        self._commit("replace_all")
        logger.info("Replaced collection for owner=%s with %d clients", self.context.owner_id, len(items))
        return len(items)

    def merge(self, payloads: List[Any]) -> Dict[str, int]:
        """Upsert imported clients by id; clients not in the import are kept."""
        items = self._validate_many(payloads)
        clash = self._foreign_ids(d["id"] for d in items)
        if clash:
            raise ValidationError([f"id {cid} belongs to another operator" for cid in clash])

        existing = {row.id: row for row in self.rows()}
        created = updated = 0
        for data in items:
            client_id = data.pop("id")
            row = existing.get(client_id)
            if row is None:
                row = Client(id=client_id, owner_id=self.context.owner_id)
                self.session.add(row)
                created += 1
            else:
                updated += 1
            row.apply(data)
        self._commit("merge")
        return {"created": created, "updated": updated}
