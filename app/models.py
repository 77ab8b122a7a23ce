"""
SQLAlchemy models for the subscription manager.

This file defines:
- Client: one reseller customer with its start/renewal dates and price

Rows are converted to ClientRecord values (app.records) before any dashboard
calculation, so the date/analytics code never sees a session-bound object.
"""

import uuid
from datetime import datetime, timezone

from .extensions import db
from .records import ClientRecord


def _utcnow():
    return datetime.now(timezone.utc)


def _new_client_id():
    return str(uuid.uuid4())


# ============================================================
#  CLIENT MODEL
# ============================================================

class Client(db.Model):
    __tablename__ = "client"

    id = db.Column(db.String(36), primary_key=True, default=_new_client_id)

    # Operator scope; every query in ClientStore filters on it
    owner_id = db.Column(db.String(120), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(50), nullable=False)

    # Calendar dates only (no time-of-day)
    start_date = db.Column(db.Date, nullable=False)
    renewal_date = db.Column(db.Date, nullable=False, index=True)

    price = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    devices = db.Column(db.Integer, nullable=False, default=1)

    notes = db.Column(db.Text)
    server = db.Column(db.String(255))
    mac_address = db.Column(db.String(17))
    device_password = db.Column(db.String(255))

    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    version = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}

    EDITABLE_FIELDS = (
        "name",
        "phone",
        "start_date",
        "renewal_date",
        "price",
        "devices",
        "notes",
        "server",
        "mac_address",
        "device_password",
    )

    def apply(self, data: dict) -> None:
        """Copy validated (snake_case) fields onto the row."""
        for field in self.EDITABLE_FIELDS:
            if field in data:
                setattr(self, field, data[field])

    def to_wire(self) -> dict:
        """Stored values in wire shape, not validated (see ClientStore.load)."""
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "startDate": self.start_date,
            "renewalDate": self.renewal_date,
            "price": self.price,
            "devices": self.devices,
            "notes": self.notes,
            "server": self.server,
            "macAddress": self.mac_address,
            "devicePassword": self.device_password,
        }

    def to_record(self) -> ClientRecord:
        return ClientRecord(
            id=self.id,
            name=self.name,
            phone=self.phone,
            start_date=self.start_date,
            renewal_date=self.renewal_date,
            price=float(self.price or 0),
            devices=int(self.devices or 1),
            notes=self.notes,
            server=self.server,
            mac_address=self.mac_address,
            device_password=self.device_password,
        )

    def __repr__(self):
        return f"<Client {self.name} renews {self.renewal_date}>"
