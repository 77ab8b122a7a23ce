import math
import re
from decimal import Decimal, InvalidOperation

from app.errors import ValidationError
from app.utils.dates import InvalidDateError, parse_iso_date

# -----------------------------
# Phone
# -----------------------------

PHONE_DIGITS_RE = re.compile(r"\D+")

def normalize_phone(value: str | None) -> str | None:
    """
    Strip all non-digits. Return digits-only string or None.
    """
    if not value:
        return None
    digits = PHONE_DIGITS_RE.sub("", value)
    return digits or None


def is_valid_phone(value: str | None) -> bool:
    """
    Phones are free text, but must contain at least one digit.
    """
    return bool(normalize_phone(value))


# -----------------------------
# MAC address
# -----------------------------

MAC_RE = re.compile(r"^[0-9A-Fa-f]{2}([:-])(?:[0-9A-Fa-f]{2}\1){4}[0-9A-Fa-f]{2}$")

def is_valid_mac(value: str | None) -> bool:
    """
    Valid:
    - empty
    - AA:BB:CC:DD:EE:FF
    - aa-bb-cc-dd-ee-ff
    """
    if not value:
        return True
    return bool(MAC_RE.match(value.strip()))


# -----------------------------
# Error helpers
# -----------------------------

def validate_fields(field_map: dict[str, tuple[str | None, callable]]):
    """
    field_map = {
        "Phone": (phone_value, is_valid_phone),
        "MAC address": (mac_value, is_valid_mac),
    }

    Returns: list[str] of error messages
    """
    errors = []
    for label, (value, validator) in field_map.items():
        try:
            if not validator(value):
                errors.append(f"{label} is invalid")
        except (TypeError, ValueError):
            errors.append(f"{label} is invalid")
    return errors


# -----------------------------
# Client payloads
# -----------------------------

# wire name -> (internal name, accepted aliases)
CLIENT_FIELDS = {
    "name": ("name", ("name",)),
    "phone": ("phone", ("phone",)),
    "startDate": ("start_date", ("startDate", "start_date")),
    "renewalDate": ("renewal_date", ("renewalDate", "renewal_date")),
    "price": ("price", ("price",)),
    "devices": ("devices", ("devices",)),
    "notes": ("notes", ("notes",)),
    "server": ("server", ("server",)),
    "macAddress": ("mac_address", ("macAddress", "mac_address")),
    "devicePassword": ("device_password", ("devicePassword", "device_password")),
}

REQUIRED_CLIENT_FIELDS = ("name", "phone", "startDate", "renewalDate", "price")
OPTIONAL_TEXT_FIELDS = ("notes", "server", "macAddress", "devicePassword")

# Column sizes in app.models.Client (price is Numeric(10, 2)).
# macAddress is bounded by MAC_RE.
MAX_TEXT_LENGTHS = {
    "name": 255,
    "phone": 50,
    "server": 255,
    "devicePassword": 255,
}
MAX_ID_LENGTH = 36
PRICE_DECIMAL_PLACES = 2
MAX_PRICE = Decimal("100000000")

_MISSING = object()


def _lookup(payload: dict, aliases) -> object:
    for key in aliases:
        if key in payload:
            return payload[key]
    return _MISSING


def _clean_text(value) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeError("expected text")
    return value.strip() or None


def parse_price(value) -> float:
    """Non-negative, finite monetary amount. Raises ValueError otherwise."""
    if isinstance(value, bool) or value is None:
        raise ValueError("price must be a number")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError("price must be a number") from e
    if not amount.is_finite():
        raise ValueError("price must be finite")
    if amount.normalize().as_tuple().exponent < -PRICE_DECIMAL_PLACES:
        raise ValueError(f"price must have at most {PRICE_DECIMAL_PLACES} decimal places")
    if amount >= MAX_PRICE:
        raise ValueError(f"price must be less than {MAX_PRICE:,}")
    price = float(amount)
    if not math.isfinite(price) or price < 0:
        raise ValueError("price must be zero or more")
    return price


def parse_devices(value) -> int:
    if isinstance(value, bool):
        raise ValueError("devices must be a whole number")
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int):
        raise ValueError("devices must be a whole number")
    if value < 1:
        raise ValueError("devices must be at least 1")
    return value


def validate_client_payload(payload, *, partial: bool = False) -> dict:
    """Validate a client payload and return it normalized (snake_case keys).

    With ``partial=True`` only the fields present are checked and returned
    (edits). Every problem is collected and raised in one ValidationError.
    """
    if not isinstance(payload, dict):
        raise ValidationError(["Client payload must be an object"])

    errors: list[str] = []
    out: dict = {}

    client_id = payload.get("id")
    if client_id is not None:
        out["id"] = str(client_id).strip()
        if len(out["id"]) > MAX_ID_LENGTH:
            errors.append(f"id must be at most {MAX_ID_LENGTH} characters")

    for wire_name, (attr, aliases) in CLIENT_FIELDS.items():
        raw = _lookup(payload, aliases)
        if raw is _MISSING:
            if not partial and wire_name in REQUIRED_CLIENT_FIELDS:
                errors.append(f"{wire_name} is required")
            continue

        if wire_name in ("name", "phone"):
            try:
                text = _clean_text(raw)
            except TypeError:
                errors.append(f"{wire_name} must be text")
                continue
            if not text:
                errors.append(f"{wire_name} is required")
                continue
            out[attr] = text

        elif wire_name in ("startDate", "renewalDate"):
            try:
                out[attr] = parse_iso_date(raw)
            except InvalidDateError as e:
                errors.append(f"{wire_name}: {e}")

        elif wire_name == "price":
            try:
                out[attr] = parse_price(raw)
            except ValueError as e:
                errors.append(str(e))

        elif wire_name == "devices":
            if raw is None and not partial:
                out[attr] = 1
                continue
            try:
                out[attr] = parse_devices(raw)
            except ValueError as e:
                errors.append(str(e))

        else:
            try:
                out[attr] = _clean_text(raw)
            except TypeError:
                errors.append(f"{wire_name} must be text")

    for wire_name, limit in MAX_TEXT_LENGTHS.items():
        value = out.get(CLIENT_FIELDS[wire_name][0])
        if value and len(value) > limit:
            errors.append(f"{wire_name} must be at most {limit} characters")

    if not partial:
        out.setdefault("devices", 1)

    errors.extend(
        validate_fields(
            {
                "phone": (out.get("phone"), lambda v: v is None or is_valid_phone(v)),
                "macAddress": (out.get("mac_address"), is_valid_mac),
            }
        )
    )

    if errors:
        raise ValidationError(errors)
    return out
