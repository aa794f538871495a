from __future__ import annotations
from datetime import datetime
from decimal import Decimal, InvalidOperation
from dokan.time_utils import parse_iso_datetime

from dataclasses import dataclass
from typing import Any

from sqlalchemy import Integer, Numeric, String, DateTime
from sqlalchemy.orm import DeclarativeMeta


# Maximum price: 9,999,999.99 (999,999,999 cents)
# This prevents database overflow issues and nonsensical prices
MAX_PRICE_CENTS = 999_999_999


class ValidationError(ValueError):
    """400-level input problem. Never retried, never queued."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate id, immutable sale)."""


class StaleRecordError(ConflictError):
    """Optimistic version check failed; the record changed underneath us."""


class NotFoundError(LookupError):
    """404-level lookup of a missing record."""


class StoreUnavailable(RuntimeError):
    """503-level failure: the local store cannot be opened, read or written."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for create
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def parse_decimal(name: str, value: Any, scale: int | None = None) -> Decimal:
    """
    Coerce JSON numbers / numeric strings to Decimal without float drift.

    With a scale, values carrying more fractional digits than the column
    keeps are rejected rather than truncated on write.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a number")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            # str() first so 0.1 stays 0.1 rather than its binary expansion
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValidationError(f"{name} must be a number")
    else:
        raise ValidationError(f"{name} must be a number")
    if not result.is_finite():
        raise ValidationError(f"{name} must be a finite number")
    if scale is not None and result.normalize().as_tuple().exponent < -scale:
        raise ValidationError(f"{name} allows at most {scale} decimal places")
    return result


def parse_cents(name: str, value: Any) -> int:
    """Strict integer parsing for *_cents fields."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped or "e" in stripped.lower() or "." in stripped:
            raise ValidationError(f"{name} must be a plain integer")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{name} must be an integer")
    raise ValidationError(f"{name} must be an integer")


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # *_cents columns: reject floats and scientific notation
    if isinstance(coltype, Integer):
        return parse_cents(col.key, value)

    if isinstance(coltype, Numeric):
        return parse_decimal(col.key, value, scale=coltype.scale)

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            if dt is None:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            return dt
        raise ValidationError(f"{col.key} must be a datetime")

    if isinstance(coltype, String):
        return str(value).strip()

    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if f not in payload)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, String) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def _check_cents(patch: dict, key: str) -> None:
    if key in patch and patch[key] is not None:
        value = patch[key]
        if value < 0:
            raise ValidationError(f"{key} must be >= 0")
        if value > MAX_PRICE_CENTS:
            raise ValidationError(f"{key} cannot exceed {MAX_PRICE_CENTS}")


def enforce_rules_catalog_item(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    _check_cents(patch, "price_cents")
    _check_cents(patch, "cost_cents")
    if "stock" in patch and patch["stock"] is not None and patch["stock"] < 0:
        raise ValidationError("stock must be >= 0")


def enforce_rules_expense(patch: dict) -> None:
    _check_cents(patch, "amount_cents")
    if patch.get("amount_cents") == 0:
        raise ValidationError("amount_cents must be > 0")


def format_decimal(value: Decimal | None) -> str | None:
    """Render a Decimal as a plain JSON-safe string ("3", "0.5", "100")."""
    if value is None:
        return None
    return format(Decimal(value).normalize(), "f")
