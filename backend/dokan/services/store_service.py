# Overview: Durable store for the four record collections; generic keyed access plus a multi-collection transaction.

"""
Local durable store.

Every record the till owns lives in one SQLite database behind
Flask-SQLAlchemy. This module is the only place that turns collection
names into models and SQLAlchemy failures into store errors:

- IntegrityError   -> ValidationError for NOT NULL failures, else ConflictError
- StaleDataError   -> StaleRecordError (catalog rows carry a version_id)
- OperationalError / other DBAPIError -> StoreUnavailable

INVARIANTS:
- Single-record operations commit on their own unless they run inside
  transaction(), in which case they only flush.
- transaction() commits once, when the outermost block exits cleanly, and
  rolls back everything written inside it on any exception.
- Sales are immutable: put() on an existing sale and delete() of a sale
  raise ConflictError.
"""

from __future__ import annotations

from contextlib import contextmanager

from sqlalchemy import inspect
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db
from ..models import CatalogItem, SaleRecord, ExpenseRecord, UserCredential
from ..validation import ConflictError, NotFoundError, StaleRecordError, StoreUnavailable, ValidationError
from dokan.time_utils import epoch_millis


COLLECTIONS = {
    "catalog": CatalogItem,
    "sales": SaleRecord,
    "expenses": ExpenseRecord,
    "users": UserCredential,
}

IMMUTABLE_COLLECTIONS = {"sales"}

# Columns callers may sort on; each is indexed or a primary key
SORT_KEYS = {
    "catalog": {"id", "name", "category", "stock", "price_cents"},
    "sales": {"id", "date", "total_cents", "due_cents"},
    "expenses": {"id", "date", "amount_cents", "category"},
    "users": {"username", "created_at"},
}

_TX_DEPTH = "dokan_tx_depth"


@contextmanager
def store_errors():
    """Translate SQLAlchemy failures into the store's error taxonomy."""
    try:
        yield
    except IntegrityError as exc:
        db.session.rollback()
        detail = str(exc.orig)
        if "NOT NULL" in detail:
            # SQLite: "NOT NULL constraint failed: catalog_items.name"
            field = detail.rsplit(".", 1)[-1].strip()
            raise ValidationError(f"{field} is required") from exc
        raise ConflictError("Record conflicts with an existing record") from exc
    except StaleDataError as exc:
        db.session.rollback()
        raise StaleRecordError("Record was modified concurrently") from exc
    except DBAPIError as exc:
        db.session.rollback()
        raise StoreUnavailable(f"Local store unavailable: {exc.orig}") from exc


def in_transaction() -> bool:
    return db.session.info.get(_TX_DEPTH, 0) > 0


@contextmanager
def transaction():
    """
    Multi-collection atomic unit.

    Nested blocks join the outermost one. Nothing is visible to other
    sessions until the outermost block commits.
    """
    info = db.session.info
    depth = info.get(_TX_DEPTH, 0)
    info[_TX_DEPTH] = depth + 1
    try:
        with store_errors():
            yield
            if depth == 0:
                db.session.commit()
    except BaseException:
        if depth == 0:
            db.session.rollback()
        raise
    finally:
        info[_TX_DEPTH] = depth


def finish_write() -> None:
    with store_errors():
        if in_transaction():
            db.session.flush()
        else:
            db.session.commit()


def model_for(collection: str):
    model = COLLECTIONS.get(collection)
    if model is None:
        raise ValidationError(f"Unknown collection: {collection}")
    return model


def primary_key_of(collection: str) -> str:
    return inspect(model_for(collection)).primary_key[0].key


def find(collection: str, record_id: str):
    """Return the record or None."""
    model = model_for(collection)
    with store_errors():
        return db.session.get(model, record_id)


def get(collection: str, record_id: str):
    record = find(collection, record_id)
    if record is None:
        raise NotFoundError(f"{collection} record {record_id!r} not found")
    return record


def put(collection: str, record: dict):
    """Upsert a record from a dict of column values. Returns the model instance."""
    model = model_for(collection)
    pk = primary_key_of(collection)
    record_id = record.get(pk)
    if record_id is None or str(record_id).strip() == "":
        raise ValidationError(f"{pk} is required")

    existing = find(collection, record_id)
    if existing is not None:
        if collection in IMMUTABLE_COLLECTIONS:
            raise ConflictError(f"{collection} record {record_id!r} is immutable")
        existing.apply(record)
        instance = existing
    else:
        instance = model.from_dict(record)
        db.session.add(instance)

    finish_write()
    return instance


def delete(collection: str, record_id: str) -> None:
    if collection in IMMUTABLE_COLLECTIONS:
        raise ConflictError(f"{collection} records cannot be deleted")
    record = get(collection, record_id)
    db.session.delete(record)
    finish_write()


def list_records(collection: str, filters: dict | None = None) -> list:
    """All records of a collection, optionally filtered by column equality."""
    model = model_for(collection)
    query = db.session.query(model)
    for key, value in (filters or {}).items():
        column = getattr(model, key, None)
        if column is None or key not in model.__table__.columns:
            raise ValidationError(f"Unknown filter field for {collection}: {key}")
        query = query.filter(column == value)
    with store_errors():
        return query.all()


def list_ordered(collection: str, sort_key: str, ascending: bool = True, limit: int | None = None) -> list:
    model = model_for(collection)
    if sort_key not in SORT_KEYS[collection]:
        raise ValidationError(f"Cannot sort {collection} by {sort_key}")
    column = getattr(model, sort_key)
    pk_column = getattr(model, primary_key_of(collection))
    order = (column.asc(), pk_column.asc()) if ascending else (column.desc(), pk_column.desc())
    query = db.session.query(model).order_by(*order)
    if limit is not None:
        query = query.limit(limit)
    with store_errors():
        return query.all()


def next_time_id(collection: str) -> str:
    """
    Time-derived unique id (epoch milliseconds as a string).

    Bumps by one millisecond while the candidate is taken, so two records
    created in the same millisecond still get distinct ids.
    """
    candidate = epoch_millis()
    while find(collection, str(candidate)) is not None:
        candidate += 1
    return str(candidate)


def ping() -> None:
    """Raise StoreUnavailable if the local store cannot be read."""
    with store_errors():
        db.session.execute(db.text("SELECT 1"))
