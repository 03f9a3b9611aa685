"""
Translation between the dataclass models and store rows.

Every entity has one explicit column table. Encoding and decoding walk the
same table in opposite directions, so a field that goes out under a column
name comes back from that column, through the inverse codec.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple, Type, TypeVar

from store import models

T = TypeVar("T")


def _same(value: Any) -> Any:
    return value


def _date_out(value: date) -> str:
    return value.isoformat()


def _date_in(value: Any) -> date:
    if isinstance(value, date):
        return value
    # timestamp columns come back as "YYYY-MM-DDTHH:MM:SS..."
    return date.fromisoformat(str(value)[:10])


def _time_out(value: time) -> str:
    return value.isoformat()


def _time_in(value: Any) -> time:
    if isinstance(value, time):
        return value
    return time.fromisoformat(str(value))


def _ref_out(value: Optional[str]) -> Optional[str]:
    # unset references go out as null, never ""
    return value or None


def _ref_in(value: Any) -> Optional[str]:
    return str(value) if value else None


def _id_in(value: Any) -> str:
    return "" if value is None else str(value)


def _text_in(value: Any) -> str:
    return value or ""


def _float_in(value: Any) -> float:
    return float(value) if value is not None else 0.0


def _int_in(value: Any) -> int:
    return int(value) if value is not None else 0


def _images_out(value: Iterable[str]) -> list:
    return list(value)


def _images_in(value: Any) -> Tuple[str, ...]:
    return tuple(value or ())


@dataclass(frozen=True)
class Column:
    attr: str
    column: str
    encode: Callable[[Any], Any] = _same
    decode: Callable[[Any], Any] = _same
    write_only: bool = False


APPOINTMENT_COLUMNS: Tuple[Column, ...] = (
    Column("client_name", "client_name"),
    Column("date", "date", _date_out, _date_in),
    Column("time", "time", _time_out, _time_in),
    Column("service", "service"),
    Column("status", "status"),
    Column("notes", "notes"),
    Column("seller_id", "seller_id", _ref_out, _ref_in),
)

PRODUCT_COLUMNS: Tuple[Column, ...] = (
    Column("name", "name"),
    Column("price", "price", float, _float_in),
    Column("category", "category"),
    Column("description", "description", _same, _text_in),
    Column("images", "images", _images_out, _images_in),
    Column("stock", "stock", int, _int_in),
)

SELLER_COLUMNS: Tuple[Column, ...] = (
    Column("name", "name"),
    Column("email", "email"),
    Column("phone", "phone"),
    Column("active", "active", bool, bool),
    Column("password", "password", write_only=True),
)

CLIENT_COLUMNS: Tuple[Column, ...] = (
    Column("name", "name"),
    Column("email", "email"),
    Column("phone", "phone"),
    Column("address", "address"),
)

SALE_COLUMNS: Tuple[Column, ...] = (
    Column("product_id", "product_id", _same, _id_in),
    Column("client_id", "client_id", _same, _id_in),
    Column("seller_id", "seller_id", _same, _id_in),
    Column("date", "date", _date_out, _date_in),
    Column("payment_method", "payment_method"),
    Column("sale_price", "sale_price", float, _float_in),
    Column("extra_costs", "extra_costs", float, _float_in),
    Column("total", "total", float, _float_in),
    Column("notes", "notes"),
)

COLUMNS: Dict[type, Tuple[Column, ...]] = {
    models.Appointment: APPOINTMENT_COLUMNS,
    models.Product: PRODUCT_COLUMNS,
    models.Seller: SELLER_COLUMNS,
    models.Client: CLIENT_COLUMNS,
    models.Sale: SALE_COLUMNS,
}

TABLES: Dict[type, str] = {
    models.Appointment: "appointments",
    models.Product: "products",
    models.Seller: "sellers",
    models.Client: "clients",
    models.Sale: "sales",
}


def encode(entity: Any) -> Dict[str, Any]:
    """
    Row for inserting `entity`. The id is left to the store; a write-only
    column is sent only when it holds a value.
    """
    row: Dict[str, Any] = {}
    for col in COLUMNS[type(entity)]:
        value = getattr(entity, col.attr)
        if col.write_only and value is None:
            continue
        row[col.column] = col.encode(value) if value is not None else None
    return row


def encode_changes(kind: type, changes: Mapping[str, Any]) -> Dict[str, Any]:
    """Partial row holding only the supplied attributes, e.g. for a patch."""
    by_attr = {col.attr: col for col in COLUMNS[kind]}
    unknown = set(changes) - set(by_attr)
    if unknown:
        raise ValueError(f"Unknown {kind.__name__} fields: {sorted(unknown)}")
    row: Dict[str, Any] = {}
    for attr, value in changes.items():
        col = by_attr[attr]
        row[col.column] = col.encode(value) if value is not None else None
    return row


def decode(kind: Type[T], row: Mapping[str, Any]) -> T:
    """Build a `kind` instance from a store row; write-only columns are ignored."""
    values: Dict[str, Any] = {}
    for col in COLUMNS[kind]:
        if col.write_only:
            continue
        values[col.attr] = col.decode(row.get(col.column))
    values["id"] = str(row["id"]) if row.get("id") is not None else None
    return kind(**values)

