# src/store/gateway.py
from __future__ import annotations

from typing import Any, List, Optional, Type, TypeVar

import httpx
from postgrest.exceptions import APIError

from store import mapping, models
from store.client import connect
from store.errors import StoreError
from utils.logger import get_logger

_logger = get_logger(__name__)

T = TypeVar("T")

# anything the store or the transport can throw at a single call
STORE_FAILURES = (APIError, httpx.HTTPError, StoreError)


# ---------------------------
# Generic row operations
# ---------------------------


async def _list(kind: Type[T]) -> List[T]:
    """All rows of `kind` in store order; [] on failure."""
    table = mapping.TABLES[kind]
    try:
        async with connect() as client:
            res = await client.table(table).select("*").execute()
        return [mapping.decode(kind, row) for row in res.data or []]
    except STORE_FAILURES as e:
        _logger.error(f"Error fetching {table}: {e}")
    except (KeyError, TypeError, ValueError) as e:
        _logger.error(f"Malformed row in {table}: {e}")
    return []


async def _insert(entity: T) -> Optional[T]:
    """Insert one row and return it as stored (with its id), or None on failure."""
    kind = type(entity)
    table = mapping.TABLES[kind]
    row = mapping.encode(entity)
    try:
        async with connect() as client:
            res = await client.table(table).insert(row).execute()
    except STORE_FAILURES as e:
        _logger.error(f"Error creating row in {table}: {e}")
        return None
    if not res.data:
        _logger.error(f"Error creating row in {table}: store returned no row")
        return None
    return mapping.decode(kind, res.data[0])


async def _update(kind: Type[T], id: str, changes: dict[str, Any]) -> Optional[T]:
    table = mapping.TABLES[kind]
    patch = mapping.encode_changes(kind, changes)
    if not patch:
        return None
    try:
        async with connect() as client:
            res = await client.table(table).update(patch).eq("id", id).execute()
    except STORE_FAILURES as e:
        _logger.error(f"Error updating {table} {id}: {e}")
        return None
    if not res.data:
        _logger.error(f"Error updating {table} {id}: no matching row")
        return None
    return mapping.decode(kind, res.data[0])


async def _delete(kind: type, id: str) -> bool:
    table = mapping.TABLES[kind]
    try:
        async with connect() as client:
            await client.table(table).delete().eq("id", id).execute()
    except STORE_FAILURES as e:
        _logger.error(f"Error deleting {table} {id}: {e}")
        return False
    return True


# ---------------------------
# Appointments
# ---------------------------


async def list_appointments() -> List[models.Appointment]:
    return await _list(models.Appointment)


async def create_appointment(
    appt: models.Appointment,
) -> Optional[models.Appointment]:
    """Insert an appointment; an unset seller goes out as null."""
    return await _insert(appt)


async def set_appointment_status(id: str, status: models.AppointmentStatus) -> bool:
    """
    Patch only the status column. Any status may follow any other.
    Returns False (after logging) when the store did not accept the change.
    """
    if status not in models.APPOINTMENT_STATUSES:
        raise ValueError(f"Unknown appointment status: {status!r}")
    try:
        async with connect() as client:
            await (
                client.table("appointments")
                .update({"status": status})
                .eq("id", id)
                .execute()
            )
    except STORE_FAILURES as e:
        _logger.error(f"Error updating appointment {id}: {e}")
        return False
    return True


async def delete_appointment(id: str) -> bool:
    return await _delete(models.Appointment, id)


# ---------------------------
# Products
# ---------------------------


async def list_products() -> List[models.Product]:
    return await _list(models.Product)


async def create_product(prod: models.Product) -> Optional[models.Product]:
    """Insert a product with its already-normalized images. Products are never edited."""
    return await _insert(prod)


async def delete_product(id: str) -> bool:
    return await _delete(models.Product, id)


# ---------------------------
# Sellers
# ---------------------------


async def list_sellers() -> List[models.Seller]:
    return await _list(models.Seller)


async def create_seller(seller: models.Seller) -> Optional[models.Seller]:
    """Insert a seller; the password is sent but never comes back."""
    return await _insert(seller)


async def update_seller(id: str, **changes: Any) -> Optional[models.Seller]:
    """
    Patch only the given seller fields, e.g. update_seller(id, phone="...", password="...").
    Unknown fields raise ValueError. Returns the refreshed seller or None.
    """
    return await _update(models.Seller, id, changes)


async def delete_seller(id: str) -> bool:
    """Dependents keep their seller_id; they resolve to a fallback label."""
    return await _delete(models.Seller, id)


async def get_active_seller(id: str) -> Optional[models.Seller]:
    """Seller with this id and active = true, or None (also on failure)."""
    try:
        async with connect() as client:
            res = await (
                client.table("sellers")
                .select("*")
                .eq("id", id)
                .eq("active", True)
                .limit(1)
                .execute()
            )
    except STORE_FAILURES as e:
        _logger.error(f"Error fetching seller {id}: {e}")
        return None
    if not res.data:
        return None
    return mapping.decode(models.Seller, res.data[0])


# ---------------------------
# Clients
# ---------------------------


async def list_clients() -> List[models.Client]:
    return await _list(models.Client)


async def create_client(client: models.Client) -> Optional[models.Client]:
    return await _insert(client)


async def delete_client(id: str) -> bool:
    return await _delete(models.Client, id)


# ---------------------------
# Sales
# ---------------------------


async def list_sales() -> List[models.Sale]:
    return await _list(models.Sale)


async def create_sale(sale: models.Sale) -> Optional[models.Sale]:
    """Single-row insert; stock is not adjusted and the total is taken as given."""
    return await _insert(sale)


async def delete_sale(id: str) -> bool:
    return await _delete(models.Sale, id)
