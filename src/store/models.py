# provide dataclass models for the five entity kinds kept in the remote store

from dataclasses import dataclass, field
from datetime import date, time
from typing import Literal, Optional, Tuple

AppointmentStatus = Literal["pending", "confirmed", "completed", "cancelled"]
APPOINTMENT_STATUSES: Tuple[str, ...] = ("pending", "confirmed", "completed", "cancelled")

PaymentMethod = Literal["Cash", "Credit Card", "Debit Card", "Transfer", "Other"]
PAYMENT_METHODS: Tuple[str, ...] = ("Cash", "Credit Card", "Debit Card", "Transfer", "Other")

# suggestions offered by the product form, not enforced
PRODUCT_CATEGORIES: Tuple[str, ...] = (
    "General",
    "Electrónica",
    "Hogar",
    "Ropa",
    "Accesorios",
    "Servicios",
)
DEFAULT_STOCK = 10


@dataclass(frozen=True)
class Appointment:
    client_name: str
    date: date
    time: time
    service: str
    status: AppointmentStatus = "pending"
    notes: Optional[str] = None
    seller_id: Optional[str] = None  # weak reference to Seller.id
    id: Optional[str] = None


@dataclass(frozen=True)
class Product:
    name: str
    price: float
    category: str
    description: str = ""
    images: Tuple[str, ...] = ()  # data URIs, first one is the cover
    stock: int = DEFAULT_STOCK
    id: Optional[str] = None

    @property
    def cover(self) -> Optional[str]:
        return self.images[0] if self.images else None


@dataclass(frozen=True)
class Seller:
    name: str
    email: str  # doubles as the login identifier
    phone: str
    active: bool = True
    id: Optional[str] = None
    # write-only: sent on create/update, never decoded back
    password: Optional[str] = field(default=None, repr=False, compare=False)


@dataclass(frozen=True)
class Client:
    name: str
    email: str
    phone: str
    address: Optional[str] = None
    id: Optional[str] = None


@dataclass(frozen=True)
class Sale:
    product_id: str
    client_id: str
    seller_id: str
    date: date
    payment_method: PaymentMethod
    sale_price: float
    extra_costs: float = 0.0
    total: float = 0.0  # sale_price + extra_costs, filled in before submission
    notes: Optional[str] = None
    id: Optional[str] = None
