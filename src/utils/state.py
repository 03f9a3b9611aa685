from __future__ import annotations

import asyncio
import dataclasses
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Set, Tuple

import store.auth as auth
import store.gateway as gateway
from store.models import (
    Appointment,
    AppointmentStatus,
    Client,
    Product,
    Sale,
    Seller,
)
from utils.images import ImageNormalizationError, ImageSource, normalize_many
from utils.logger import get_logger
from utils.pure import resolve_name, sale_total
from utils.session import SessionStore

_logger = get_logger(__name__)

STORE_INQUIRY_PREFIX = "Interesado en: "


@dataclass
class AppState:
    """
    Centralized application state shared by screens.

    Fields:
      - user: the logged-in seller, None when logged out
      - appointments / products / sellers / clients / sales: in-memory copies
        of the store tables, loaded by load_all()
      - pending: ids with an optimistic change still waiting for the store
      - sessions: durable session record backing user
    """

    user: Optional[Seller] = None

    appointments: List[Appointment] = field(default_factory=list)
    products: List[Product] = field(default_factory=list)
    sellers: List[Seller] = field(default_factory=list)
    clients: List[Client] = field(default_factory=list)
    sales: List[Sale] = field(default_factory=list)

    pending: Set[str] = field(default_factory=set)
    sessions: SessionStore = field(default_factory=SessionStore)

    # ---------------------------
    # Session
    # ---------------------------

    async def restore(self) -> Optional[Seller]:
        """Pick up a still-valid saved session on start."""
        self.user = await auth.resume(self.sessions)
        return self.user

    async def login(self, email: str, password: str) -> Optional[Seller]:
        """May raise NetworkError; returns None for bad credentials or inactive sellers."""
        self.user = await auth.login(email, password, self.sessions)
        return self.user

    async def logout(self) -> None:
        await auth.logout(self.sessions)
        self.user = None
        self.reset()

    def reset(self) -> None:
        self.appointments, self.products, self.sellers = [], [], []
        self.clients, self.sales = [], []
        self.pending.clear()

    async def load_all(self) -> None:
        """Fetch all five collections concurrently."""
        (
            self.appointments,
            self.products,
            self.sellers,
            self.clients,
            self.sales,
        ) = await asyncio.gather(
            gateway.list_appointments(),
            gateway.list_products(),
            gateway.list_sellers(),
            gateway.list_clients(),
            gateway.list_sales(),
        )
        _logger.info(
            f"Loaded {len(self.appointments)} appointments, {len(self.products)} products, "
            f"{len(self.sellers)} sellers, {len(self.clients)} clients, {len(self.sales)} sales."
        )

    # ---------------------------
    # Optimistic mutation
    # ---------------------------

    async def _optimistic(
        self,
        attr: str,
        id: str,
        change: Callable[[List[Any]], List[Any]],
        undo: Callable[[List[Any]], List[Any]],
        remote: Callable[[], Awaitable[bool]],
    ) -> bool:
        """
        Apply `change` to the collection `attr` now, then confirm with `remote`.

        The id stays in `pending` until the store answers. If the store
        refuses, or the call is cancelled or raises, `undo` puts back only
        this item; other edits made to the collection meanwhile are kept.
        """
        setattr(self, attr, change(getattr(self, attr)))
        self.pending.add(id)
        ok = False
        try:
            ok = await remote()
        finally:
            self.pending.discard(id)
            if not ok:
                _logger.warning(f"Change to {attr} {id} not confirmed, reverting.")
                setattr(self, attr, undo(getattr(self, attr)))
        return ok

    def _delete_local(self, attr: str, id: str, remote) -> Awaitable[bool]:
        items = getattr(self, attr)
        index, removed = next(
            ((i, x) for i, x in enumerate(items) if x.id == id), (len(items), None)
        )

        def undo(current: List[Any]) -> List[Any]:
            if removed is None or any(x.id == id for x in current):
                return current
            return [*current[:index], removed, *current[index:]]

        return self._optimistic(
            attr,
            id,
            lambda current: [x for x in current if x.id != id],
            undo,
            lambda: remote(id),
        )

    # ---------------------------
    # Appointments
    # ---------------------------

    async def add_appointment(self, appt: Appointment) -> Optional[Appointment]:
        created = await gateway.create_appointment(appt)
        if created:
            self.appointments = [*self.appointments, created]
        return created

    async def change_appointment_status(
        self, id: str, status: AppointmentStatus
    ) -> bool:
        previous = next((a.status for a in self.appointments if a.id == id), None)

        def set_status(old: Optional[str], new: Optional[str]):
            # leaves the item alone once someone else changed it again
            return lambda items: [
                dataclasses.replace(a, status=new)
                if a.id == id and (old is None or a.status == old)
                else a
                for a in items
            ]

        return await self._optimistic(
            "appointments",
            id,
            set_status(None, status),
            set_status(status, previous) if previous else lambda items: items,
            lambda: gateway.set_appointment_status(id, status),
        )

    async def delete_appointment(self, id: str) -> bool:
        return await self._delete_local("appointments", id, gateway.delete_appointment)

    # ---------------------------
    # Products
    # ---------------------------

    async def add_product(
        self, draft: Product, image_sources: Sequence[ImageSource] = ()
    ) -> Tuple[Optional[Product], List[Tuple[ImageSource, ImageNormalizationError]]]:
        """
        Normalize the attached images, append them to the draft's own and
        create the product. Returns (product or None, image failures).
        """
        images, failures = await normalize_many(image_sources)
        draft = dataclasses.replace(draft, images=(*draft.images, *images))
        created = await gateway.create_product(draft)
        if created:
            self.products = [*self.products, created]
        return created, failures

    async def delete_product(self, id: str) -> bool:
        return await self._delete_local("products", id, gateway.delete_product)

    # ---------------------------
    # Sellers
    # ---------------------------

    async def add_seller(self, seller: Seller) -> Optional[Seller]:
        created = await gateway.create_seller(seller)
        if created:
            self.sellers = [*self.sellers, created]
        return created

    async def delete_seller(self, id: str) -> bool:
        return await self._delete_local("sellers", id, gateway.delete_seller)

    async def update_profile(self, **changes: Any) -> Optional[Seller]:
        """
        Patch the logged-in seller. An empty password means "keep the current one".
        The saved session is refreshed with the new profile.
        """
        if self.user is None or self.user.id is None:
            return None
        if not changes.get("password"):
            changes.pop("password", None)
        updated = await gateway.update_seller(self.user.id, **changes)
        if updated:
            self.user = updated
            self.sellers = [updated if s.id == updated.id else s for s in self.sellers]
            await self.sessions.save(updated)
        return updated

    # ---------------------------
    # Clients
    # ---------------------------

    async def add_client(self, client: Client) -> Optional[Client]:
        created = await gateway.create_client(client)
        if created:
            self.clients = [*self.clients, created]
        return created

    async def delete_client(self, id: str) -> bool:
        return await self._delete_local("clients", id, gateway.delete_client)

    async def submit_store_inquiry(
        self, name: str, email: str, phone: str, product: Product
    ) -> Optional[Client]:
        """Public storefront contact form: a client whose address notes the product of interest."""
        return await self.add_client(
            Client(
                name=name,
                email=email,
                phone=phone,
                address=f"{STORE_INQUIRY_PREFIX}{product.name}",
            )
        )

    # ---------------------------
    # Sales
    # ---------------------------

    async def add_sale(self, sale: Sale) -> Optional[Sale]:
        sale = dataclasses.replace(
            sale, total=sale_total(sale.sale_price, sale.extra_costs)
        )
        created = await gateway.create_sale(sale)
        if created:
            self.sales = [*self.sales, created]
        return created

    async def delete_sale(self, id: str) -> bool:
        return await self._delete_local("sales", id, gateway.delete_sale)

    # ---------------------------
    # Weak references
    # ---------------------------

    def seller_name(self, id: Optional[str], fallback: str = "-") -> str:
        return resolve_name(self.sellers, id, fallback)

    def client_name(self, id: Optional[str], fallback: str = "Cliente Eliminado") -> str:
        return resolve_name(self.clients, id, fallback)

    def product_name(
        self, id: Optional[str], fallback: str = "Producto Eliminado"
    ) -> str:
        return resolve_name(self.products, id, fallback)
