from datetime import date

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.validation import Number
from textual.widgets import Button, DataTable, Input, Label, Select

from store.models import PAYMENT_METHODS, Sale
from utils.messages import DataChangedMessage
from utils.pure import sale_total, sales_revenue
from views.base_screen import BaseScreen, selected_key
from views.modal_dialog import AlertModal, DialogModal

PAYMENT_LABELS = {
    "Cash": "Efectivo",
    "Credit Card": "Tarjeta de Crédito",
    "Debit Card": "Tarjeta de Débito",
    "Transfer": "Transferencia",
    "Other": "Otro",
}


class SalesScreen(BaseScreen):
    """
    Sales ledger. The seller of a new sale is always the logged-in user;
    product and client names are looked up and survive their deletion.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield DataTable(id="table-sales")
            yield Label("", id="label-revenue")
            with Horizontal(id="hort-sale-form"):
                with Vertical():
                    yield Label("Producto")
                    yield Select([], prompt="Producto", id="select-product")
                    yield Label("Cliente")
                    yield Select([], prompt="Cliente", id="select-client")
                    yield Label("Método de pago")
                    yield Select(
                        [(PAYMENT_LABELS[m], m) for m in PAYMENT_METHODS],
                        value="Cash",
                        allow_blank=False,
                        id="select-payment",
                    )
                with Vertical():
                    yield Label("Precio de venta ($)")
                    yield Input(
                        "0",
                        id="input-price",
                        type="number",
                        validators=[Number(minimum=0.0)],
                    )
                    yield Label("Costos extra ($)")
                    yield Input(
                        "0",
                        id="input-extra",
                        type="number",
                        validators=[Number(minimum=0.0)],
                    )
                    yield Label("Total: $0.00", id="label-total")
                with Vertical():
                    yield Label("Fecha (AAAA-MM-DD)")
                    yield Input(date.today().isoformat(), id="input-date")
                    yield Label("Notas")
                    yield Input(id="input-notes")
            with Horizontal(id="hort-sale-btns"):
                yield Button("Registrar Venta", id="btn-add", variant="primary")
                yield Button("Eliminar", id="btn-delete", variant="error")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Fecha", "Producto", "Cliente", "Vendedor", "Pago", "Total")
        self.handle_reload()

    @on(ScreenResume)
    @on(DataChangedMessage)
    def handle_reload(self) -> None:
        state = self.app.state
        table = self.query_one(DataTable)
        table.clear()
        for sale in state.sales:
            table.add_row(
                sale.date.isoformat(),
                state.product_name(sale.product_id),
                state.client_name(sale.client_id),
                state.seller_name(sale.seller_id),
                PAYMENT_LABELS.get(sale.payment_method, sale.payment_method),
                f"${sale.total:,.2f}",
                key=sale.id,
            )
        self.query_one("#label-revenue", Label).update(
            f"Ingresos totales: ${sales_revenue(state.sales):,.2f}"
        )

        self.query_one("#select-product", Select).set_options(
            [(p.name, p.id) for p in state.products]
        )
        self.query_one("#select-client", Select).set_options(
            [(c.name, c.id) for c in state.clients]
        )

    def _amount(self, selector: str) -> float:
        try:
            return float(self.query_one(selector, Input).value or 0)
        except ValueError:
            return 0.0

    def update_total(self) -> None:
        total = sale_total(self._amount("#input-price"), self._amount("#input-extra"))
        self.query_one("#label-total", Label).update(f"Total: ${total:,.2f}")

    @on(Select.Changed, "#select-product")
    def handle_product_changed(self, event: Select.Changed) -> None:
        product = next(
            (p for p in self.app.state.products if p.id == event.select.selection), None
        )
        if product is not None:
            self.query_one("#input-price", Input).value = str(product.price)
        self.update_total()

    @on(Input.Changed, "#input-price")
    @on(Input.Changed, "#input-extra")
    def handle_amount_changed(self) -> None:
        self.update_total()

    @on(Button.Pressed, "#btn-add")
    @work(group="write")
    async def handle_add(self) -> None:
        state = self.app.state
        product_id = self.query_one("#select-product", Select).selection
        client_id = self.query_one("#select-client", Select).selection
        if product_id is None or client_id is None:
            self.notify("Selecciona producto y cliente.", severity="error")
            return
        for selector in ("#input-price", "#input-extra"):
            amount_input = self.query_one(selector, Input)
            if not amount_input.is_valid:
                amount_input.focus()
                amount_input.add_class("-invalid")
                return
        try:
            day = date.fromisoformat(self.query_one("#input-date", Input).value.strip())
        except ValueError:
            self.notify("Fecha inválida.", severity="error")
            return

        notes = self.query_one("#input-notes", Input).value.strip()
        sale = Sale(
            product_id=product_id,
            client_id=client_id,
            seller_id=state.user.id,
            date=day,
            payment_method=self.query_one("#select-payment", Select).value,
            sale_price=self._amount("#input-price"),
            extra_costs=self._amount("#input-extra"),
            notes=notes or None,
        )
        created = await state.add_sale(sale)
        if created is None:
            await self.app.push_screen_wait(AlertModal("Error al registrar la venta."))
            return

        self.query_one("#input-extra", Input).value = "0"
        self.query_one("#input-notes", Input).value = ""
        self.notify(f"Venta registrada por ${created.total:,.2f}.")
        self.post_message(DataChangedMessage("sales"))

    @on(Button.Pressed, "#btn-delete")
    @work(group="write")
    async def handle_delete(self) -> None:
        id = selected_key(self.query_one(DataTable))
        if id is None:
            return
        if not await self.app.push_screen_wait(
            DialogModal(
                "¿Eliminar esta venta?",
                primary_text="Sí",
                secondary_text="No",
                tone="error",
            )
        ):
            return
        if not await self.app.state.delete_sale(id):
            self.notify("No se pudo eliminar la venta.", severity="error")
        self.post_message(DataChangedMessage("sales"))
