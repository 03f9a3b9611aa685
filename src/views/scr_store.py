from typing import List, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import Screen
from textual.widgets import Button, DataTable, Footer, Header, Input, Label, MarkdownViewer

import store.gateway as gateway
from store.models import Product
from utils.pure import generate_markdown_table
from views.base_screen import selected_key

THANK_YOU = (
    "¡Gracias! Hemos recibido tus datos. "
    "Un asesor se pondrá en contacto contigo pronto."
)


class StoreScreen(Screen):
    """
    Public storefront: browse the catalog and leave contact details for a
    product. No login required.
    """

    def __init__(self) -> None:
        super().__init__()
        self._products: List[Product] = []
        self._selected: Optional[Product] = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="hort-store"):
            yield DataTable(id="table-store")
            with Vertical(id="div-store-detail"):
                yield MarkdownViewer("", id="md-store-product", show_table_of_contents=False)
                yield Label("¿Te interesa? Déjanos tus datos", id="label-inquiry-title")
                yield Input(placeholder="Nombre", id="input-inquiry-name")
                yield Input(placeholder="Email", id="input-inquiry-email")
                yield Input(placeholder="Teléfono", id="input-inquiry-phone")
                yield Label("", id="label-inquiry-result")
                with Horizontal(id="div-store-btns"):
                    yield Button("Volver", id="btn-back")
                    yield Button("Enviar", id="btn-inquiry", variant="primary")
        yield Footer(show_command_palette=False)

    def on_mount(self) -> None:
        self.sub_title = "Catálogo"
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Producto", "Categoría", "Precio")
        self.load_catalog()

    @work(exclusive=True)
    async def load_catalog(self) -> None:
        self._products = await gateway.list_products()
        table = self.query_one(DataTable)
        table.clear()
        for p in self._products:
            table.add_row(p.name, p.category, f"${p.price:,.2f}", key=p.id)
        if not self._products:
            await self.query_one(MarkdownViewer).document.update(
                "No hay productos disponibles por ahora."
            )

    async def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        self._selected = next(
            (p for p in self._products if p.id == event.row_key.value), None
        )
        if self._selected is None:
            return
        p = self._selected
        md = f"## {p.name}\n\n{p.description or ''}\n\n"
        md += generate_markdown_table(
            None,
            [
                ["Categoría", p.category],
                ["Precio", f"${p.price:,.2f}"],
                ["Fotos", len(p.images)],
            ],
            ["l", "r"],
        )
        await self.query_one(MarkdownViewer).document.update(md)
        self.query_one("#label-inquiry-result", Label).update("")

    @on(Button.Pressed, "#btn-inquiry")
    @work(group="write")
    async def handle_inquiry(self) -> None:
        result = self.query_one("#label-inquiry-result", Label)
        if self._selected is None:
            self._selected = next(
                (
                    p
                    for p in self._products
                    if p.id == selected_key(self.query_one(DataTable))
                ),
                None,
            )
        if self._selected is None:
            result.update("Elige primero un producto.")
            return

        fields = [
            self.query_one(f"#input-inquiry-{k}", Input) for k in ("name", "email", "phone")
        ]
        name, email, phone = (f.value.strip() for f in fields)
        if not name or not (email or phone):
            result.update("Indica tu nombre y un email o teléfono.")
            return

        if await self.app.state.submit_store_inquiry(name, email, phone, self._selected) is None:
            result.update("No pudimos enviar tus datos. Inténtalo más tarde.")
            return

        for f in fields:
            f.value = ""
        result.update(THANK_YOU)

    @on(Button.Pressed, "#btn-back")
    def handle_back(self) -> None:
        self.dismiss()
