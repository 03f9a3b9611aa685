import shlex
from typing import List

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.suggester import SuggestFromList
from textual.validation import Number
from textual.widgets import Button, DataTable, Input, Label

from services.insights import generate_product_description
from store.models import DEFAULT_STOCK, PRODUCT_CATEGORIES, Product
from utils.images import ImageNormalizationError, decode_data_uri
from utils.messages import DataChangedMessage
from views.base_screen import BaseScreen, selected_key
from views.modal_dialog import AlertModal, DialogModal


def split_paths(raw: str) -> List[str]:
    """Image paths typed into one field, space separated, quotes allowed."""
    return shlex.split(raw) if raw.strip() else []


class ProductsScreen(BaseScreen):
    """
    Product catalog. Products are created (with resized images) and
    deleted; there is no edit.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield DataTable(id="table-products")
            yield Label("", id="label-product-detail")
            with Horizontal(id="hort-product-form"):
                with Vertical():
                    yield Label("Nombre")
                    yield Input(id="input-name")
                    yield Label("Precio ($)")
                    yield Input(
                        "0",
                        id="input-price",
                        type="number",
                        validators=[Number(minimum=0.0)],
                    )
                    yield Label("Categoría")
                    yield Input(
                        "General",
                        id="input-category",
                        suggester=SuggestFromList(PRODUCT_CATEGORIES, case_sensitive=False),
                    )
                with Vertical():
                    yield Label("Descripción")
                    yield Input(id="input-description")
                    yield Label("Imágenes (rutas separadas por espacio)")
                    yield Input(id="input-images", placeholder="fotos/a.jpg fotos/b.png")
            with Horizontal(id="hort-product-btns"):
                yield Button("Generar con IA", id="btn-generate")
                yield Button("Guardar Producto", id="btn-add", variant="primary")
                yield Button("Eliminar", id="btn-delete", variant="error")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Nombre", "Categoría", "Precio", "Stock", "Imágenes")
        self.handle_reload()

    @on(ScreenResume)
    @on(DataChangedMessage)
    def handle_reload(self) -> None:
        table = self.query_one(DataTable)
        table.clear()
        for p in self.app.state.products:
            table.add_row(
                p.name, p.category, f"${p.price:,.2f}", p.stock, len(p.images), key=p.id
            )

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        product = next(
            (p for p in self.app.state.products if p.id == event.row_key.value), None
        )
        if product is None:
            return
        detail = product.description or "(sin descripción)"
        if product.cover:
            try:
                cover = decode_data_uri(product.cover)
                detail += f"  [portada {cover.width}x{cover.height}]"
            except (ImageNormalizationError, ValueError, OSError):
                detail += "  [portada ilegible]"
        self.query_one("#label-product-detail", Label).update(detail)

    @on(Button.Pressed, "#btn-generate")
    @work(exclusive=True, group="generate")
    async def handle_generate(self) -> None:
        name = self.query_one("#input-name", Input).value.strip()
        if not name:
            self.notify("Escribe primero el nombre del producto.", severity="warning")
            return
        description_input = self.query_one("#input-description", Input)
        self.notify("Generando descripción...")
        description_input.value = await generate_product_description(
            name,
            self.query_one("#input-category", Input).value.strip(),
            description_input.value.strip(),
        )

    @on(Button.Pressed, "#btn-add")
    @work(group="write")
    async def handle_add(self) -> None:
        name = self.query_one("#input-name", Input).value.strip()
        price_input = self.query_one("#input-price", Input)
        if not name:
            self.notify("El nombre es obligatorio.", severity="error")
            return
        if not price_input.is_valid:
            price_input.focus()
            price_input.add_class("-invalid")
            return

        try:
            paths = split_paths(self.query_one("#input-images", Input).value)
        except ValueError:
            self.notify("Rutas de imagen mal escritas.", severity="error")
            return

        draft = Product(
            name=name,
            price=float(price_input.value or 0),
            category=self.query_one("#input-category", Input).value.strip() or "General",
            description=self.query_one("#input-description", Input).value.strip(),
            stock=DEFAULT_STOCK,
        )
        self.notify("Procesando imágenes..." if paths else "Guardando producto...")
        created, failures = await self.app.state.add_product(draft, paths)

        for path, error in failures:
            self.notify(f"No se pudo procesar {path}: {error}", severity="warning")
        if created is None:
            await self.app.push_screen_wait(
                AlertModal("Error al guardar el producto. Verifique conexión.")
            )
            return

        for field_id in ("#input-name", "#input-description", "#input-images"):
            self.query_one(field_id, Input).value = ""
        self.notify(f"Producto {created.name} guardado con {len(created.images)} imágenes.")
        self.post_message(DataChangedMessage("products"))

    @on(Button.Pressed, "#btn-delete")
    @work(group="write")
    async def handle_delete(self) -> None:
        id = selected_key(self.query_one(DataTable))
        if id is None:
            return
        if not await self.app.push_screen_wait(
            DialogModal(
                "¿Eliminar este producto?",
                primary_text="Sí",
                secondary_text="No",
                tone="error",
            )
        ):
            return
        if not await self.app.state.delete_product(id):
            self.notify("No se pudo eliminar el producto.", severity="error")
        self.post_message(DataChangedMessage("products"))
