from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Input, Label, Switch

from store.models import Seller
from utils.messages import DataChangedMessage
from views.base_screen import BaseScreen, selected_key
from views.modal_dialog import AlertModal, DialogModal


class SellersScreen(BaseScreen):
    """
    Staff accounts. Only active sellers can log in to the panel.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield DataTable(id="table-sellers")
            with Horizontal(id="hort-seller-form"):
                with Vertical():
                    yield Label("Nombre")
                    yield Input(id="input-name")
                    yield Label("Email")
                    yield Input(id="input-email")
                with Vertical():
                    yield Label("Teléfono")
                    yield Input(id="input-phone")
                    yield Label("Contraseña")
                    yield Input(id="input-password", password=True)
                with Vertical():
                    yield Label("Activo")
                    yield Switch(value=True, id="switch-active")
            with Horizontal(id="hort-seller-btns"):
                yield Button("Guardar Vendedor", id="btn-add", variant="primary")
                yield Button("Eliminar", id="btn-delete", variant="error")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Nombre", "Email", "Teléfono", "Estado")
        self.handle_reload()

    @on(ScreenResume)
    @on(DataChangedMessage)
    def handle_reload(self) -> None:
        table = self.query_one(DataTable)
        table.clear()
        for s in self.app.state.sellers:
            table.add_row(
                s.name,
                s.email,
                s.phone or "-",
                "Activo" if s.active else "Inactivo",
                key=s.id,
            )

    @on(Button.Pressed, "#btn-add")
    @work(group="write")
    async def handle_add(self) -> None:
        name = self.query_one("#input-name", Input).value.strip()
        email = self.query_one("#input-email", Input).value.strip()
        if not name or not email:
            self.notify("Nombre y email son obligatorios.", severity="error")
            return

        seller = Seller(
            name=name,
            email=email,
            phone=self.query_one("#input-phone", Input).value.strip(),
            active=self.query_one("#switch-active", Switch).value,
            password=self.query_one("#input-password", Input).value or None,
        )
        if await self.app.state.add_seller(seller) is None:
            await self.app.push_screen_wait(AlertModal("Error al guardar el vendedor."))
            return

        for field_id in ("#input-name", "#input-email", "#input-phone", "#input-password"):
            self.query_one(field_id, Input).value = ""
        self.notify(f"Vendedor {name} registrado.")
        self.post_message(DataChangedMessage("sellers"))

    @on(Button.Pressed, "#btn-delete")
    @work(group="write")
    async def handle_delete(self) -> None:
        state = self.app.state
        id = selected_key(self.query_one(DataTable))
        if id is None:
            return
        if state.user is not None and id == state.user.id:
            self.notify("No puedes eliminar tu propia cuenta.", severity="warning")
            return
        if not await self.app.push_screen_wait(
            DialogModal(
                "¿Eliminar este vendedor?",
                primary_text="Sí",
                secondary_text="No",
                tone="error",
            )
        ):
            return
        if not await state.delete_seller(id):
            self.notify("No se pudo eliminar el vendedor.", severity="error")
        self.post_message(DataChangedMessage("sellers"))
