from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Input, Label

from store.models import Client
from utils.messages import DataChangedMessage
from views.base_screen import BaseScreen, selected_key
from views.modal_dialog import AlertModal, DialogModal


class ClientsScreen(BaseScreen):
    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield DataTable(id="table-clients")
            with Horizontal(id="hort-client-form"):
                with Vertical():
                    yield Label("Nombre")
                    yield Input(id="input-name")
                    yield Label("Email")
                    yield Input(id="input-email")
                with Vertical():
                    yield Label("Teléfono")
                    yield Input(id="input-phone")
                    yield Label("Dirección")
                    yield Input(id="input-address")
            with Horizontal(id="hort-client-btns"):
                yield Button("Guardar Cliente", id="btn-add", variant="primary")
                yield Button("Eliminar", id="btn-delete", variant="error")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Nombre", "Email", "Teléfono", "Dirección")
        self.handle_reload()

    @on(ScreenResume)
    @on(DataChangedMessage)
    def handle_reload(self) -> None:
        table = self.query_one(DataTable)
        table.clear()
        for c in self.app.state.clients:
            table.add_row(c.name, c.email, c.phone or "-", c.address or "-", key=c.id)

    @on(Button.Pressed, "#btn-add")
    @work(group="write")
    async def handle_add(self) -> None:
        name = self.query_one("#input-name", Input).value.strip()
        if not name:
            self.notify("El nombre es obligatorio.", severity="error")
            return

        address = self.query_one("#input-address", Input).value.strip()
        client = Client(
            name=name,
            email=self.query_one("#input-email", Input).value.strip(),
            phone=self.query_one("#input-phone", Input).value.strip(),
            address=address or None,
        )
        if await self.app.state.add_client(client) is None:
            await self.app.push_screen_wait(AlertModal("Error al guardar el cliente."))
            return

        for field_id in ("#input-name", "#input-email", "#input-phone", "#input-address"):
            self.query_one(field_id, Input).value = ""
        self.notify(f"Cliente {name} registrado.")
        self.post_message(DataChangedMessage("clients"))

    @on(Button.Pressed, "#btn-delete")
    @work(group="write")
    async def handle_delete(self) -> None:
        id = selected_key(self.query_one(DataTable))
        if id is None:
            return
        if not await self.app.push_screen_wait(
            DialogModal(
                "¿Eliminar este cliente? Sus ventas mostrarán 'Cliente Eliminado'.",
                primary_text="Sí",
                secondary_text="No",
                tone="error",
            )
        ):
            return
        if not await self.app.state.delete_client(id):
            self.notify("No se pudo eliminar el cliente.", severity="error")
        self.post_message(DataChangedMessage("clients"))
