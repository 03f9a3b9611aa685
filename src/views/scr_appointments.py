from datetime import date, datetime, time

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.suggester import SuggestFromList
from textual.widgets import Button, DataTable, Input, Label, Select

from store.models import APPOINTMENT_STATUSES, Appointment
from utils.messages import DataChangedMessage
from views.base_screen import BaseScreen, selected_key
from views.modal_dialog import AlertModal, DialogModal
from views.modal_report import STATUS_LABELS


class AppointmentsScreen(BaseScreen):
    """
    Appointment list with a booking form. Status changes and deletes show up
    immediately and are undone if the store rejects them.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield DataTable(id="table-appts")
            with Horizontal(id="hort-appt-actions"):
                yield Select(
                    [(STATUS_LABELS[s], s) for s in APPOINTMENT_STATUSES],
                    prompt="Estado",
                    id="select-status",
                )
                yield Button("Cambiar Estado", id="btn-status")
                yield Button("Eliminar", id="btn-delete", variant="error")
            with Horizontal(id="hort-appt-form"):
                with Vertical():
                    yield Label("Cliente")
                    yield Input(id="input-client")
                    yield Label("Servicio")
                    yield Input("Consulta", id="input-service")
                with Vertical():
                    yield Label("Fecha (AAAA-MM-DD)")
                    yield Input(date.today().isoformat(), id="input-date")
                    yield Label("Hora (HH:MM)")
                    yield Input("09:00", id="input-time")
                with Vertical():
                    yield Label("Vendedor")
                    yield Select([], prompt="Sin asignar", id="select-seller")
                    yield Label("Notas")
                    yield Input(id="input-notes")
            yield Button("Agendar Cita", id="btn-add", variant="primary")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Cliente", "Fecha", "Hora", "Servicio", "Vendedor", "Estado")
        self.handle_reload()

    @on(ScreenResume)
    @on(DataChangedMessage)
    def handle_reload(self) -> None:
        state = self.app.state
        table = self.query_one(DataTable)
        table.clear()
        for appt in state.appointments:
            table.add_row(
                appt.client_name,
                appt.date.isoformat(),
                f"{appt.time:%H:%M}",
                appt.service,
                state.seller_name(appt.seller_id),
                STATUS_LABELS.get(appt.status, appt.status),
                key=appt.id,
            )

        self.query_one("#select-seller", Select).set_options(
            [(s.name, s.id) for s in state.sellers if s.active]
        )
        self.query_one("#input-client", Input).suggester = SuggestFromList(
            [c.name for c in state.clients], case_sensitive=False
        )

    @on(Button.Pressed, "#btn-add")
    @work(group="write")
    async def handle_add(self) -> None:
        client_name = self.query_one("#input-client", Input).value.strip()
        service = self.query_one("#input-service", Input).value.strip()
        if not client_name or not service:
            self.notify("Cliente y servicio son obligatorios.", severity="error")
            return
        try:
            day = date.fromisoformat(self.query_one("#input-date", Input).value.strip())
            hour = time.fromisoformat(self.query_one("#input-time", Input).value.strip())
        except ValueError:
            self.notify("Fecha u hora inválida.", severity="error")
            return

        notes = self.query_one("#input-notes", Input).value.strip()
        appt = Appointment(
            client_name=client_name,
            date=day,
            time=hour,
            service=service,
            notes=notes or None,
            seller_id=self.query_one("#select-seller", Select).selection,
        )
        if await self.app.state.add_appointment(appt) is None:
            await self.app.push_screen_wait(
                AlertModal("Error al guardar la cita en la base de datos.")
            )
            return

        self.query_one("#input-client", Input).value = ""
        self.query_one("#input-notes", Input).value = ""
        self.notify(f"Cita agendada para {client_name} ({datetime.combine(day, hour):%d/%m %H:%M}).")
        self.post_message(DataChangedMessage("appointments"))

    @on(Button.Pressed, "#btn-status")
    @work(group="write")
    async def handle_status(self) -> None:
        id = selected_key(self.query_one(DataTable))
        status = self.query_one("#select-status", Select).selection
        if id is None or status is None:
            self.notify("Selecciona una cita y un estado.", severity="warning")
            return
        if not await self.app.state.change_appointment_status(id, status):
            self.notify("No se pudo cambiar el estado.", severity="error")
        self.post_message(DataChangedMessage("appointments"))

    @on(Button.Pressed, "#btn-delete")
    @work(group="write")
    async def handle_delete(self) -> None:
        id = selected_key(self.query_one(DataTable))
        if id is None:
            return
        if not await self.app.push_screen_wait(
            DialogModal(
                "¿Eliminar esta cita?",
                primary_text="Sí",
                secondary_text="No",
                tone="error",
            )
        ):
            return
        if not await self.app.state.delete_appointment(id):
            self.notify("No se pudo eliminar la cita.", severity="error")
        self.post_message(DataChangedMessage("appointments"))
