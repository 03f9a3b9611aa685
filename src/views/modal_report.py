from textual import events, on
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, DataTable, Label

from utils.pure import ReportKind, report_filter

REPORT_TITLES = {"all": "Todas", "pending": "Pendientes", "completed": "Realizadas"}
STATUS_LABELS = {
    "pending": "Pendiente",
    "confirmed": "Confirmada",
    "completed": "Realizada",
    "cancelled": "Cancelada",
}


class ReportModal(ModalScreen[None]):
    """
    Appointment report for one filter, read from the live collection.
    """

    def __init__(self, kind: ReportKind) -> None:
        super().__init__()
        self.kind = kind

    def compose(self) -> ComposeResult:
        with Vertical(id="div-report"):
            yield Label(f"Reporte: {REPORT_TITLES[self.kind]}", id="label-report-title")
            yield DataTable(id="table-report")
            yield Button("Cerrar Reporte", id="btn-close")

    def on_mount(self) -> None:
        state = self.app.state
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Cliente", "Fecha", "Servicio", "Vendedor", "Estado", "Notas")

        rows = report_filter(state.appointments, self.kind)
        if not rows:
            self.query_one("#label-report-title", Label).update(
                f"Reporte: {REPORT_TITLES[self.kind]} (No hay datos para este reporte.)"
            )
        for appt in rows:
            table.add_row(
                appt.client_name,
                f"{appt.date.isoformat()} {appt.time:%H:%M}",
                appt.service,
                state.seller_name(appt.seller_id),
                STATUS_LABELS.get(appt.status, appt.status),
                appt.notes or "-",
            )

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss()

    @on(Button.Pressed, "#btn-close")
    def handle_close(self) -> None:
        self.dismiss()
