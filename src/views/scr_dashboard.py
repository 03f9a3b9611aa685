from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, Label, MarkdownViewer

from services.insights import analyze_schedule
from utils.messages import DataChangedMessage, ModeSwitchedMessage
from utils.pure import (
    chart_series,
    dashboard_stats,
    generate_markdown_table,
    recent_products,
    render_bar_chart,
)
from views.base_screen import BaseScreen
from views.modal_report import ReportModal


class DashboardScreen(BaseScreen):
    """
    Headline numbers, appointments per day, the latest products and an AI
    summary of the schedule. All figures come from the in-memory collections.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield Label("", id="label-insight")
            with Horizontal(id="hort-reports"):
                yield Button("Total de Citas", id="btn-report-all")
                yield Button("Citas Pendientes", id="btn-report-pending")
                yield Button("Citas Realizadas", id="btn-report-completed")
            yield MarkdownViewer(id="md-dashboard", show_table_of_contents=False)

    def on_mount(self) -> None:
        self.handle_reload()
        self.refresh_insight()

    @on(ScreenResume)
    @on(ModeSwitchedMessage)
    @on(DataChangedMessage)
    @work(exclusive=True, group="render")
    async def handle_reload(self) -> None:
        state = self.app.state
        stats = dashboard_stats(state.appointments, state.products)

        user_name = state.user.name if state.user else ""
        md = f"## Panel Principal\n\nHola, {user_name}. Esto es lo que sucede hoy.\n\n"
        md += generate_markdown_table(
            ["Indicador", "Valor"],
            [
                ["Total de Citas", stats["total_appointments"]],
                ["Citas Pendientes", stats["pending_appointments"]],
                ["Citas Realizadas", stats["completed_appointments"]],
                ["Productos", stats["total_products"]],
                ["Valor Inventario", f"${stats['inventory_value']:,.2f}"],
            ],
            ["l", "r"],
        )

        chart = render_bar_chart(chart_series(state.appointments))
        md += "\n\n### Actividad de Citas\n\n"
        md += f"```\n{chart}\n```\n" if chart else "No hay datos disponibles\n"

        md += "\n### Productos Recientes\n\n"
        latest = recent_products(state.products)
        if latest:
            md += generate_markdown_table(
                ["Producto", "Precio", "Imágenes"],
                [[p.name, f"${p.price:,.2f}", len(p.images)] for p in latest],
                ["l", "r", "c"],
            )
        else:
            md += "No hay productos."

        await self.query_one("#md-dashboard", MarkdownViewer).document.update(md)

    @work(exclusive=True, group="insight")
    async def refresh_insight(self) -> None:
        appointments = self.app.state.appointments
        if not appointments:
            return
        insight = await analyze_schedule(appointments)
        self.query_one("#label-insight", Label).update(insight)

    @on(Button.Pressed, "#btn-report-all")
    def handle_report_all(self) -> None:
        self.app.push_screen(ReportModal("all"))

    @on(Button.Pressed, "#btn-report-pending")
    def handle_report_pending(self) -> None:
        self.app.push_screen(ReportModal("pending"))

    @on(Button.Pressed, "#btn-report-completed")
    def handle_report_completed(self) -> None:
        self.app.push_screen(ReportModal("completed"))
