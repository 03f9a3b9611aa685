from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from utils.logger import get_logger
from utils.messages import (
    ModeSwitchedMessage,
    QuitRequestedMessage,
    UserLoginMessage,
    UserLogoutMessage,
)
from utils.state import AppState
from views.scr_appointments import AppointmentsScreen
from views.scr_clients import ClientsScreen
from views.scr_dashboard import DashboardScreen
from views.scr_login import LoginScreen
from views.scr_products import ProductsScreen
from views.scr_sales import SalesScreen
from views.scr_sellers import SellersScreen

_logger = get_logger(__name__)


class MwPanelApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    MODES = {
        "dashboard": DashboardScreen,
        "appointments": AppointmentsScreen,
        "products": ProductsScreen,
        "sales": SalesScreen,
        "clients": ClientsScreen,
        "sellers": SellersScreen,
    }

    MENU = {
        "dashboard": "Panel Principal",
        "appointments": "Citas",
        "products": "Productos",
        "sales": "Ventas",
        "clients": "Clientes",
        "sellers": "Vendedores",
    }

    CSS_PATH = "styles/index.tcss"

    state: AppState

    def __init__(self):
        super().__init__()
        self.state = AppState()

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self.title = "MW Servicio Comercial"
        self.main_flow()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @on(UserLogoutMessage)
    @work
    async def handle_user_logout(self):
        await self.state.logout()
        self.notify("Sesión cerrada.")
        self.main_flow()

    @on(QuitRequestedMessage)
    def handle_quit(self):
        self.exit()

    @work(exclusive=True)
    async def main_flow(self):
        if await self.state.restore() is None:
            await self.push_screen_wait(LoginScreen())
        else:
            _logger.info(f"Restored session for {self.state.user.email}.")

        await self.state.load_all()
        self.post_message(UserLoginMessage())
        self.post_message(ModeSwitchedMessage(self.current_mode, "dashboard"))
        await self.switch_mode("dashboard")


if __name__ == "__main__":
    app = MwPanelApp()
    app.run()
