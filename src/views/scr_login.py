from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import Key
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Input, Label

from store.errors import NetworkError
from views.modal_dialog import QuitDialogModal
from views.scr_store import StoreScreen


class LoginScreen(Screen):
    """
    Seller login. Dismissed once a seller is logged in; the public
    storefront is reachable from here without an account.
    """

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="div-login"):
            yield Label("Acceso Administrativo", id="label-login-title")
            yield Label("Usuario (Email)")
            yield Input(placeholder="usuario@mw.com", id="input-login-email")
            yield Label("Contraseña")
            yield Input(placeholder="********", password=True, id="input-login-pwd")
            yield Label("", id="label-login-error")
            with Horizontal(id="div-login-btns"):
                yield Button("Salir", id="btn-quit")
                yield Button("Ingresar al Panel", id="btn-login", variant="primary")
            yield Label("¿Eres cliente?")
            yield Button("Ir al Sitio Web Público", id="btn-store")
        yield Footer(show_command_palette=False)

    def on_mount(self):
        self.sub_title = "Login"
        self.query_one("#input-login-email").focus()

    def on_key(self, event: Key) -> None:
        if event.key == "enter" and self.focused == self.query_one("#input-login-pwd"):
            self.handle_login_submit()

    def show_error(self, text: str) -> None:
        self.query_one("#label-login-error", Label).update(text)

    @on(Button.Pressed, "#btn-login")
    @work(exclusive=True)
    async def handle_login_submit(self) -> None:
        email = self.query_one("#input-login-email", Input).value.strip()
        pwd = self.query_one("#input-login-pwd", Input).value

        if not email or not pwd:
            self.show_error("Email y contraseña son obligatorios.")
            return

        self.show_error("Verificando...")
        try:
            seller = await self.app.state.login(email, pwd)
        except NetworkError:
            self.show_error(
                "Error de conexión. Por favor, revisa tu conexión a internet."
            )
            return

        if seller:
            self.show_error("")
            self.notify(f"Hola, {seller.name}.")
            self.dismiss()
        else:
            self.show_error("Credenciales inválidas o usuario inactivo.")
            input_login_pwd = self.query_one("#input-login-pwd", Input)
            input_login_pwd.value = ""
            input_login_pwd.focus()
            input_login_pwd.add_class("-invalid")

    @on(Button.Pressed, "#btn-store")
    def handle_store(self) -> None:
        self.app.push_screen(StoreScreen())

    @on(Button.Pressed, "#btn-quit")
    def handle_quit_(self) -> None:
        self.app.push_screen(QuitDialogModal())
