from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label

from views.modal_dialog import AlertModal


class ProfileModal(ModalScreen[bool]):
    """
    Lets the logged-in seller edit their own profile.
    A blank password keeps the current one. Returns True when saved.
    """

    def compose(self) -> ComposeResult:
        user = self.app.state.user
        with Vertical(id="div-profile"):
            yield Label("Mi Configuración", id="label-profile-title")
            yield Label("Nombre Completo")
            yield Input(value=user.name, id="input-profile-name")
            yield Label("Email")
            yield Input(value=user.email, id="input-profile-email")
            yield Label("Teléfono")
            yield Input(value=user.phone or "", id="input-profile-phone")
            yield Label("Nueva contraseña (dejar en blanco para mantener)")
            yield Input(password=True, id="input-profile-pwd")
            with Horizontal():
                yield Button("Cancelar", id="btn-cancel")
                yield Button("Guardar Cambios", id="btn-save", variant="primary")

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    @on(Button.Pressed, "#btn-save")
    @work(group="write")
    async def handle_save(self) -> None:
        name = self.query_one("#input-profile-name", Input).value.strip()
        email = self.query_one("#input-profile-email", Input).value.strip()
        if not name or not email:
            self.notify("Nombre y email son obligatorios.", severity="error")
            return

        updated = await self.app.state.update_profile(
            name=name,
            email=email,
            phone=self.query_one("#input-profile-phone", Input).value.strip(),
            password=self.query_one("#input-profile-pwd", Input).value.strip(),
        )
        if updated is None:
            await self.app.push_screen_wait(
                AlertModal("Ocurrió un error al actualizar el perfil.")
            )
            return
        self.notify("Perfil actualizado.")
        self.dismiss(True)

    @on(Button.Pressed, "#btn-cancel")
    def handle_cancel(self) -> None:
        self.dismiss(False)
