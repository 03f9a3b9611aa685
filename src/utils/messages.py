from textual.message import Message


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit
    """

    bubble = True


class UserLogoutMessage(Message):
    """
    broadcasted when the seller logs out
    """

    bubble = True


class UserLoginMessage(Message):
    """
    Fired when a seller logged in or restored a session, so screens can refresh
    """

    bubble = True


class DataChangedMessage(Message):
    """
    Fired after any collection in AppState changed (create, delete, status change).
    Screens re-render from the in-memory collections; nothing is refetched.

    Post at App level when sent from a modal.
    """

    bubble = True

    def __init__(self, kind: str = "") -> None:
        super().__init__()
        self.kind = kind


class ModeSwitchedMessage(Message):
    """
    fired whenever switch_mode is called
    must be fired from app level
    """

    bubble = True

    def __init__(self, old_mode: str, new_mode: str) -> None:
        super().__init__()
        self.old_mode = old_mode
        self.new_mode = new_mode
