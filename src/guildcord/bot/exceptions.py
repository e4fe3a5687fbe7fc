"""Exceptions raised by the bot runtime."""


class ClientNotBuiltError(RuntimeError):
    """Raised when a runtime operation needs a Discord client and none is attached."""

    def __init__(self, message: str = "The client has to be built first.") -> None:
        super().__init__(message)
