"""Error taxonomy shared by services and adapters."""


class NutriPlusError(Exception):
    """Base class for application errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(NutriPlusError):
    """Raised synchronously for invalid input; never reaches a store."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class StoreError(NutriPlusError):
    """Raised by persistence adapters when the remote store rejects a call."""


class CollaboratorError(NutriPlusError):
    """Raised when meal analysis or recipe suggestion fails."""
