"""Exception hierarchy for flashdeck.

None of these are fatal: every one is raised before any state changes and
can be handled at the call site.
"""


class FlashDeckError(Exception):
    """Base class for all flashdeck errors."""


class ValidationError(FlashDeckError):
    """A required field is empty or a value is not allowed."""


class NotFoundError(FlashDeckError):
    """A card or deck id does not exist (any more)."""


class InvalidStateTransition(FlashDeckError):
    """A quiz session operation was called in the wrong phase."""

    def __init__(self, operation: str, phase, message: str = ""):
        self.operation = operation
        self.phase = phase
        detail = f": {message}" if message else ""
        super().__init__(f"Cannot {operation} while session is {phase.value}{detail}")
