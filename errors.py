from typing_extensions import *


class AutomataError(Exception):
    """Base class for everything the automaton/grammar engine raises."""


class FormatError(AutomataError, ValueError):
    """Malformed record line or field shape."""

    def __init__(
        self,
        message: str,
        line_number: Optional[int] = None,
        line: Optional[str] = None,
    ):
        self.line_number = line_number
        self.line = line
        if line_number is not None and line is not None:
            message = f"Line {line_number} ('{line.strip()}'): {message}"
        elif line_number is not None:
            message = f"Line {line_number}: {message}"
        super().__init__(message)


class ModelReferenceError(AutomataError, ValueError):
    """A state, symbol or non-terminal was used before being declared."""


class DeterminismError(AutomataError, ValueError):
    """Second target for a (state, symbol) pair in strict mode."""


class NotInitializedError(AutomataError, RuntimeError):
    """Symbol processing without a current state (reset() not called)."""
