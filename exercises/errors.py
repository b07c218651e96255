"""Errors raised by the exercise engine.

All of them are recoverable: the state machine is left exactly as it was
before the rejected call.
"""

from models import ExerciseStatus


class ExerciseError(Exception):
    """Base class for exercise engine errors."""


class EmptySourceError(ExerciseError):
    """The source code produced no usable fragments."""

    def __init__(self, message: str = "Source code contains no non-blank lines"):
        super().__init__(message)


class InvalidTransitionError(ExerciseError):
    """An operation was invoked in a state that forbids it."""

    def __init__(self, operation: str, status: ExerciseStatus, reason: str = ""):
        self.operation = operation
        self.status = status
        message = f"Cannot {operation} while exercise is {status.value}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class UnknownFragmentError(ExerciseError):
    """A drop referenced a fragment that is not in the available pool."""

    def __init__(self, fragment_id: str):
        self.fragment_id = fragment_id
        super().__init__(f"Fragment {fragment_id!r} is not available for placement")
