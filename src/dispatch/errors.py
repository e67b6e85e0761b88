from __future__ import annotations


class DispatchError(Exception):
    """Base class for dispatch failures."""


class InvariantViolation(DispatchError):
    """Raised when a snapshot reaches a state the decision rules cannot handle.

    This only happens on corrupted input (for example a loaded elevator whose
    travel direction cannot be resolved). The decision is aborted, never guessed.
    """

    def __init__(self, elevator_id: int, message: str) -> None:
        super().__init__(f"elevator {elevator_id}: {message}")
        self.elevator_id = elevator_id
