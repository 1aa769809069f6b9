"""Exceptions raised by the presence engine."""

from __future__ import annotations

from typing import Any


class PresenceError(ValueError):
    """Raised when the engine detects invalid caller-provided data."""


class InvalidDateError(PresenceError):
    """A date or time string could not be parsed."""


class InvalidRangeError(PresenceError):
    """A date range ends before it starts."""


class DanglingReferenceError(PresenceError):
    """
    A record points at a collaborator that is not in the snapshot.

    Recoverable: the engine skips the record and keeps going.
    """

    def __init__(self, record_kind: str, collaborator_id: str, record: Any = None):
        self.record_kind = record_kind
        self.collaborator_id = collaborator_id
        self.record = record
        super().__init__(
            f"{record_kind} references unknown collaborator {collaborator_id!r}"
        )


__all__ = [
    "PresenceError",
    "InvalidDateError",
    "InvalidRangeError",
    "DanglingReferenceError",
]
