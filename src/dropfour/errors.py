# src/dropfour/errors.py

from __future__ import annotations


class MoveInputError(ValueError):
    """Human move text that cannot be played. The message is shown on reprompt."""


class NotANumberError(MoveInputError):
    pass


class ColumnOutOfRangeError(MoveInputError):
    pass


class ColumnFullError(MoveInputError):
    pass


class IllegalMoveError(ValueError):
    pass


class SnapshotError(ValueError):
    pass


class ProtocolError(RuntimeError):
    """A message that does not fit the coordinator/worker protocol."""
