"""Errors raised by lup loops.

Failures raised by body functions are never wrapped; only conditions detected
by the loops themselves use these classes.
"""


class LoopError(Exception):
    """Base class for errors raised by lup loops."""


class EmptyDomainError(LoopError, ValueError):
    """An extremum loop ran over an index space without any index."""


class IncomparableValueError(LoopError, ValueError):
    """A value without a total order (e.g. NaN) reached an extremum loop."""

    def __init__(self, message: str, index: int) -> None:
        super().__init__(message)
        self.index = index


class ValueTypeError(LoopError, TypeError):
    """A loop was selected with, or fed, a value type it cannot order."""
