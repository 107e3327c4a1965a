"""Loop strategies.

A loop is a small accumulator driven over an index space: it is created fresh
for every run, receives each body result through `step`, and produces its
result with `finish`. `step` returns False to stop the traversal early.

`Any`, `All`, `Max` and `Min` produce a `Secret` carrying evidence. `Sum`,
`Prod`, `Sift` and `Vector` produce plain values.
"""

from __future__ import annotations

import math
import numbers
from abc import ABC, abstractmethod
from enum import StrEnum
from typing import TYPE_CHECKING, Any, ClassVar

from ._errors import EmptyDomainError, IncomparableValueError, ValueTypeError
from ._secret import Evidence, Secret, compose_evidence, split_result

if TYPE_CHECKING:
    from collections.abc import Callable


class LoopKind(StrEnum):
    """Kinds of loops known by name."""

    ANY = "any"
    ALL = "all"
    MAX = "max"
    MIN = "min"
    SUM = "sum"
    PROD = "prod"
    SIFT = "sift"
    VECTOR = "vector"

    @property
    def loop_class(self) -> type[Loop[Any]]:
        """The loop class implementing this kind."""
        return _LOOP_CLASSES[self]

    @property
    def has_evidence(self) -> bool:
        """Whether loops of this kind return a `Secret`."""
        return self in (LoopKind.ANY, LoopKind.ALL, LoopKind.MAX, LoopKind.MIN)


class Loop[R](ABC):
    """Accumulator for one run over an index space."""

    kind: ClassVar[LoopKind]
    # When true, an inner run of a packed space that visits no index is left
    # out of the enclosing loop instead of contributing a result.
    skips_empty_runs: ClassVar[bool] = False

    @abstractmethod
    def step(self, index: int, result: object) -> bool:
        """Consume the body result at `index`.

        Returns:
            True to continue with the next index, False to stop.

        """

    @abstractmethod
    def finish(self) -> R:
        """Produce the loop's result."""


class AnyLoop(Loop[Secret[Evidence, bool]]):
    """There-exists loop: stops at the first true body result."""

    kind = LoopKind.ANY

    def __init__(self) -> None:
        self._evidence: Evidence | None = None

    def step(self, index: int, result: object) -> bool:
        value, inner = split_result(result)
        if value:
            self._evidence = compose_evidence(index, inner)
            return False
        return True

    def finish(self) -> Secret[Evidence, bool]:
        return Secret(value=self._evidence is not None, evidence=self._evidence)


class AllLoop(Loop[Secret[Evidence, bool]]):
    """For-all loop: stops at the first false body result (a counterexample)."""

    kind = LoopKind.ALL

    def __init__(self) -> None:
        self._evidence: Evidence | None = None

    def step(self, index: int, result: object) -> bool:
        value, inner = split_result(result)
        if not value:
            self._evidence = compose_evidence(index, inner)
            return False
        return True

    def finish(self) -> Secret[Evidence, bool]:
        return Secret(value=self._evidence is None, evidence=self._evidence)


def check_ordered_type(value_type: type) -> None:
    """Reject value types that lack a total numeric order.

    Accepted types are real, non-integral numbers: `float`, `fractions.Fraction`
    and their subclasses (e.g. `numpy.float64`). Integers must be converted by
    the caller.

    Raises:
        ValueTypeError: If `value_type` is not such a type.

    """
    if not isinstance(value_type, type):
        msg = f"value_type must be a type, got {value_type!r}"
        raise ValueTypeError(msg)
    if not issubclass(value_type, numbers.Real) or issubclass(value_type, numbers.Integral):
        msg = (
            f"Extremum loops need a floating-point-like value type, got {value_type.__name__}. "
            "Convert integral values explicitly, e.g. float(x)."
        )
        raise ValueTypeError(msg)


class _ExtremumLoop(Loop[Secret[Evidence, Any]]):
    """Shared implementation of `Max` and `Min`.

    Keeps the best value seen so far and the evidence of the earliest index
    attaining it: a later equal value does not replace it. Empty rows of a
    ragged packed space are skipped; only a space with no index at all has
    no extremum.
    """

    skips_empty_runs = True

    def __init__(self, value_type: type = float) -> None:
        check_ordered_type(value_type)
        self.value_type = value_type
        self._best: Secret[Evidence, Any] | None = None

    @staticmethod
    @abstractmethod
    def _improves(candidate: Any, best: Any) -> bool: ...

    def step(self, index: int, result: object) -> bool:
        value, inner = split_result(result)
        if not isinstance(value, self.value_type) or isinstance(value, bool):
            msg = (
                f"{type(self).__name__} expected {self.value_type.__name__} values, "
                f"got {type(value).__name__} at index {index}"
            )
            raise ValueTypeError(msg)
        if math.isnan(value):
            msg = f"{type(self).__name__} cannot order NaN at index {index}"
            raise IncomparableValueError(msg, index)
        if self._best is None or self._improves(value, self._best.value):
            self._best = Secret(value=value, evidence=compose_evidence(index, inner))
        return True

    def finish(self) -> Secret[Evidence, Any]:
        if self._best is None:
            msg = f"{type(self).__name__} over an empty index space has no extremum"
            raise EmptyDomainError(msg)
        return self._best


class MaxLoop(_ExtremumLoop):
    """Maximum loop; evidence names the first index reaching the maximum."""

    kind = LoopKind.MAX

    @staticmethod
    def _improves(candidate: Any, best: Any) -> bool:
        return candidate > best


class MinLoop(_ExtremumLoop):
    """Minimum loop; evidence names the first index reaching the minimum."""

    kind = LoopKind.MIN

    @staticmethod
    def _improves(candidate: Any, best: Any) -> bool:
        return candidate < best


def _combine(op: Callable[[Any, Any], Any], acc: Any, value: Any) -> Any:
    # Lists and tuples are combined element-wise.
    if isinstance(value, (list, tuple)):
        if not isinstance(acc, (list, tuple)):
            acc = [acc] * len(value)
        if len(acc) != len(value):
            msg = f"Cannot combine vectors of length {len(acc)} and {len(value)}"
            raise ValueError(msg)
        return type(value)(op(a, v) for a, v in zip(acc, value, strict=True))
    return op(acc, value)


class SumLoop(Loop[Any]):
    """Sum loop; vector values (lists, tuples) are summed element-wise."""

    kind = LoopKind.SUM

    def __init__(self, start: Any = 0) -> None:
        self._acc = start

    def step(self, index: int, result: object) -> bool:  # noqa: ARG002
        self._acc = _combine(lambda a, b: a + b, self._acc, result)
        return True

    def finish(self) -> Any:
        return self._acc


class ProdLoop(Loop[Any]):
    """Product loop; vector values (lists, tuples) are multiplied element-wise."""

    kind = LoopKind.PROD

    def __init__(self, start: Any = 1) -> None:
        self._acc = start

    def step(self, index: int, result: object) -> bool:  # noqa: ARG002
        self._acc = _combine(lambda a, b: a * b, self._acc, result)
        return True

    def finish(self) -> Any:
        return self._acc


class SiftLoop(Loop[list[Any]]):
    """Collects body results into a list."""

    kind = LoopKind.SIFT

    def __init__(self) -> None:
        self._items: list[Any] = []

    def step(self, index: int, result: object) -> bool:  # noqa: ARG002
        self._items.append(result)
        return True

    def finish(self) -> list[Any]:
        return self._items


class VectorLoop(Loop[list[Any]]):
    """Fills a fixed-size list: the body result at index k goes to slot k."""

    kind = LoopKind.VECTOR

    def __init__(self, size: int, fill: Any = 0.0) -> None:
        if size < 0:
            msg = f"Vector size must be non-negative, got {size}"
            raise ValueError(msg)
        self._slots: list[Any] = [fill] * size

    def step(self, index: int, result: object) -> bool:
        if not 0 <= index < len(self._slots):
            msg = f"Index {index} out of range for a vector of size {len(self._slots)}"
            raise IndexError(msg)
        self._slots[index] = result
        return True

    def finish(self) -> list[Any]:
        return self._slots


_LOOP_CLASSES: dict[LoopKind, type[Loop[Any]]] = {
    LoopKind.ANY: AnyLoop,
    LoopKind.ALL: AllLoop,
    LoopKind.MAX: MaxLoop,
    LoopKind.MIN: MinLoop,
    LoopKind.SUM: SumLoop,
    LoopKind.PROD: ProdLoop,
    LoopKind.SIFT: SiftLoop,
    LoopKind.VECTOR: VectorLoop,
}
