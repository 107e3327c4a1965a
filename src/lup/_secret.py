"""The `Secret` container: a value together with the evidence that justifies it."""

from __future__ import annotations

import operator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

type Evidence = int | tuple[int, ...]


@dataclass(frozen=True, slots=True)
class Secret[E, T]:
    """A value that might carry evidence.

    The evidence tells why the value is what it is. For the maximum of a list
    it is the index where the maximum is found; for an existential search it
    is the index of the witness.

    Comparisons return a boolean `Secret` that keeps the evidence unchanged,
    whatever the outcome. The evidence still explains the underlying value, so
    it can flow from a `Max` loop into an enclosing `Any` loop.

    Attributes:
        value: The computed result.
        evidence: The index (or flattened tuple of indices) justifying `value`,
            or None when no single index justifies it.

    """

    value: T
    evidence: E | None = None

    def _compare(self, op: Callable[[Any, Any], bool], other: object) -> Secret[E, bool]:
        return Secret(value=bool(op(self.value, other)), evidence=self.evidence)

    def lt(self, threshold: object) -> Secret[E, bool]:
        """Check whether the value is less than `threshold`."""
        return self._compare(operator.lt, threshold)

    def le(self, threshold: object) -> Secret[E, bool]:
        """Check whether the value is less than or equal to `threshold`."""
        return self._compare(operator.le, threshold)

    def gt(self, threshold: object) -> Secret[E, bool]:
        """Check whether the value is greater than `threshold`."""
        return self._compare(operator.gt, threshold)

    def ge(self, threshold: object) -> Secret[E, bool]:
        """Check whether the value is greater than or equal to `threshold`."""
        return self._compare(operator.ge, threshold)

    def eq(self, other: object) -> Secret[E, bool]:
        """Check whether the value equals `other`.

        This is a method rather than `__eq__`, which keeps its usual meaning of
        comparing two secrets.
        """
        return self._compare(operator.eq, other)

    def ne(self, other: object) -> Secret[E, bool]:
        """Check whether the value differs from `other`."""
        return self._compare(operator.ne, other)

    def __neg__(self) -> Secret[E, T]:
        return Secret(value=-self.value, evidence=self.evidence)  # type: ignore[operator]

    def __invert__(self) -> Secret[E, bool]:
        # Logical negation: `~` on a secret never means bitwise inversion.
        return Secret(value=not self.value, evidence=self.evidence)


def split_result(result: object) -> tuple[Any, Evidence | None]:
    """Split a body result into its value and its inner evidence.

    Plain values have no inner evidence.
    """
    if isinstance(result, Secret):
        return result.value, result.evidence
    return result, None


def compose_evidence(index: int, inner: Evidence | None) -> Evidence:
    """Fold the evidence of an inner loop into the evidence of an outer loop.

    Nested evidence is flattened left to right, so three nested loops give
    `(i, j, k)` rather than `(i, (j, k))`.

    Examples:
        >>> compose_evidence(3, None)
        3
        >>> compose_evidence(1, 0)
        (1, 0)
        >>> compose_evidence(0, (0, 2))
        (0, 0, 2)

    """
    if inner is None:
        return index
    if isinstance(inner, tuple):
        return (index, *inner)
    return (index, inner)


def resolve_evidence(container: Sequence[Any], evidence: Evidence) -> Any:
    """Look up the element of a (nested) container that the evidence points at.

    Examples:
        >>> resolve_evidence(["mary", "had", "a", "little", "lamb"], 4)
        'lamb'
        >>> resolve_evidence([[1, 2], [3, 4]], (1, 0))
        3

    """
    if isinstance(evidence, tuple):
        item: Any = container
        for index in evidence:
            item = item[index]
        return item
    return container[evidence]
