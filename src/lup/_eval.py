"""Drive loops over index spaces."""

from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING, Any

from ._loops import Loop, LoopKind
from ._space import IndexRange, ProductSpace, as_space

if TYPE_CHECKING:
    from collections.abc import Callable

    from ._secret import Evidence, Secret
    from ._space import IndexSpace

logger = logging.getLogger(__name__)

type LoopFactory = Callable[[], Loop[Any]]


def _loop_factory(kind: LoopKind | str | type[Loop[Any]], options: dict[str, Any]) -> LoopFactory:
    """Resolve a loop kind and its options to a factory of fresh loops.

    A throwaway loop is built only to validate the options, so that invalid
    ones (e.g. an unordered value type for `Max`) are rejected before any body
    is called. Every run gets its own loop from the returned factory.
    """
    if isinstance(kind, type) and issubclass(kind, Loop):
        loop_class = kind
    else:
        try:
            loop_class = LoopKind(kind).loop_class
        except ValueError:
            valid = ", ".join(member.value for member in LoopKind)
            msg = f"Unknown loop kind {kind!r}. Expected one of: {valid}"
            raise ValueError(msg) from None

    factory: LoopFactory = partial(loop_class, **options)
    factory()  # validate
    return factory


# Marks an inner run that visited no index and is left out of its enclosing run.
_EMPTY_RUN = object()


def _run_range(
    factory: LoopFactory,
    space: IndexRange,
    body: Callable[[int], object],
    *,
    nested: bool = False,
) -> Any:
    loop = factory()
    visited = False
    for index in space:
        result = body(index)
        if result is _EMPTY_RUN:
            continue
        visited = True
        if not loop.step(index, result):
            logger.debug("%s stopped early at index %d", type(loop).__name__, index)
            return loop.finish()
    if nested and not visited and loop.skips_empty_runs:
        logger.debug("Skipping empty inner run of %s", type(loop).__name__)
        return _EMPTY_RUN
    return loop.finish()


def _run_product(
    factory: LoopFactory,
    space: ProductSpace,
    body: Callable[..., object],
    outer: tuple[int, ...] = (),
) -> Any:
    # A packed space runs as nested loops of the same kind; each inner result
    # becomes the body result of the enclosing loop, which composes evidence.
    dim = space.dims[len(outer)]
    current = dim.resolve(outer)
    nested = bool(outer)

    if len(outer) + 1 == space.depth:
        return _run_range(factory, current, lambda index: body(*outer, index), nested=nested)

    return _run_range(
        factory,
        current,
        lambda index: _run_product(factory, space, body, (*outer, index)),
        nested=nested,
    )


def evaluate(
    kind: LoopKind | str | type[Loop[Any]],
    space: IndexSpace | range,
    body: Callable[..., object],
    **options: Any,
) -> Any:
    """Run a loop of the given kind over an index space.

    The body is called once per visited index, in order: `body(i)` for a single
    range and `body(i, j, ...)` for a packed space. Loops that short-circuit
    (`any`, `all`) stop calling it as soon as the answer is known. Anything the
    body raises propagates unchanged.

    Args:
        kind: A `LoopKind`, its string value, or a `Loop` subclass.
        space: An `IndexRange`, a `ProductSpace`, or a step-1 `range`.
        body: Function from the index (or indices) to a value or a `Secret`.
        **options: Keyword arguments for the loop constructor, such as
            `value_type` for `max`/`min` or `size` for `vector`.

    Returns:
        The loop's result: a `Secret` for `any`, `all`, `max` and `min`, a plain
        value otherwise.

    Example:
        >>> words = ["mary", "had", "a", "little", "lamb"]
        >>> evaluate("any", by(words), lambda i: words[i] == "lamb")
        Secret(value=True, evidence=4)

    """
    factory = _loop_factory(kind, options)
    space = as_space(space)
    logger.debug("Evaluating %s over %s", kind, space)

    if isinstance(space, ProductSpace):
        result = _run_product(factory, space, body)
    else:
        result = _run_range(factory, space, body)

    logger.debug("Result of %s: %r", kind, result)
    return result


def evaluate_any(space: IndexSpace | range, body: Callable[..., object]) -> Secret[Evidence, bool]:
    """Existential search.

    Returns `Secret(True, evidence)` for the first index whose body is true,
    or `Secret(False, None)` when there is none (also for an empty space).
    """
    return evaluate(LoopKind.ANY, space, body)


def evaluate_all(space: IndexSpace | range, body: Callable[..., object]) -> Secret[Evidence, bool]:
    """Universal check.

    Returns `Secret(False, evidence)` for the first counterexample, or
    `Secret(True, None)` when there is none (also for an empty space).
    """
    return evaluate(LoopKind.ALL, space, body)


def evaluate_max(
    space: IndexSpace | range,
    body: Callable[..., object],
    *,
    value_type: type = float,
) -> Secret[Evidence, Any]:
    """Maximum with the evidence of the first index reaching it.

    Raises:
        ValueTypeError: If `value_type` (or a body value) is not floating-point-like.
        IncomparableValueError: If a body value is NaN.
        EmptyDomainError: If the space is empty.

    """
    return evaluate(LoopKind.MAX, space, body, value_type=value_type)


def evaluate_min(
    space: IndexSpace | range,
    body: Callable[..., object],
    *,
    value_type: type = float,
) -> Secret[Evidence, Any]:
    """Minimum with the evidence of the first index reaching it.

    Raises the same errors as `evaluate_max`.
    """
    return evaluate(LoopKind.MIN, space, body, value_type=value_type)


def evaluate_sum(space: IndexSpace | range, body: Callable[..., object], *, start: Any = 0) -> Any:
    """Sum of the body results."""
    return evaluate(LoopKind.SUM, space, body, start=start)


def evaluate_prod(space: IndexSpace | range, body: Callable[..., object], *, start: Any = 1) -> Any:
    """Product of the body results."""
    return evaluate(LoopKind.PROD, space, body, start=start)


def evaluate_sift(space: IndexSpace | range, body: Callable[..., object]) -> list[Any]:
    """List of the body results (nested lists for a packed space)."""
    return evaluate(LoopKind.SIFT, space, body)


def evaluate_vector(
    space: IndexSpace | range,
    body: Callable[..., object],
    *,
    size: int,
    fill: Any = 0.0,
) -> list[Any]:
    """Fixed-size list with the body result at index k stored in slot k."""
    return evaluate(LoopKind.VECTOR, space, body, size=size, fill=fill)
