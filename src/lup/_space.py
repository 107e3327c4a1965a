"""Index spaces traversed by loops.

An index space is a finite, ordered sequence of integer indices. A single
dimension is a contiguous range `[lo, hi)`. Several dimensions pack into a
`ProductSpace`, traversed in row-major order with the outer dimension varying
slowest. Inner dimensions may depend on the enclosing indices, which is how
ragged containers (rows of different lengths) are walked.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Sequence


@dataclass(frozen=True, slots=True)
class IndexRange:
    """Contiguous range of indices `[lo, hi)`.

    The range is empty when `hi <= lo`.
    """

    lo: int
    hi: int

    def __iter__(self) -> Iterator[int]:
        return iter(range(self.lo, self.hi))

    def __len__(self) -> int:
        return max(self.hi - self.lo, 0)

    def resolve(self, outer: tuple[int, ...]) -> IndexRange:  # noqa: ARG002
        """Return the range for the given enclosing indices (always itself)."""
        return self

    def __str__(self) -> str:
        return f"{self.lo}..{self.hi}"


@dataclass(frozen=True, slots=True)
class DependentRange:
    """Dimension whose range is computed from the enclosing indices.

    `bound` is called with the enclosing indices as positional arguments and
    returns an `IndexRange`, a step-1 `range` or a plain length.
    """

    bound: Callable[..., IndexRange | range | int]

    def resolve(self, outer: tuple[int, ...]) -> IndexRange:
        return _to_range(self.bound(*outer))

    def __str__(self) -> str:
        name = getattr(self.bound, "__name__", type(self.bound).__name__)
        return f"<{name}>"


@dataclass(frozen=True, slots=True)
class DerivedRange:
    """Dimension bounded by the length of a nested element of a container.

    At nesting level `level` the range is `[0, len(container[i1]...[i_level]))`
    where `i1...i_level` are the enclosing indices.
    """

    container: Any
    level: int

    def resolve(self, outer: tuple[int, ...]) -> IndexRange:
        item = self.container
        for index in outer[: self.level]:
            item = item[index]
        return IndexRange(0, len(item))

    def __str__(self) -> str:
        return f"by[{self.level}]"


type Dimension = IndexRange | DependentRange | DerivedRange


@dataclass(frozen=True, slots=True)
class ProductSpace:
    """Lexicographic product of two or more dimensions, outer dimension first."""

    dims: tuple[Dimension, ...]

    def __post_init__(self) -> None:
        if len(self.dims) < 2:
            msg = f"ProductSpace needs at least 2 dimensions, got {len(self.dims)}"
            raise ValueError(msg)

    @property
    def depth(self) -> int:
        """Number of index variables."""
        return len(self.dims)

    def __iter__(self) -> Iterator[tuple[int, ...]]:
        """Iterate index tuples in row-major order."""
        yield from self._walk(())

    def _walk(self, outer: tuple[int, ...]) -> Iterator[tuple[int, ...]]:
        dim = self.dims[len(outer)]
        for index in dim.resolve(outer):
            current = (*outer, index)
            if len(current) == len(self.dims):
                yield current
            else:
                yield from self._walk(current)

    def __str__(self) -> str:
        return " x ".join(str(dim) for dim in self.dims)


type IndexSpace = IndexRange | ProductSpace


def _to_range(value: object) -> IndexRange:
    if isinstance(value, IndexRange):
        return value
    if isinstance(value, range):
        if value.step != 1:
            msg = f"Index ranges must be contiguous (step 1), got {value!r}"
            raise ValueError(msg)
        return IndexRange(value.start, value.stop)
    if isinstance(value, int) and not isinstance(value, bool):
        return IndexRange(0, value)
    msg = f"Expected IndexRange, range or int as a dimension bound, got {type(value).__name__}"
    raise TypeError(msg)


def _to_dimension(value: object) -> Dimension:
    if isinstance(value, (IndexRange, DependentRange, DerivedRange)):
        return value
    if isinstance(value, range):
        return _to_range(value)
    if callable(value):
        return DependentRange(value)
    msg = f"Expected IndexRange, range or callable as a dimension, got {type(value).__name__}"
    raise TypeError(msg)


def span(lo: int, hi: int | None = None) -> IndexRange:
    """Build an explicit range.

    `span(hi)` is `[0, hi)`, `span(lo, hi)` is `[lo, hi)`, like `range()`.
    """
    if hi is None:
        return IndexRange(0, lo)
    return IndexRange(lo, hi)


def by(container: Sequence[Any], depth: int = 1) -> IndexSpace:
    """Derive an index space from the length of a container.

    With `depth=1` this is `[0, len(container))`. With a larger depth the space
    walks nested elements: the second index ranges over `container[i]`, the
    third over `container[i][j]`, and so on.

    Examples:
        >>> by(["a", "b", "c"])
        IndexRange(lo=0, hi=3)
        >>> list(by([[1, 2], [3]], depth=2))
        [(0, 0), (0, 1), (1, 0)]

    """
    if depth < 1:
        msg = f"depth must be at least 1, got {depth}"
        raise ValueError(msg)
    first = IndexRange(0, len(container))
    if depth == 1:
        return first
    rest = tuple(DerivedRange(container, level) for level in range(1, depth))
    return ProductSpace((first, *rest))


def packed(*dims: IndexRange | range | Callable[..., IndexRange | range | int]) -> ProductSpace:
    """Pack several dimensions into one space.

    Each dimension is an `IndexRange`, a step-1 `range`, or a callable taking
    the enclosing indices and returning the dimension's range.

    Example:
        >>> rows = [[1, 2, 3], [4]]
        >>> list(packed(span(len(rows)), lambda i: range(len(rows[i]))))
        [(0, 0), (0, 1), (0, 2), (1, 0)]

    """
    return ProductSpace(tuple(_to_dimension(dim) for dim in dims))


def as_space(value: object) -> IndexSpace:
    """Normalize an index space argument.

    Accepts `IndexRange`, `ProductSpace` and step-1 `range` objects.
    """
    if isinstance(value, (IndexRange, ProductSpace)):
        return value
    if isinstance(value, range):
        return _to_range(value)
    msg = f"Expected an index space (IndexRange, ProductSpace or range), got {type(value).__name__}"
    raise TypeError(msg)
