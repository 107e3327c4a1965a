"""Pydantic models for data files and loop reports."""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field

from ._loops import LoopKind
from ._secret import Secret, resolve_evidence

type Cell = bool | int | float | str
type Array = list[Cell | Array]


def array_depth(array: Cell | Array) -> int:
    """Nesting depth of an array, following the first element of each level.

    Examples:
        >>> array_depth([1, 2])
        1
        >>> array_depth([[1, 2], [3, 4]])
        2
        >>> array_depth([])
        1

    """
    depth = 0
    current: Any = array
    while isinstance(current, list):
        depth += 1
        if not current:
            break
        current = current[0]
    return depth


def irregular_path(array: Array) -> tuple[int, ...] | None:
    """Indices of the first element whose nesting disagrees with `array_depth`.

    Every element above the depth must be an array and every element at the
    depth must be a plain cell. Returns None when the table is regular.

    Examples:
        >>> irregular_path([[1, 2], [], [3]]) is None
        True
        >>> irregular_path([[1, 2], 3])
        (1,)

    """
    depth = array_depth(array)

    def walk(item: Cell | Array, path: tuple[int, ...]) -> tuple[int, ...] | None:
        if isinstance(item, list) != (len(path) < depth):
            return path
        if isinstance(item, list):
            for index, child in enumerate(item):
                found = walk(child, (*path, index))
                if found is not None:
                    return found
        return None

    return walk(array, ())


def describe_shape(array: Array) -> str:
    """Human readable shape, e.g. "2x3"; ragged levels are shown as "*"."""
    parts: list[str] = []
    level: list[Any] = [array]
    for _ in range(array_depth(array)):
        lengths = {len(item) for item in level if isinstance(item, list)}
        parts.append(str(lengths.pop()) if len(lengths) == 1 else "*")
        level = [child for item in level if isinstance(item, list) for child in item]
    return "x".join(parts)


class DataFile(BaseModel):
    """Contents of a data file: named arrays under `[tables]`."""

    model_config = ConfigDict(extra="ignore")

    tables: dict[str, Array] = Field(default_factory=dict)


class LoopReport(BaseModel):
    """Outcome of running one loop over a table, ready for display or export."""

    kind: LoopKind
    table: str
    value: bool | int | float | str
    evidence: int | tuple[int, ...] | None = None
    witness: Cell | Array | None = None
    comparison: str | None = None

    @classmethod
    def from_result(
        cls,
        kind: LoopKind,
        table: str,
        array: Array,
        result: object,
        comparison: str | None = None,
    ) -> Self:
        """Build a report, looking up the witness element when there is evidence."""
        if isinstance(result, Secret):
            value = result.value
            evidence = result.evidence
        else:
            value = result
            evidence = None
        witness = resolve_evidence(array, evidence) if evidence is not None else None
        return cls(
            kind=kind,
            table=table,
            value=value,
            evidence=evidence,
            witness=witness,
            comparison=comparison,
        )

    @property
    def passed(self) -> bool | None:
        """The boolean outcome, or None when the value is not a boolean."""
        if isinstance(self.value, bool):
            return self.value
        return None
