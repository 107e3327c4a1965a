"""Tests for running loops over index spaces."""

import pytest

import lup
from lup import (
    EmptyDomainError,
    IncomparableValueError,
    LoopKind,
    Secret,
    SumLoop,
    ValueTypeError,
    by,
    evaluate,
    evaluate_all,
    evaluate_any,
    evaluate_max,
    evaluate_min,
    evaluate_prod,
    evaluate_sift,
    evaluate_sum,
    evaluate_vector,
    packed,
    span,
)


class _Counter:
    """Body wrapper recording the indices it was called with."""

    def __init__(self, values: list[object]) -> None:
        self.values = values
        self.visited: list[int] = []

    def __call__(self, index: int) -> object:
        self.visited.append(index)
        return self.values[index]


class TestDocumentedScenarios:
    def test_mary_had_a_little_lamb(self) -> None:
        words = ["mary", "had", "a", "little", "lamb"]
        lamb = evaluate_any(by(words), lambda i: words[i] == "lamb")
        assert lamb == Secret(True, 4)
        assert words[lamb.evidence] == "lamb"

    def test_any_2d(self) -> None:
        arr = [[1, 2], [3, 4]]
        b = evaluate_any(by(arr, depth=2), lambda i, j: arr[i][j] > 2)
        assert b == Secret(True, (1, 0))
        assert lup.resolve_evidence(arr, b.evidence) == 3

    def test_max_first_occurrence(self) -> None:
        data = [(1, 1), (2, 2), (3, 4), (4, 4)]
        a = evaluate_max(by(data), lambda i: float(data[i][0]))
        b = evaluate_max(by(data), lambda i: float(data[i][1]))
        assert a == Secret(4.0, 3)
        assert b == Secret(4.0, 2)

    def test_any_over_max(self) -> None:
        data = [
            [1, 2, 6, 4, 5, 3],
            [4, 6, 9, 3, 2, 1],
        ]
        search = evaluate_any(
            by(data),
            lambda i: evaluate_max(by(data[i]), lambda j: float(data[i][j])).le(7.0),
        )
        assert search == Secret(True, (0, 2))
        assert lup.resolve_evidence(data, search.evidence) == 6


class TestThreeDimensions:
    """Evidence from three nested loops is a flat 3-tuple."""

    cube = [[[1.0, 2.0, 3.0]]]

    def test_sum_and_prod(self) -> None:
        assert evaluate_sum(by(self.cube, depth=3), lambda i, j, k: self.cube[i][j][k]) == 6.0
        assert evaluate_prod(by(self.cube, depth=3), lambda i, j, k: self.cube[i][j][k]) == 6.0

    def test_any(self) -> None:
        result = evaluate_any(by(self.cube, depth=3), lambda i, j, k: self.cube[i][j][k] > 2.0)
        assert result == Secret(True, (0, 0, 2))

    def test_all(self) -> None:
        result = evaluate_all(by(self.cube, depth=3), lambda i, j, k: self.cube[i][j][k] < 3.0)
        assert result == Secret(False, (0, 0, 2))

    def test_max_and_min(self) -> None:
        space = by(self.cube, depth=3)
        assert evaluate_max(space, lambda i, j, k: self.cube[i][j][k]) == Secret(3.0, (0, 0, 2))
        assert evaluate_min(space, lambda i, j, k: self.cube[i][j][k]) == Secret(1.0, (0, 0, 0))

    def test_any_over_negated_all(self) -> None:
        # A list where not all items are less than 3.
        cube = self.cube
        result = evaluate_any(
            by(cube, depth=2),
            lambda i, j: ~evaluate_all(by(cube[i][j]), lambda k: cube[i][j][k] < 3.0),
        )
        assert result == Secret(True, (0, 0, 2))

    def test_any_over_max_eq(self) -> None:
        cube = self.cube
        result = evaluate_any(
            by(cube, depth=2),
            lambda i, j: evaluate_max(by(cube[i][j]), lambda k: cube[i][j][k]).eq(3.0),
        )
        assert result == Secret(True, (0, 0, 2))


class TestEmptySpaces:
    def test_any_is_false(self) -> None:
        assert evaluate_any(span(0), lambda i: True) == Secret(False, None)

    def test_all_is_vacuously_true(self) -> None:
        assert evaluate_all(span(0), lambda i: False) == Secret(True, None)

    @pytest.mark.parametrize("evaluate_extremum", [evaluate_max, evaluate_min])
    def test_extremum_raises(self, evaluate_extremum: object) -> None:
        with pytest.raises(EmptyDomainError):
            evaluate_extremum(span(0), lambda i: 1.0)  # type: ignore[operator]

    def test_extremum_skips_empty_inner_row(self) -> None:
        rows = [[], [1.0, 3.0]]
        assert evaluate_max(by(rows, depth=2), lambda i, j: rows[i][j]) == Secret(3.0, (1, 1))
        assert evaluate_min(by(rows, depth=2), lambda i, j: rows[i][j]) == Secret(1.0, (1, 0))

    def test_extremum_skips_trailing_empty_row(self) -> None:
        rows = [[2.0], []]
        assert evaluate_max(by(rows, depth=2), lambda i, j: rows[i][j]) == Secret(2.0, (0, 0))

    def test_extremum_skips_empty_rows_three_deep(self) -> None:
        cube = [[[], [4.0]], [[]]]
        assert evaluate_min(by(cube, depth=3), lambda i, j, k: cube[i][j][k]) == Secret(4.0, (0, 1, 0))

    def test_extremum_over_only_empty_rows_raises(self) -> None:
        rows: list[list[float]] = [[], []]
        with pytest.raises(EmptyDomainError):
            evaluate_max(by(rows, depth=2), lambda i, j: rows[i][j])

    def test_any_skips_empty_inner_row(self) -> None:
        rows = [[], [3]]
        assert evaluate_any(by(rows, depth=2), lambda i, j: rows[i][j] > 2) == Secret(True, (1, 0))

    def test_all_with_empty_inner_row(self) -> None:
        rows = [[], [3]]
        assert evaluate_all(by(rows, depth=2), lambda i, j: rows[i][j] > 2) == Secret(True, None)

    def test_sift_keeps_empty_inner_row(self) -> None:
        rows = [[], [3]]
        assert evaluate_sift(by(rows, depth=2), lambda i, j: rows[i][j]) == [[], [3]]

    def test_sum_is_start(self) -> None:
        assert evaluate_sum(span(0), lambda i: 1) == 0


class TestShortCircuit:
    def test_any_visits_up_to_first_true(self) -> None:
        body = _Counter([False, False, True, True, False])
        result = evaluate_any(span(5), body)
        assert result == Secret(True, 2)
        assert body.visited == [0, 1, 2]

    def test_all_visits_up_to_first_false(self) -> None:
        body = _Counter([True, False, False])
        result = evaluate_all(span(3), body)
        assert result == Secret(False, 1)
        assert body.visited == [0, 1]

    def test_any_without_match_visits_everything(self) -> None:
        body = _Counter([False] * 4)
        evaluate_any(span(4), body)
        assert body.visited == [0, 1, 2, 3]

    def test_max_visits_everything(self) -> None:
        body = _Counter([5.0, 1.0, 5.0])
        evaluate_max(span(3), body)
        assert body.visited == [0, 1, 2]

    def test_packed_any_stops_outer_loop(self) -> None:
        visited: list[tuple[int, int]] = []

        def body(i: int, j: int) -> bool:
            visited.append((i, j))
            return (i, j) == (0, 1)

        result = evaluate_any(packed(span(3), span(3)), body)
        assert result == Secret(True, (0, 1))
        assert visited == [(0, 0), (0, 1)]


class TestPackedMatchesManualLoop:
    table = [
        [0, 1, 2],
        [1, 3, 0],
        [5, 0, 4],
    ]

    def test_any_row_major(self) -> None:
        expected = None
        for i in range(len(self.table)):
            for j in range(len(self.table[i])):
                if self.table[i][j] > 2:
                    expected = (i, j)
                    break
            if expected is not None:
                break

        result = evaluate_any(by(self.table, depth=2), lambda i, j: self.table[i][j] > 2)
        assert result == Secret(True, expected)

    def test_explicit_packed_and_by_agree(self) -> None:
        table = self.table
        explicit = evaluate_min(
            packed(span(len(table)), lambda i: span(len(table[i]))),
            lambda i, j: float(table[i][j]),
        )
        derived = evaluate_min(by(table, depth=2), lambda i, j: float(table[i][j]))
        assert explicit == derived == Secret(0.0, (0, 0))

    def test_max_first_occurrence_across_rows(self) -> None:
        table = [[1.0, 5.0], [5.0, 2.0]]
        assert evaluate_max(by(table, depth=2), lambda i, j: table[i][j]) == Secret(5.0, (0, 1))


class TestFailures:
    def test_body_error_propagates(self) -> None:
        words = ["a", "b"]
        with pytest.raises(IndexError):
            evaluate_any(span(3), lambda i: words[i] == "c")

    def test_body_error_aborts_run(self) -> None:
        visited: list[int] = []

        def body(i: int) -> bool:
            visited.append(i)
            if i == 1:
                msg = "boom"
                raise RuntimeError(msg)
            return False

        with pytest.raises(RuntimeError, match="boom"):
            evaluate_any(span(5), body)
        assert visited == [0, 1]

    def test_unordered_value_type_rejected_before_iteration(self) -> None:
        visited: list[int] = []

        def body(i: int) -> float:
            visited.append(i)
            return float(i)

        with pytest.raises(ValueTypeError):
            evaluate_max(span(3), body, value_type=str)
        assert visited == []

    def test_nan_raises(self) -> None:
        values = [1.0, float("nan"), 2.0]
        with pytest.raises(IncomparableValueError):
            evaluate_min(span(3), lambda i: values[i])

    def test_int_body_value_raises(self) -> None:
        with pytest.raises(ValueTypeError):
            evaluate_max(span(3), lambda i: i)


class TestEvaluate:
    def test_kind_by_string(self) -> None:
        assert evaluate("any", range(3), lambda i: i == 2) == Secret(True, 2)

    def test_kind_by_enum(self) -> None:
        assert evaluate(LoopKind.SUM, range(4), lambda i: i) == 6

    def test_kind_by_class(self) -> None:
        assert evaluate(SumLoop, range(4), lambda i: i, start=10) == 16

    def test_unknown_kind(self) -> None:
        with pytest.raises(ValueError, match="Unknown loop kind 'mean'"):
            evaluate("mean", range(3), lambda i: i)

    def test_stepped_range_rejected(self) -> None:
        with pytest.raises(ValueError, match="contiguous"):
            evaluate_any(range(0, 10, 2), lambda i: True)

    def test_sift_nested(self) -> None:
        result = evaluate_sift(packed(span(3), span(3)), lambda i, j: float(i + j))
        assert result == [
            [0.0, 1.0, 2.0],
            [1.0, 2.0, 3.0],
            [2.0, 3.0, 4.0],
        ]
        symmetric = evaluate_all(packed(span(3), span(3)), lambda i, j: result[i][j] == result[j][i])
        assert symmetric == Secret(True, None)

    def test_sum_of_sifted_cube(self) -> None:
        cube = evaluate_sift(packed(span(3), span(3), span(3)), lambda i, j, k: float(i + j + k))
        assert evaluate_sum(by(cube, depth=3), lambda i, j, k: cube[i][j][k]) == 81.0

    def test_vector_sum_and_prod(self) -> None:
        rows = [(0.5, 1.0, 2.0), (2.0, 3.0, 0.5)]
        assert evaluate_sum(by(rows), lambda i: rows[i]) == (2.5, 4.0, 2.5)
        assert evaluate_prod(by(rows), lambda i: rows[i]) == (1.0, 3.0, 1.0)

    def test_vector(self) -> None:
        assert evaluate_vector(span(4), lambda i: float(i), size=4) == [0.0, 1.0, 2.0, 3.0]

    def test_vector_matrix(self) -> None:
        m = evaluate_vector(packed(span(3), span(3)), lambda i, j: float(i - j), size=3)
        transposed = evaluate_vector(by(m, depth=2), lambda i, j: m[j][i], size=3)
        assert m[0] == [0.0, -1.0, -2.0]
        assert transposed[0] == [0.0, 1.0, 2.0]
