"""Evidence from inner loops composes into evidence for outer loops."""

import lup

arr = [[1, 2], [3, 4]]

data = [
    [1, 2, 6, 4, 5, 3],
    [4, 6, 9, 3, 2, 1],
]

pairs = [(1, 1), (2, 2), (3, 4), (4, 4)]


if __name__ == "__main__":
    # Look for a number greater than 2.
    b = lup.evaluate_any(lup.by(arr, depth=2), lambda i, j: arr[i][j] > 2)
    print(f"{b.evidence} -> {lup.resolve_evidence(arr, b.evidence)}")

    # The evidence points to the first index reaching the maximum.
    first = lup.evaluate_max(lup.by(pairs), lambda i: float(pairs[i][0]))
    second = lup.evaluate_max(lup.by(pairs), lambda i: float(pairs[i][1]))
    print(f"{first.value} vs {second.value}")
    print(f"{first.evidence} vs {second.evidence}")

    # Is there any row whose maximum is at most 7? The Max evidence flows into Any.
    search = lup.evaluate_any(
        lup.by(data),
        lambda i: lup.evaluate_max(lup.by(data[i]), lambda j: float(data[i][j])).le(7.0),
    )
    print(f"{search.value}, evidence {search.evidence}")
    print(f"Row maximum: {lup.resolve_evidence(data, search.evidence)}")

    # Is there a row where not every element is below 3? `~` turns the All
    # counterexample into an Any witness.
    cube = [[[1.0, 2.0, 3.0]]]
    comb = lup.evaluate_any(
        lup.by(cube, depth=2),
        lambda i, j: ~lup.evaluate_all(lup.by(cube[i][j]), lambda k: cube[i][j][k] < 3.0),
    )
    print(f"{comb.value}, evidence {comb.evidence}")
