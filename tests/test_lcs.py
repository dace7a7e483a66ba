from functools import lru_cache

import pytest

from correction_aligner.lcs import lcs_table, lcs_token_matches


def _reference_lcs_length(a: tuple[str, ...], b: tuple[str, ...]) -> int:
    @lru_cache(maxsize=None)
    def solve(i: int, j: int) -> int:
        if i == len(a) or j == len(b):
            return 0
        if a[i] == b[j]:
            return 1 + solve(i + 1, j + 1)
        return max(solve(i + 1, j), solve(i, j + 1))

    return solve(0, 0)


def test_lcs_simple_deletion():
    assert lcs_token_matches(["a", "b", "c"], ["a", "c"]) == [(0, 0), (2, 1)]


def test_lcs_empty_inputs():
    assert lcs_token_matches([], ["a"]) == []
    assert lcs_token_matches(["a"], []) == []


def test_lcs_tie_advances_left_sequence():
    """With equal remaining scores the left pointer moves first."""
    assert lcs_token_matches(["x", "y"], ["y", "x"]) == [(1, 0)]


def test_lcs_table_suffix_values():
    table = lcs_table(["a", "b"], ["b"])
    assert table.shape == (3, 2)
    assert table[0, 0] == 1
    assert table[1, 0] == 1
    assert table[2, 0] == 0


@pytest.mark.parametrize(
    "a, b",
    [
        ("el gato negro come".split(), "el perro negro no come".split()),
        (list("abcbdab"), list("bdcaba")),
        (list("aaaa"), list("aa")),
        (["Yo", " ", "tengo"], ["Tú", " ", "tienes"]),
    ],
)
def test_lcs_matches_are_valid_and_maximal(a: list[str], b: list[str]):
    matches = lcs_token_matches(a, b)
    for i, j in matches:
        assert a[i] == b[j]
    for (i1, j1), (i2, j2) in zip(matches, matches[1:]):
        assert i2 > i1
        assert j2 > j1
    assert len(matches) == _reference_lcs_length(tuple(a), tuple(b))
