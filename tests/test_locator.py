from correction_aligner.config import AlignerConfig
from correction_aligner.locator import (
    Location,
    approx_local_align,
    exact_at_hint,
    find_unique_in_window,
    forward_greedy,
    locate,
)

TEXT = "El niño paso a la tienda."
REPEATED = "la casa y la mesa"


def test_exact_at_hint():
    assert exact_at_hint(TEXT, "niño", 3) == 3
    assert exact_at_hint(TEXT, "niño", 0) is None


def test_find_unique_in_window_returns_single_occurrence():
    assert find_unique_in_window(TEXT, "niño", 0, 60) == 3


def test_find_unique_in_window_refuses_ambiguous_matches():
    assert find_unique_in_window(REPEATED, "la", 5, 60) is None


def test_find_unique_in_window_respects_window_bounds():
    assert find_unique_in_window(REPEATED, "mesa", 0, 5) is None
    assert find_unique_in_window(REPEATED, "mesa", 0, 20) == 13


def test_forward_greedy_starts_at_cursor():
    assert forward_greedy(REPEATED, "la", 0) == 0
    assert forward_greedy(REPEATED, "la", 1) == 10
    assert forward_greedy(REPEATED, "la", 11) is None


def test_approx_local_align_prefers_most_similar_position():
    assert approx_local_align(TEXT, "nino", 0, 120, 3, 0.8) == 3


def test_approx_local_align_fails_when_gate_rejects_everything():
    assert approx_local_align(TEXT, "nino", 0, 120, 0, 1.0) is None
    assert approx_local_align("abcdefgh", "zzzzzzzzzz", 0, 120, 3, 0.8) is None


def test_locate_short_circuits_in_strategy_order():
    assert locate(TEXT, "niño", 3) == Location(start=3, method="as-is")
    assert locate(TEXT, "niño", 0) == Location(start=3, method="window")
    assert locate(REPEATED, "la", 5, cursor=1) == Location(start=10, method="forward")
    assert locate(TEXT, "nino", 0) == Location(start=3, method="approx")


def test_locate_returns_none_when_all_strategies_fail():
    assert locate(TEXT, "computadora portátil", 0) is None


def test_locate_uses_configured_window():
    config = AlignerConfig(window=2)
    # Outside the narrow window, the forward scan from the cursor finds it instead.
    assert locate(TEXT, "tienda", 0, config=config) == Location(18, "forward")
