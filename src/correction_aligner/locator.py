"""
Relocate an untrusted substring inside canonical text.

Strategies are tried in order and the first hit wins:

1. ``as-is``   - the needle already sits at the hinted offset.
2. ``window``  - exactly one occurrence inside ``hint ± window``.
3. ``forward`` - first occurrence at or after the resolver cursor.
4. ``approx``  - best Levenshtein similarity inside ``hint ± approx_window``.

Ambiguity is never guessed: the window strategy fails when more than one
occurrence is found, leaving the decision to the later strategies.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Tuple

from rapidfuzz.distance import Levenshtein

from .config import AlignerConfig

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Location:
    start: int
    method: str


@dataclass(slots=True, frozen=True)
class SearchRequest:
    """Inputs shared by every locator strategy."""

    text: str
    needle: str
    hint_start: int
    cursor: int
    config: AlignerConfig


Strategy = Callable[[SearchRequest], "int | None"]


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def exact_at_hint(text: str, needle: str, hint_start: int) -> int | None:
    start = clamp(hint_start, 0, len(text))
    if text[start : start + len(needle)] == needle:
        return start
    return None


def find_unique_in_window(
    text: str, needle: str, hint_start: int, window: int
) -> int | None:
    """Return the only occurrence of needle within ``hint ± window``, if unique."""
    if not needle:
        return None
    low = clamp(hint_start - window, 0, len(text))
    high = clamp(hint_start + window, 0, len(text))
    region = text[low:high]
    found = region.find(needle)
    if found < 0:
        return None
    if region.find(needle, found + 1) >= 0:
        return None
    return low + found


def forward_greedy(text: str, needle: str, cursor: int) -> int | None:
    found = text.find(needle, clamp(cursor, 0, len(text)))
    return found if found >= 0 else None


def approx_local_align(
    text: str,
    needle: str,
    hint_start: int,
    window: int,
    lev_cutoff: int,
    sim_threshold: float,
) -> int | None:
    """Slide a needle-sized window near the hint and keep the most similar position.

    A position qualifies when its edit distance is within ``lev_cutoff`` or its
    similarity reaches ``sim_threshold``. Ties keep the leftmost position.
    """
    if not needle:
        return None
    size = len(needle)
    low = clamp(hint_start - window, 0, len(text))
    high = clamp(hint_start + window, 0, len(text))
    best_idx: int | None = None
    best_score = float("-inf")
    for idx in range(low, max(low, min(high, len(text) - size)) + 1):
        candidate = text[idx : idx + size]
        distance = Levenshtein.distance(needle, candidate)
        score = 1.0 - distance / max(size, len(candidate))
        if distance <= lev_cutoff or score >= sim_threshold:
            if score > best_score:
                best_score = score
                best_idx = idx
    return best_idx


def _as_is(request: SearchRequest) -> int | None:
    return exact_at_hint(request.text, request.needle, request.hint_start)


def _window(request: SearchRequest) -> int | None:
    return find_unique_in_window(
        request.text, request.needle, request.hint_start, request.config.window
    )


def _forward(request: SearchRequest) -> int | None:
    return forward_greedy(request.text, request.needle, request.cursor)


def _approx(request: SearchRequest) -> int | None:
    config = request.config
    return approx_local_align(
        request.text,
        request.needle,
        request.hint_start,
        config.approx_window,
        config.lev_cutoff,
        config.sim_threshold,
    )


STRATEGIES: Tuple[Tuple[str, Strategy], ...] = (
    ("as-is", _as_is),
    ("window", _window),
    ("forward", _forward),
    ("approx", _approx),
)


def locate(
    text: str,
    needle: str,
    hint_start: int,
    *,
    cursor: int = 0,
    config: AlignerConfig | None = None,
) -> Location | None:
    """Run the strategy chain and return the first successful location."""
    request = SearchRequest(
        text=text,
        needle=needle,
        hint_start=hint_start,
        cursor=cursor,
        config=config or AlignerConfig(),
    )
    for method, strategy in STRATEGIES:
        found = strategy(request)
        if found is not None:
            return Location(start=found, method=method)
    logger.debug("Unable to locate %r near offset %s", needle, hint_start)
    return None
