"""
Token-level diff highlights between canonical text and the model's corrected text.

Hunks are derived from an LCS over tokens of both strings. Only ``remove`` and
``replace`` hunks become highlight spans, expressed in offsets of the original
text. Edits are then attached to spans purely by locating their ``original``
string inside a span; the model's own offsets are not consulted.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import List, Sequence, Tuple

from .lcs import lcs_token_matches
from .models import (
    Edit,
    HighlightDiagnostics,
    HighlightResult,
    HighlightSpan,
    Hunk,
    HunkKind,
    Token,
    UnplacedEdit,
)
from .tokenization import token_char_range, token_texts, tokenize

logger = logging.getLogger(__name__)

HIGHLIGHT_KINDS = frozenset({"remove", "replace"})
UNPLACED_SAMPLE_LIMIT = 5


def diff_tokens_to_hunks(before: str, after: str) -> List[Hunk]:
    """Build ordered hunks covering every token of both texts."""
    tokens_a = tokenize(before)
    tokens_b = tokenize(after)
    matches = lcs_token_matches(token_texts(tokens_a), token_texts(tokens_b))

    hunks: List[Hunk] = []
    a_pos = b_pos = 0
    for match_a, match_b in matches:
        _append_change(hunks, tokens_a, tokens_b, a_pos, match_a, b_pos, match_b)
        _append_hunk(
            hunks, "equal", tokens_a, tokens_b, match_a, match_a + 1, match_b, match_b + 1
        )
        a_pos, b_pos = match_a + 1, match_b + 1
    _append_change(hunks, tokens_a, tokens_b, a_pos, len(tokens_a), b_pos, len(tokens_b))
    return hunks


def _append_change(
    hunks: List[Hunk],
    tokens_a: List[Token],
    tokens_b: List[Token],
    a_start: int,
    a_end: int,
    b_start: int,
    b_end: int,
) -> None:
    a_changed = a_end > a_start
    b_changed = b_end > b_start
    if a_changed and b_changed:
        kind = "replace"
    elif a_changed:
        kind = "remove"
    elif b_changed:
        kind = "insert"
    else:
        return
    _append_hunk(hunks, kind, tokens_a, tokens_b, a_start, a_end, b_start, b_end)


def _append_hunk(
    hunks: List[Hunk],
    kind: HunkKind,
    tokens_a: List[Token],
    tokens_b: List[Token],
    a_start: int,
    a_end: int,
    b_start: int,
    b_end: int,
) -> None:
    a_start_off, a_end_off = token_char_range(tokens_a, a_start, a_end)
    b_start_off, b_end_off = token_char_range(tokens_b, b_start, b_end)
    previous = hunks[-1] if hunks else None
    if (
        kind == "equal"
        and previous is not None
        and previous.kind == "equal"
        and previous.a_end == a_start
        and previous.b_end == b_start
    ):
        previous.a_end = a_end
        previous.b_end = b_end
        previous.a_end_offset = a_end_off
        previous.b_end_offset = b_end_off
        return
    hunks.append(
        Hunk(
            kind=kind,
            a_start=a_start,
            a_end=a_end,
            b_start=b_start,
            b_end=b_end,
            a_start_offset=a_start_off,
            a_end_offset=a_end_off,
            b_start_offset=b_start_off,
            b_end_offset=b_end_off,
        )
    )


def hunks_to_spans(hunks: Sequence[Hunk]) -> List[Tuple[int, int, int]]:
    """Return ``(start, end, hunk_index)`` ranges for remove/replace hunks.

    Ranges are clipped left-to-right so none overlaps its predecessor; a range
    fully covered by the previous one is dropped.
    """
    ranges: List[Tuple[int, int, int]] = []
    last_end = 0
    for hunk_index, hunk in enumerate(hunks):
        if hunk.kind not in HIGHLIGHT_KINDS:
            continue
        start = max(0, hunk.a_start_offset)
        end = max(start, hunk.a_end_offset)
        if end <= start:
            continue
        if start < last_end:
            if end <= last_end:
                continue
            start = last_end
        ranges.append((start, end, hunk_index))
        last_end = end
    return ranges


def choose_span_category(edits: Sequence[Edit]) -> str:
    """Majority category among attached edits; the earliest attached wins ties."""
    if not edits:
        return "other"
    counts = Counter(edit.category for edit in edits)
    best = max(counts.values())
    for edit in edits:
        if counts[edit.category] == best:
            return edit.category
    return "other"


def find_occurrences(text: str, needle: str, start: int, end: int) -> List[int]:
    """Return every (possibly overlapping) index of needle fully inside [start, end)."""
    positions: List[int] = []
    if not needle:
        return positions
    pos = start
    while True:
        idx = text.find(needle, pos)
        if idx < 0 or idx + len(needle) > end:
            break
        positions.append(idx)
        pos = idx + 1
    return positions


def _overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    return max(a_start, b_start) < min(a_end, b_end)


def build_diff_highlights(
    before: str, after: str, edits: Sequence[Edit] = ()
) -> HighlightResult:
    """Diff ``before`` against ``after`` and attach edits to the highlighted spans."""
    hunks = diff_tokens_to_hunks(before, after)
    ranges = hunks_to_spans(hunks)

    edit_to_span: List[int | None] = [None] * len(edits)
    span_to_edits: List[List[int]] = [[] for _ in ranges]
    claims: List[List[Tuple[int, int]]] = [[] for _ in ranges]
    unplaced: List[UnplacedEdit] = []

    for edit_index, edit in enumerate(edits):
        needle = edit.original
        if not needle:
            unplaced.append(UnplacedEdit(edit_index, needle, "empty_original"))
            continue
        candidates: List[Tuple[int, List[int]]] = []
        for span_index, (start, end, _) in enumerate(ranges):
            positions = find_occurrences(before, needle, start, end)
            if positions:
                candidates.append((span_index, positions))
        if not candidates:
            unplaced.append(UnplacedEdit(edit_index, needle, "no_matching_hunk"))
            continue
        if len(candidates) > 1:
            unplaced.append(
                UnplacedEdit(edit_index, needle, "ambiguous_multiple_hunks")
            )
            continue
        span_index, positions = candidates[0]
        free = [
            pos
            for pos in positions
            if not any(
                _overlaps(c_start, c_end, pos, pos + len(needle))
                for c_start, c_end in claims[span_index]
            )
        ]
        if not free:
            unplaced.append(UnplacedEdit(edit_index, needle, "ambiguous_claimed"))
            continue
        if len(free) > 1:
            unplaced.append(
                UnplacedEdit(edit_index, needle, "ambiguous_multiple_positions")
            )
            continue
        claims[span_index].append((free[0], free[0] + len(needle)))
        edit_to_span[edit_index] = span_index
        span_to_edits[span_index].append(edit_index)

    spans = [
        HighlightSpan(
            start=start,
            end=end,
            category=choose_span_category([edits[i] for i in span_to_edits[span_index]]),
            source_hunk_index=hunk_index,
        )
        for span_index, (start, end, hunk_index) in enumerate(ranges)
    ]
    attached = sum(1 for value in edit_to_span if value is not None)
    diagnostics = HighlightDiagnostics(
        total_hunks=len(hunks),
        highlighted_hunks=len(ranges),
        attached_edits=attached,
        unplaced_edits=len(unplaced),
        unplaced_samples=unplaced[:UNPLACED_SAMPLE_LIMIT],
    )
    if unplaced:
        logger.debug(
            "Highlighter left %s edit(s) unplaced: %s",
            len(unplaced),
            ", ".join(f"{item.index}:{item.reason}" for item in unplaced),
        )
    return HighlightResult(
        spans=spans,
        hunks=hunks,
        edit_to_span=edit_to_span,
        span_to_edits=span_to_edits,
        unplaced=unplaced,
        diagnostics=diagnostics,
    )
