from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import List, Sequence, Tuple

from .config import AlignerConfig
from .locator import clamp, forward_greedy, locate
from .models import AlignmentMetrics, Edit, ResolutionResult, ResolutionRow
from .splitter import split_oversized

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Accumulator:
    """State carried across the fold over hint-sorted edits."""

    cursor: int = 0
    placed: List[Tuple[int, Edit]] = field(default_factory=list)
    rows: List[ResolutionRow] = field(default_factory=list)
    reindexed: int = 0
    skipped: int = 0
    total_delta: int = 0
    oversized_splits: int = 0

    def skip(self, index: int, edit: Edit, substring: str, status: str) -> None:
        self.skipped += 1
        self.rows.append(
            ResolutionRow(
                index=index,
                start=edit.start,
                end=edit.end,
                original=edit.original,
                substring=substring,
                status=status,
            )
        )


def resolve_edits(
    canonical: str,
    edits: Sequence[Edit],
    config: AlignerConfig | None = None,
) -> ResolutionResult:
    """Re-anchor untrusted edits onto canonical text.

    Every returned edit satisfies ``canonical[start:end] == original``; the list
    is sorted by start and free of overlaps. Edits that cannot be placed are
    dropped and reported through ``rows`` and ``metrics`` instead of raising.
    """
    config = config or AlignerConfig()
    acc = _Accumulator()
    ordered = sorted(enumerate(edits), key=lambda item: item[1].start)
    for index, edit in ordered:
        _place_edit(canonical, index, edit, acc, config)

    cleaned = _enforce_non_overlap(canonical, acc)
    metrics = AlignmentMetrics(
        total=len(edits),
        reindexed_count=acc.reindexed,
        skipped_count=acc.skipped,
        oversized_splits_count=acc.oversized_splits,
        avg_reindex_distance=(
            round(acc.total_delta / acc.reindexed, 2) if acc.reindexed else 0.0
        ),
    )
    for row in acc.rows:
        logger.debug(
            "edit=%s start=%s end=%s original=%r substring=%r status=%s",
            row.index,
            row.start,
            row.end,
            row.original,
            row.substring,
            row.status,
        )
    logger.info(
        "Resolved %s/%s edits (reindexed=%s skipped=%s splits=%s avg_distance=%.2f)",
        len(cleaned),
        metrics.total,
        metrics.reindexed_count,
        metrics.skipped_count,
        metrics.oversized_splits_count,
        metrics.avg_reindex_distance,
    )
    return ResolutionResult(edits=cleaned, metrics=metrics, rows=acc.rows)


def _place_edit(
    canonical: str,
    index: int,
    edit: Edit,
    acc: _Accumulator,
    config: AlignerConfig,
) -> None:
    length = len(canonical)
    hint_start = clamp(edit.start, 0, length)
    hint_end = clamp(edit.end, hint_start, length)
    hint_substring = canonical[hint_start:hint_end]
    want = edit.original

    location = locate(canonical, want, hint_start, cursor=acc.cursor, config=config)
    if location is None:
        acc.skip(index, edit, hint_substring, "skipped")
        return
    new_start, method = location.start, location.method

    # Never place before the cursor: that region belongs to accepted edits.
    if new_start < acc.cursor:
        moved = forward_greedy(canonical, want, acc.cursor)
        if moved is None:
            acc.skip(index, edit, hint_substring, "skipped_overlap")
            return
        new_start, method = moved, method + "+adj"

    if method == "approx" and config.adopt_approximate_original:
        want = canonical[new_start : new_start + len(want)]
    new_end = new_start + len(want)
    if canonical[new_start:new_end] != want:
        acc.skip(index, edit, hint_substring, "mismatch_after_reindex")
        return

    if new_start != hint_start:
        acc.reindexed += 1
        acc.total_delta += abs(new_start - hint_start)

    placed = replace(edit, start=new_start, end=new_end, original=want)
    pieces = split_oversized(placed, config)
    if len(pieces) > 1:
        acc.oversized_splits += len(pieces) - 1
        method += "+split"
    for piece in pieces:
        acc.placed.append((index, piece))
        acc.rows.append(
            ResolutionRow(
                index=index,
                start=piece.start,
                end=piece.end,
                original=piece.original,
                substring=canonical[piece.start : piece.end],
                status=method,
            )
        )
        acc.cursor = piece.end


def _enforce_non_overlap(canonical: str, acc: _Accumulator) -> List[Edit]:
    """Keep the earliest-starting edit of any overlapping pair; drop empty spans."""
    cleaned: List[Edit] = []
    last_end = 0
    for index, edit in sorted(acc.placed, key=lambda item: item[1].start):
        if edit.start < last_end:
            status = "dropped_overlap"
        elif edit.end <= edit.start:
            status = "dropped_empty"
        else:
            last_end = edit.end
            cleaned.append(edit)
            continue
        acc.rows.append(
            ResolutionRow(
                index=index,
                start=edit.start,
                end=edit.end,
                original=edit.original,
                substring=canonical[edit.start : edit.end],
                status=status,
            )
        )
    return cleaned
