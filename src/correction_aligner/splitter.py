from __future__ import annotations

import logging
from dataclasses import replace
from typing import List

from .config import AlignerConfig
from .lcs import lcs_token_matches
from .models import Edit, Token
from .tokenization import token_char_range, token_texts, tokenize, word_count

logger = logging.getLogger(__name__)


def is_oversized(edit: Edit, config: AlignerConfig) -> bool:
    """Return True when the edit's original text exceeds either size threshold."""
    return (
        len(edit.original) > config.oversized_chars
        or word_count(edit.original) > config.oversized_words
    )


def split_oversized(edit: Edit, config: AlignerConfig | None = None) -> List[Edit]:
    """Break an oversized edit into one sub-edit per token-level change."""
    config = config or AlignerConfig()
    if not is_oversized(edit, config):
        return [edit]

    tokens_a = tokenize(edit.original)
    tokens_b = tokenize(edit.suggestion)
    matches = lcs_token_matches(token_texts(tokens_a), token_texts(tokens_b))

    pieces: List[Edit] = []
    a_pos = b_pos = 0
    for match_a, match_b in matches:
        if match_a > a_pos or match_b > b_pos:
            piece = _gap_edit(edit, tokens_a, tokens_b, a_pos, match_a, b_pos, match_b)
            if piece is not None:
                pieces.append(piece)
        a_pos, b_pos = match_a + 1, match_b + 1
    tail = _gap_edit(edit, tokens_a, tokens_b, a_pos, len(tokens_a), b_pos, len(tokens_b))
    if tail is not None:
        pieces.append(tail)

    if not pieces or sum(piece.length for piece in pieces) == 0:
        logger.debug(
            "Oversized edit at %s-%s produced no usable split; keeping it whole.",
            edit.start,
            edit.end,
        )
        return [edit]
    return pieces


def _gap_edit(
    parent: Edit,
    tokens_a: List[Token],
    tokens_b: List[Token],
    a_start: int,
    a_end: int,
    b_start: int,
    b_end: int,
) -> Edit | None:
    if a_start >= a_end and b_start >= b_end:
        return None
    start_off, end_off = token_char_range(tokens_a, a_start, a_end)
    original = parent.original[start_off:end_off]
    suggestion = "".join(token.text for token in tokens_b[b_start:b_end])
    if not original and not suggestion:
        return None
    return replace(
        parent,
        start=parent.start + start_off,
        end=parent.start + end_off,
        original=original,
        suggestion=suggestion,
    )
