from __future__ import annotations

import re
from typing import List, Tuple

from .models import Token

# Letter runs, digit runs, whitespace runs, then any single remaining character.
# ``[^\W\d_]`` is the stdlib spelling of "Unicode letter".
TOKEN_PATTERN = re.compile(r"[^\W\d_]+|\d+|\s+|\S", re.UNICODE)


def tokenize(text: str) -> List[Token]:
    """Split text into typed runs whose concatenation reconstructs ``text``."""
    tokens: List[Token] = []
    for match in TOKEN_PATTERN.finditer(text):
        tokens.append(
            Token(text=match.group(), start_char=match.start(), end_char=match.end())
        )
    return tokens


def token_texts(tokens: List[Token]) -> List[str]:
    return [token.text for token in tokens]


def word_count(text: str) -> int:
    """Count whitespace-delimited words in the trimmed text."""
    return len(text.split())


def token_char_range(
    tokens: List[Token], start_idx: int, end_idx: int
) -> Tuple[int, int]:
    """Map a token index range to character offsets; empty ranges collapse to a point."""
    if start_idx >= end_idx:
        if start_idx < len(tokens):
            point = tokens[start_idx].start_char
        else:
            point = tokens[-1].end_char if tokens else 0
        return point, point
    return tokens[start_idx].start_char, tokens[end_idx - 1].end_char
