"""
correction_aligner package exports convenience helpers for library consumers.
"""

from __future__ import annotations

from .config import AlignerConfig, config_from_dict, config_from_yaml, load_config
from .highlighter import build_diff_highlights, diff_tokens_to_hunks
from .lcs import lcs_token_matches
from .locator import locate
from .models import Edit, HighlightResult, ResolutionResult
from .pipeline import process_check_response, run_check
from .resolver import resolve_edits
from .splitter import split_oversized
from .tokenization import tokenize

__all__ = [
    "AlignerConfig",
    "config_from_dict",
    "config_from_yaml",
    "load_config",
    "Edit",
    "HighlightResult",
    "ResolutionResult",
    "tokenize",
    "lcs_token_matches",
    "locate",
    "split_oversized",
    "resolve_edits",
    "build_diff_highlights",
    "diff_tokens_to_hunks",
    "process_check_response",
    "run_check",
]

__version__ = "0.1.0"
