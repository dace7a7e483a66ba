from __future__ import annotations

import logging
from dataclasses import replace
from typing import List

from .checking import Checker, RawResponse
from .config import AlignerConfig
from .highlighter import build_diff_highlights
from .models import (
    CheckResult,
    Edit,
    HighlightResult,
    ResolutionResult,
    ResolutionRow,
)
from .normalize import normalize_canonical
from .offsets import Utf16OffsetMapper
from .payload import (
    PayloadError,
    assert_spans,
    extract_first_json,
    parse_check_response,
)
from .resolver import resolve_edits

logger = logging.getLogger(__name__)


class InputError(ValueError):
    """Raised when the text submitted for checking is empty or too long."""


def canonicalize_input(text: str, config: AlignerConfig) -> str:
    """Validate raw user input and return its canonical form."""
    if not text or not text.strip():
        raise InputError("Missing text to check.")
    length = (
        Utf16OffsetMapper(text).utf16_length
        if config.offset_units == "utf16"
        else len(text)
    )
    if length > config.max_input_chars:
        raise InputError(f"Input too long (max {config.max_input_chars} chars).")
    return normalize_canonical(text)


def process_check_response(
    input_text: str,
    response: RawResponse,
    config: AlignerConfig | None = None,
) -> CheckResult:
    """Clean a model response for ``input_text``: re-anchor edits and build highlights."""
    config = config or AlignerConfig()
    canonical = canonicalize_input(input_text, config)
    data = extract_first_json(response) if isinstance(response, str) else response
    parsed = parse_check_response(data)
    if parsed.normalized is not True:
        raise PayloadError("Model must set normalized=true for canonical indices.")
    parsed.corrected_text = normalize_canonical(parsed.corrected_text)

    mapper = Utf16OffsetMapper(canonical)
    resolution = resolve_in_units(canonical, parsed.edits, config, mapper=mapper)
    # Attachment matches on original strings only, so offset units do not matter here.
    highlights = build_diff_highlights(
        canonical, parsed.corrected_text, resolution.edits
    )
    if config.offset_units == "utf16":
        after_mapper = Utf16OffsetMapper(parsed.corrected_text)
        if not (mapper.is_identity and after_mapper.is_identity):
            _highlights_to_utf16(highlights, mapper, after_mapper)
    logger.info(
        "Checked %s chars: %s correction(s) kept, %s highlight span(s)",
        len(canonical),
        len(resolution.edits),
        len(highlights.spans),
    )

    meta = dict(parsed.meta)
    meta.update(
        {
            "canonical_text": canonical,
            "canonical_length": (
                mapper.utf16_length
                if config.offset_units == "utf16"
                else len(canonical)
            ),
            "normalization": "NFC",
            "eol_policy": "LF",
            "metrics": resolution.metrics.to_dict(),
        }
    )
    return CheckResult(
        canonical_text=canonical,
        response=parsed,
        resolution=resolution,
        highlights=highlights,
        meta=meta,
    )


def resolve_in_units(
    canonical: str,
    edits: List[Edit],
    config: AlignerConfig,
    *,
    mapper: Utf16OffsetMapper | None = None,
) -> ResolutionResult:
    """Resolve edits whose offsets use ``config.offset_units`` and validate the result.

    Returned edits use the same units as the input.
    """
    mapper = mapper or Utf16OffsetMapper(canonical)
    convert = config.offset_units == "utf16" and not mapper.is_identity
    if convert:
        edits = _edits_to_code_points(edits, mapper)
    resolution = resolve_edits(canonical, edits, config)
    assert_spans(resolution.edits, len(canonical))
    if convert:
        resolution.edits = _edits_to_utf16(resolution.edits, mapper)
        _rows_to_utf16(resolution.rows, mapper)
    return resolution


def run_check(
    input_text: str, checker: Checker, config: AlignerConfig | None = None
) -> CheckResult:
    """Canonicalize input, ask the checker for corrections and clean the response."""
    config = config or AlignerConfig()
    canonical = canonicalize_input(input_text, config)
    raw = checker.check(canonical)
    return process_check_response(input_text, raw, config)


def _edits_to_code_points(edits: List[Edit], mapper: Utf16OffsetMapper) -> List[Edit]:
    return [
        replace(
            edit,
            start=mapper.to_code_point(edit.start),
            end=mapper.to_code_point(edit.end),
        )
        for edit in edits
    ]


def _edits_to_utf16(edits: List[Edit], mapper: Utf16OffsetMapper) -> List[Edit]:
    return [
        replace(edit, start=mapper.to_utf16(edit.start), end=mapper.to_utf16(edit.end))
        for edit in edits
    ]


def _rows_to_utf16(rows: List[ResolutionRow], mapper: Utf16OffsetMapper) -> None:
    for row in rows:
        row.start = mapper.to_utf16(row.start)
        row.end = mapper.to_utf16(row.end)


def _highlights_to_utf16(
    highlights: HighlightResult,
    before: Utf16OffsetMapper,
    after: Utf16OffsetMapper,
) -> None:
    for span in highlights.spans:
        span.start = before.to_utf16(span.start)
        span.end = before.to_utf16(span.end)
    for hunk in highlights.hunks:
        hunk.a_start_offset = before.to_utf16(hunk.a_start_offset)
        hunk.a_end_offset = before.to_utf16(hunk.a_end_offset)
        hunk.b_start_offset = after.to_utf16(hunk.b_start_offset)
        hunk.b_end_offset = after.to_utf16(hunk.b_end_offset)
