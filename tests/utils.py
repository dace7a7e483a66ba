from __future__ import annotations

from typing import Any

from correction_aligner.models import Edit


def make_edit(
    start: int,
    end: int,
    original: str,
    suggestion: str | None = None,
    category: str = "spelling",
) -> Edit:
    """Build an Edit with filler metadata for tests."""
    return Edit(
        start=start,
        end=end,
        original=original,
        suggestion=original if suggestion is None else suggestion,
        category=category,
        explanation="test",
        confidence=0.9,
    )


def sample_response(
    corrected_text: str, corrections: list[dict[str, Any]] | None = None
) -> dict[str, Any]:
    """Create a minimal model response that passes payload validation."""
    return {
        "version": "1.0",
        "language": "es",
        "normalized": True,
        "corrected_text": corrected_text,
        "corrections": corrections or [],
        "fluency": {"alternatives": []},
    }


def correction(
    start: int,
    end: int,
    original: str,
    suggestion: str,
    type_: str = "spelling",
) -> dict[str, Any]:
    return {
        "start": start,
        "end": end,
        "original": original,
        "suggestion": suggestion,
        "type": type_,
        "explanation_en": "test",
        "confidence": 0.9,
    }
