"""
Boundary conversion of untyped model output into typed values.

Everything the model returns is treated as untrusted JSON until it passes
through this module. Shape problems raise ``PayloadError``; offset problems
are left to the resolver, which is designed to repair them.
"""

from __future__ import annotations

import json
import re
from typing import Any, Iterable, List, Mapping, Sequence

from .models import CATEGORIES, CheckResponse, Edit, FluencyAlternative

SCHEMA_VERSION = "1.0"
LANGUAGE = "es"
REGISTERS = ("neutral", "formal", "informal")
FENCED_JSON_RE = re.compile(r"```json\n(.*?)\n```", re.DOTALL)


class PayloadError(ValueError):
    """Raised when a model response does not match the expected shape."""


class SpanValidationError(ValueError):
    """Raised when cleaned edits violate bounds or ordering."""


def extract_first_json(raw: str) -> Any:
    """Return the first balanced JSON object in raw model output."""
    fenced = FENCED_JSON_RE.search(raw)
    if fenced:
        raw = fenced.group(1)
    first = raw.find("{")
    if first < 0:
        raise PayloadError("No JSON object found in model output.")
    depth = 0
    in_string = escaped = False
    for idx in range(first, len(raw)):
        char = raw[idx]
        if in_string:
            # Braces inside string literals do not count toward nesting.
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
        if depth == 0:
            try:
                return json.loads(raw[first : idx + 1])
            except json.JSONDecodeError as exc:
                raise PayloadError(f"Model output is not valid JSON: {exc}") from exc
    raise PayloadError("Unbalanced JSON object in model output.")


def _require(data: Mapping[str, Any], key: str, where: str) -> Any:
    if key not in data:
        raise PayloadError(f"{where}: missing required field '{key}'.")
    return data[key]


def _require_str(data: Mapping[str, Any], key: str, where: str) -> str:
    value = _require(data, key, where)
    if not isinstance(value, str):
        raise PayloadError(f"{where}: field '{key}' must be a string.")
    return value


def _require_offset(data: Mapping[str, Any], key: str, where: str) -> int:
    value = _require(data, key, where)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise PayloadError(f"{where}: field '{key}' must be a non-negative integer.")
    return value


def _require_confidence(data: Mapping[str, Any], where: str) -> float:
    value = _require(data, "confidence", where)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PayloadError(f"{where}: field 'confidence' must be a number.")
    if not 0 <= value <= 1:
        raise PayloadError(f"{where}: field 'confidence' must be within [0, 1].")
    return float(value)


def _require_choice(
    data: Mapping[str, Any], key: str, choices: Sequence[str], where: str
) -> str:
    value = _require_str(data, key, where)
    if value not in choices:
        raise PayloadError(
            f"{where}: field '{key}' must be one of {', '.join(choices)}; got {value!r}."
        )
    return value


def edit_from_mapping(data: Any, index: int = 0) -> Edit:
    """Validate one correction record and convert it into an Edit."""
    where = f"corrections[{index}]"
    if not isinstance(data, Mapping):
        raise PayloadError(f"{where}: expected an object.")
    return Edit(
        start=_require_offset(data, "start", where),
        end=_require_offset(data, "end", where),
        original=_require_str(data, "original", where),
        suggestion=_require_str(data, "suggestion", where),
        category=_require_choice(data, "type", CATEGORIES, where),
        explanation=_require_str(data, "explanation_en", where),
        confidence=_require_confidence(data, where),
    )


def edits_from_payload(items: Any) -> List[Edit]:
    if not isinstance(items, list):
        raise PayloadError("corrections: expected a list.")
    return [edit_from_mapping(item, index) for index, item in enumerate(items)]


def _fluency_from_mapping(data: Any) -> List[FluencyAlternative]:
    if not isinstance(data, Mapping):
        raise PayloadError("fluency: expected an object.")
    alternatives = _require(data, "alternatives", "fluency")
    if not isinstance(alternatives, list):
        raise PayloadError("fluency: field 'alternatives' must be a list.")
    parsed: List[FluencyAlternative] = []
    for index, item in enumerate(alternatives):
        where = f"fluency.alternatives[{index}]"
        if not isinstance(item, Mapping):
            raise PayloadError(f"{where}: expected an object.")
        parsed.append(
            FluencyAlternative(
                suggestion=_require_str(item, "suggestion", where),
                register=_require_choice(item, "register", REGISTERS, where),
                explanation=_require_str(item, "explanation_en", where),
                confidence=_require_confidence(item, where),
            )
        )
    return parsed


def parse_check_response(data: Any) -> CheckResponse:
    """Validate a decoded model response and convert it into a CheckResponse."""
    where = "response"
    if not isinstance(data, Mapping):
        raise PayloadError(f"{where}: expected a JSON object.")
    version = _require_choice(data, "version", (SCHEMA_VERSION,), where)
    language = _require_choice(data, "language", (LANGUAGE,), where)
    normalized = _require(data, "normalized", where)
    if not isinstance(normalized, bool):
        raise PayloadError(f"{where}: field 'normalized' must be a boolean.")
    meta = data.get("meta", {})
    if not isinstance(meta, Mapping):
        raise PayloadError(f"{where}: field 'meta' must be an object.")
    return CheckResponse(
        version=version,
        language=language,
        normalized=normalized,
        corrected_text=_require_str(data, "corrected_text", where),
        edits=edits_from_payload(_require(data, "corrections", where)),
        fluency=_fluency_from_mapping(_require(data, "fluency", where)),
        meta=dict(meta),
    )


def assert_spans(edits: Iterable[Edit], text_length: int) -> None:
    """Raise SpanValidationError unless spans are in bounds and non-overlapping."""
    previous_end: int | None = None
    for edit in sorted(edits, key=lambda item: item.start):
        if not (0 <= edit.start <= edit.end <= text_length):
            raise SpanValidationError(
                f"Invalid span bounds {edit.start}-{edit.end} for text of length {text_length}."
            )
        if previous_end is not None and edit.start < previous_end:
            raise SpanValidationError(
                f"Span {edit.start}-{edit.end} overlaps the previous span ending at {previous_end}."
            )
        previous_end = edit.end
