import json

import pytest

from correction_aligner.checking import CallableChecker, StaticChecker, build_prompt
from correction_aligner.config import AlignerConfig
from correction_aligner.payload import PayloadError
from correction_aligner.pipeline import (
    InputError,
    canonicalize_input,
    process_check_response,
    resolve_in_units,
    run_check,
)
from tests.utils import correction, make_edit, sample_response

TEXT = "El niño paso a la tienda."
FIXED = "El niño pasó a la tienda."


def _accent_response(start: int = 8, end: int = 12) -> dict:
    return sample_response(FIXED, [correction(start, end, "paso", "pasó", type_="accent")])


def test_misplaced_correction_is_reanchored_and_highlighted():
    """A correction reported at the wrong offsets is moved onto its word."""
    result = process_check_response(TEXT, _accent_response(0, 4))

    assert [(e.start, e.end) for e in result.resolution.edits] == [(8, 12)]
    assert result.resolution.metrics.reindexed_count == 1
    span = result.highlights.spans[0]
    assert (span.start, span.end, span.category) == (8, 12, "accent")
    assert result.highlights.edit_to_span == [0]


def test_result_meta_describes_canonical_text():
    result = process_check_response(TEXT, _accent_response())
    meta = result.to_dict()["meta"]

    assert meta["canonical_text"] == TEXT
    assert meta["canonical_length"] == len(TEXT)
    assert meta["normalization"] == "NFC"
    assert meta["eol_policy"] == "LF"
    assert meta["metrics"]["total"] == 1


def test_raw_model_text_is_accepted():
    raw = "Claro:\n```json\n" + json.dumps(_accent_response()) + "\n```"
    result = process_check_response(TEXT, raw)

    payload = result.to_dict()
    assert payload["corrections"][0]["start"] == 8
    assert payload["corrections"][0]["type"] == "accent"
    assert payload["fluency"] == {"alternatives": []}


def test_response_must_be_normalized():
    data = _accent_response()
    data["normalized"] = False
    with pytest.raises(PayloadError):
        process_check_response(TEXT, data)


@pytest.mark.parametrize("text", ["", "   \n"])
def test_blank_input_is_rejected(text: str):
    with pytest.raises(InputError, match="Missing text"):
        process_check_response(text, _accent_response())


def test_long_input_is_rejected():
    with pytest.raises(InputError, match="max 5 chars"):
        process_check_response(TEXT, _accent_response(), AlignerConfig(max_input_chars=5))


def test_windows_line_endings_are_canonicalized():
    text = "Hola\r\nEl niño paso."
    response = sample_response(
        "Hola\nEl niño pasó.", [correction(13, 17, "paso", "pasó", type_="accent")]
    )
    result = process_check_response(text, response)

    assert result.canonical_text == "Hola\nEl niño paso."
    assert result.canonical_text[13:17] == "paso"
    assert result.resolution.rows[0].status == "as-is"


def test_utf16_offsets_are_mapped_around_astral_characters():
    """Offsets after an emoji are reported and returned in UTF-16 units."""
    text = "😀 el gato"
    response = sample_response("😀 el perro", [correction(6, 10, "gato", "perro")])
    result = process_check_response(text, response)

    assert [(e.start, e.end) for e in result.resolution.edits] == [(6, 10)]
    assert result.resolution.rows[0].status == "as-is"
    assert [(s.start, s.end) for s in result.highlights.spans] == [(6, 10)]
    assert result.meta["canonical_length"] == 10


def test_code_point_units_treat_utf16_offsets_as_misplaced():
    text = "😀 el gato"
    response = sample_response("😀 el perro", [correction(6, 10, "gato", "perro")])
    config = AlignerConfig(offset_units="codepoint")
    result = process_check_response(text, response, config)

    assert [(e.start, e.end) for e in result.resolution.edits] == [(5, 9)]
    assert result.resolution.metrics.reindexed_count == 1
    assert result.meta["canonical_length"] == 9


def test_run_check_with_static_checker():
    result = run_check(TEXT, StaticChecker(json.dumps(_accent_response())))
    assert result.response.corrected_text == FIXED
    assert len(result.resolution.edits) == 1


def test_callable_checker_receives_rendered_prompt():
    prompts = []

    def fake_model(prompt: str) -> dict:
        prompts.append(prompt)
        return _accent_response()

    result = run_check("El niño paso a la tienda.\r\n", CallableChecker(fake_model))

    assert prompts == [build_prompt(TEXT + "\n")]
    assert "|||El niño paso a la tienda.\n|||" in prompts[0]
    assert result.highlights.diagnostics.attached_edits == 1


def test_resolution_rows_use_same_units_as_edits():
    """Diagnostic rows are reported in UTF-16 units like the corrections."""
    edits = [make_edit(6, 10, "gato", "perro"), make_edit(6, 10, "sol", "luna")]
    result = resolve_in_units("😀 el gato", edits, AlignerConfig())

    assert [(e.start, e.end) for e in result.edits] == [(6, 10)]
    assert [(row.start, row.end) for row in result.rows] == [(6, 10), (6, 10)]
    assert result.rows[0].status == "as-is"
    assert result.rows[1].status != "as-is"


def test_input_limit_counts_utf16_units():
    config = AlignerConfig(max_input_chars=10)

    assert canonicalize_input("😀" * 5, config) == "😀" * 5
    with pytest.raises(InputError, match="max 10 chars"):
        canonicalize_input("😀" * 6, config)
    codepoint_config = AlignerConfig(max_input_chars=10, offset_units="codepoint")
    assert canonicalize_input("😀" * 6, codepoint_config) == "😀" * 6


def test_default_limit_rejects_astral_text_over_utf16_budget():
    with pytest.raises(InputError):
        process_check_response("😀" * 1600, sample_response("😀" * 1600))


def test_corrected_text_is_canonicalized_before_diffing():
    text = "Hola\r\nEl niño paso."
    response = sample_response(
        "Hola\r\nEl niño\tpasó.", [correction(13, 17, "paso", "pasó", type_="accent")]
    )
    result = process_check_response(text, response)

    canonical = result.canonical_text
    assert [canonical[s.start : s.end] for s in result.highlights.spans] == ["paso"]
    assert result.response.corrected_text == "Hola\nEl niño pasó."
    assert result.to_dict()["corrected_text"] == "Hola\nEl niño pasó."
