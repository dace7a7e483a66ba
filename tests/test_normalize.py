from correction_aligner.normalize import (
    differs_from_nfc,
    normalize_canonical,
    normalize_spaces,
    to_nfc,
    unify_eol,
)

DECOMPOSED_NINO = "niño"


def test_unify_eol_converts_crlf_and_cr():
    assert unify_eol("uno\r\ndos\rtres\n") == "uno\ndos\ntres\n"
    assert unify_eol(None) == ""


def test_normalize_spaces_replaces_nbsp_and_tabs():
    assert normalize_spaces("a b\tc") == "a b c"


def test_to_nfc_composes_accents():
    assert differs_from_nfc(DECOMPOSED_NINO)
    assert to_nfc(DECOMPOSED_NINO) == "niño"
    assert not differs_from_nfc("niño")


def test_normalize_canonical_applies_every_step():
    raw = f"El {DECOMPOSED_NINO}\r\npaso\ta la tienda."
    assert normalize_canonical(raw) == "El niño\npaso a la tienda."


def test_normalize_canonical_is_idempotent():
    text = normalize_canonical("Qué\r\n\tpasa")
    assert text == "Qué\n pasa"
    assert normalize_canonical(text) == text
