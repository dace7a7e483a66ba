from __future__ import annotations

import re
import unicodedata

EOL_RE = re.compile(r"\r\n?")


def unify_eol(text: str) -> str:
    """Convert Windows and classic Mac line endings to LF."""
    return EOL_RE.sub("\n", text or "")


def normalize_spaces(text: str) -> str:
    """Replace NBSP and tabs with a regular space."""
    return (text or "").replace("\u00a0", " ").replace("\t", " ")


def to_nfc(text: str) -> str:
    return unicodedata.normalize("NFC", text or "")


def differs_from_nfc(text: str) -> bool:
    return (text or "") != to_nfc(text)


def normalize_canonical(text: str) -> str:
    """Produce the canonical text that every offset is measured against.

    Order matters: line endings first, then spaces, then NFC composition.
    """
    return to_nfc(normalize_spaces(unify_eol(text)))
