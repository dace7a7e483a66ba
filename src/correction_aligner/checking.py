from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Mapping, Union

logger = logging.getLogger(__name__)

RawResponse = Union[str, Mapping[str, Any]]

PROMPT_TEMPLATE = """
You are a Spanish grammar and spelling checker.

GOAL
- Analyze the NFC-normalized (with LF line endings) Spanish text between triple bars.
- Produce THREE layers: (1) CORRECTION, (2) EXPLANATION in ENGLISH, (3) FLUENCY.

RESPONSE FORMAT (IMPORTANT)
- Return ONLY a strict JSON object that conforms exactly to:
  version:"1.0"; language:"es"; normalized:boolean; corrected_text:string;
  corrections:[{{start,end,original,suggestion,type,explanation_en,confidence}}];
  fluency:{{alternatives:[{{suggestion,register,explanation_en,confidence}}]}};
  meta: optional object.
- Indices are 0-based; end is exclusive; indices MUST refer to the NFC+LF-normalized input.
- Indices MUST be measured in UTF-16 code units.
- Corrections MUST NOT overlap. corrected_text applies ALL corrections (no fluency).
- Prefer localized, atomic corrections; avoid grouping distant edits in a single correction.

GUIDELINES
- Keep the user's meaning; only fix actual errors in CORRECTION.
- Types: spelling, grammar, punctuation, agreement, accent, diacritic, other.
- Explanations: brief, rule-based, in English.
- Fluency alternatives may be empty if already natural.

INPUT (NFC+LF):
|||{text}|||

OUTPUT: JSON ONLY (no markdown or prose).
"""


def build_prompt(canonical_text: str) -> str:
    """Render the checking prompt for already-canonicalized text."""
    return PROMPT_TEMPLATE.format(text=canonical_text).strip()


class Checker(ABC):
    """Interface for the text-generation collaborator that proposes corrections."""

    @abstractmethod
    def check(self, canonical_text: str) -> RawResponse:
        """Return the raw model response (JSON text or decoded mapping)."""
        raise NotImplementedError


class StaticChecker(Checker):
    """Returns a fixed response regardless of the input text."""

    def __init__(self, response: RawResponse) -> None:
        self._response = response

    def check(self, canonical_text: str) -> RawResponse:
        return self._response


class CallableChecker(Checker):
    """Adapt an arbitrary callable into the Checker interface.

    The callable receives the rendered prompt, which already embeds the
    canonical text.
    """

    def __init__(self, func: Callable[[str], RawResponse]) -> None:
        self._func = func

    def check(self, canonical_text: str) -> RawResponse:
        prompt = build_prompt(canonical_text)
        logger.info("Requesting corrections for %s characters", len(canonical_text))
        return self._func(prompt)
