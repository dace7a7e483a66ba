from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Literal

Category = Literal[
    "spelling", "grammar", "punctuation", "agreement", "accent", "diacritic", "other"
]
CATEGORIES: tuple[str, ...] = (
    "spelling",
    "grammar",
    "punctuation",
    "agreement",
    "accent",
    "diacritic",
    "other",
)

HunkKind = Literal["equal", "remove", "insert", "replace"]


@dataclass(slots=True, frozen=True)
class Edit:
    """A proposed replacement of ``text[start:end]`` (end exclusive)."""

    start: int
    end: int
    original: str
    suggestion: str
    category: Category = "other"
    explanation: str = ""
    confidence: float = 0.0

    @property
    def length(self) -> int:
        return self.end - self.start

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation used by the model response schema."""
        return {
            "start": self.start,
            "end": self.end,
            "original": self.original,
            "suggestion": self.suggestion,
            "type": self.category,
            "explanation_en": self.explanation,
            "confidence": self.confidence,
        }


@dataclass(slots=True)
class Token:
    """Represents a token and its inclusive-exclusive character offsets."""

    text: str
    start_char: int
    end_char: int


@dataclass(slots=True)
class Hunk:
    """A contiguous region of two token sequences classified by diff kind."""

    kind: HunkKind
    a_start: int
    a_end: int
    b_start: int
    b_end: int
    a_start_offset: int
    a_end_offset: int
    b_start_offset: int
    b_end_offset: int


@dataclass(slots=True)
class HighlightSpan:
    """Character range over the original text derived from a remove/replace hunk."""

    start: int
    end: int
    category: str
    source_hunk_index: int


@dataclass(slots=True)
class AlignmentMetrics:
    total: int = 0
    reindexed_count: int = 0
    skipped_count: int = 0
    oversized_splits_count: int = 0
    avg_reindex_distance: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class ResolutionRow:
    """Per-edit diagnostic row emitted while resolving."""

    index: int
    start: int
    end: int
    original: str
    substring: str
    status: str


@dataclass(slots=True)
class ResolutionResult:
    edits: List[Edit]
    metrics: AlignmentMetrics
    rows: List[ResolutionRow] = field(default_factory=list)


@dataclass(slots=True)
class UnplacedEdit:
    """An edit the highlighter could not attach to a span."""

    index: int
    original: str
    reason: str


@dataclass(slots=True)
class HighlightDiagnostics:
    total_hunks: int
    highlighted_hunks: int
    attached_edits: int
    unplaced_edits: int
    unplaced_samples: List[UnplacedEdit] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class HighlightResult:
    """Diff highlights between two texts plus edit attachment maps."""

    spans: List[HighlightSpan]
    hunks: List[Hunk]
    edit_to_span: List[int | None]
    span_to_edits: List[List[int]]
    unplaced: List[UnplacedEdit]
    diagnostics: HighlightDiagnostics

    def to_dict(self) -> dict[str, Any]:
        return {
            "spans": [asdict(span) for span in self.spans],
            "hunks": [asdict(hunk) for hunk in self.hunks],
            "edit_to_span": list(self.edit_to_span),
            "span_to_edits": [list(ids) for ids in self.span_to_edits],
            "unplaced": [asdict(item) for item in self.unplaced],
            "diagnostics": self.diagnostics.to_dict(),
        }


@dataclass(slots=True)
class FluencyAlternative:
    suggestion: str
    register: str
    explanation: str
    confidence: float


@dataclass(slots=True)
class CheckResponse:
    """Typed view of a validated model response."""

    version: str
    language: str
    normalized: bool
    corrected_text: str
    edits: List[Edit]
    fluency: List[FluencyAlternative] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class CheckResult:
    """Cleaned response for one checked text."""

    canonical_text: str
    response: CheckResponse
    resolution: ResolutionResult
    highlights: HighlightResult
    meta: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready response with cleaned corrections and meta."""
        return {
            "version": self.response.version,
            "language": self.response.language,
            "normalized": self.response.normalized,
            "corrected_text": self.response.corrected_text,
            "corrections": [edit.to_dict() for edit in self.resolution.edits],
            "fluency": {
                "alternatives": [
                    {
                        "suggestion": alt.suggestion,
                        "register": alt.register,
                        "explanation_en": alt.explanation,
                        "confidence": alt.confidence,
                    }
                    for alt in self.response.fluency
                ]
            },
            "highlights": self.highlights.to_dict(),
            "meta": dict(self.meta),
        }
