from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Mapping, MutableMapping

import yaml

OFFSET_UNITS = ("utf16", "codepoint")


@dataclass(slots=True)
class AlignerConfig:
    """Tuning knobs for re-indexing, splitting and input limits."""

    window: int = 60
    approx_window: int = 120
    lev_cutoff: int = 3
    sim_threshold: float = 0.8
    oversized_chars: int = 48
    oversized_words: int = 6
    adopt_approximate_original: bool = False
    max_input_chars: int = 3000
    offset_units: str = "utf16"

    def __post_init__(self) -> None:
        if self.offset_units not in OFFSET_UNITS:
            raise ValueError(
                f"offset_units must be one of {', '.join(OFFSET_UNITS)}; "
                f"got {self.offset_units!r}."
            )

    def to_dict(self) -> dict[str, Any]:
        """Return a mutable dictionary representation of the configuration."""
        return dict(asdict(self))


def _build_kwargs(data: Mapping[str, Any]) -> dict[str, Any]:
    allowed = {field.name for field in fields(AlignerConfig)}
    return {key: data[key] for key in data if key in allowed}


def config_from_dict(data: Mapping[str, Any] | None) -> AlignerConfig:
    """Build an AlignerConfig from a dictionary-like input."""
    if data is None:
        return AlignerConfig()
    return AlignerConfig(**_build_kwargs(data))


def config_from_yaml(path: str | Path) -> AlignerConfig:
    """Load configuration from a YAML file."""
    contents = Path(path).read_text(encoding="utf-8")
    parsed = yaml.safe_load(contents) or {}
    if not isinstance(parsed, MutableMapping):
        raise ValueError("Configuration YAML must define a mapping.")
    return config_from_dict(parsed)


def load_config(path: str | Path | None = None) -> AlignerConfig:
    """Load configuration from YAML when provided, otherwise return defaults."""
    if path is None:
        return AlignerConfig()
    return config_from_yaml(path)
