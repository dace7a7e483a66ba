from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List

import typer
import yaml

from .config import AlignerConfig, load_config
from .highlighter import build_diff_highlights
from .models import Edit, ResolutionResult
from .normalize import normalize_canonical
from .payload import (
    PayloadError,
    SpanValidationError,
    edits_from_payload,
    extract_first_json,
)
from .pipeline import InputError, process_check_response, resolve_in_units

app = typer.Typer(help="Correction Aligner CLI.", no_args_is_help=True)


@app.callback()
def configure(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log per-edit resolution details to stderr."
    ),
) -> None:
    """Re-anchor model corrections and build diff highlights."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def resolve(
    text_path: Path = typer.Option(..., exists=True, readable=True, dir_okay=False),
    edits_path: Path = typer.Option(..., exists=True, readable=True, dir_okay=False),
    config: Path | None = typer.Option(None, "--config", "-c"),
    window: int | None = typer.Option(None, help="± window for unique local search."),
    approx_window: int | None = typer.Option(
        None, help="± window for approximate alignment."
    ),
    oversized_chars: int | None = typer.Option(
        None, help="Split edits whose original exceeds this many characters."
    ),
    oversized_words: int | None = typer.Option(
        None, help="Split edits whose original exceeds this many words."
    ),
) -> None:
    """Re-anchor untrusted edits onto the text and emit cleaned edits as JSON."""
    cfg = load_config(config)
    _apply_overrides(cfg, window, approx_window, oversized_chars, oversized_words)
    canonical = normalize_canonical(text_path.read_text(encoding="utf-8"))
    edits = _load_edits(edits_path)
    try:
        result = resolve_in_units(canonical, edits, cfg)
    except SpanValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(json.dumps(_resolution_dict(result), indent=2, ensure_ascii=False))


@app.command()
def highlight(
    before_path: Path = typer.Option(..., exists=True, readable=True, dir_okay=False),
    after_path: Path = typer.Option(..., exists=True, readable=True, dir_okay=False),
    edits_path: Path | None = typer.Option(
        None, exists=True, readable=True, dir_okay=False
    ),
) -> None:
    """Diff the original text against a corrected text and emit highlight spans."""
    before = normalize_canonical(before_path.read_text(encoding="utf-8"))
    after = normalize_canonical(after_path.read_text(encoding="utf-8"))
    edits = _load_edits(edits_path) if edits_path else []
    result = build_diff_highlights(before, after, edits)
    typer.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))


@app.command()
def check(
    text_path: Path = typer.Option(..., exists=True, readable=True, dir_okay=False),
    response_path: Path = typer.Option(
        ..., exists=True, readable=True, dir_okay=False
    ),
    config: Path | None = typer.Option(None, "--config", "-c"),
) -> None:
    """Clean a saved model response for the given text and emit the final JSON."""
    cfg = load_config(config)
    text = text_path.read_text(encoding="utf-8")
    raw = response_path.read_text(encoding="utf-8")
    try:
        result = process_check_response(text, raw, cfg)
    except (InputError, PayloadError, SpanValidationError) as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))


@app.command("print-config")
def print_config() -> None:
    """Print the default configuration as YAML."""
    cfg = AlignerConfig()
    typer.echo(yaml.safe_dump(cfg.to_dict(), sort_keys=False))


def main() -> None:
    app()


def _apply_overrides(
    config: AlignerConfig,
    window: int | None,
    approx_window: int | None,
    oversized_chars: int | None,
    oversized_words: int | None,
) -> None:
    """Apply CLI overrides to config fields when provided."""
    if window is not None:
        config.window = window
    if approx_window is not None:
        config.approx_window = approx_window
    if oversized_chars is not None:
        config.oversized_chars = oversized_chars
    if oversized_words is not None:
        config.oversized_words = oversized_words


def _load_edits(path: Path) -> List[Edit]:
    """Read correction records from a JSON list, an object, or raw model output."""
    raw = path.read_text(encoding="utf-8")
    try:
        data: Any = json.loads(raw)
    except json.JSONDecodeError:
        data = None
    try:
        if data is None:
            data = extract_first_json(raw)
        if isinstance(data, dict):
            data = data.get("corrections", [])
        return edits_from_payload(data)
    except PayloadError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _resolution_dict(result: ResolutionResult) -> dict[str, Any]:
    return {
        "corrections": [edit.to_dict() for edit in result.edits],
        "metrics": result.metrics.to_dict(),
        "rows": [
            {
                "index": row.index,
                "start": row.start,
                "end": row.end,
                "original": row.original,
                "substring": row.substring,
                "status": row.status,
            }
            for row in result.rows
        ],
    }


if __name__ == "__main__":
    main()
