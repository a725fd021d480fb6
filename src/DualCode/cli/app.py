"""CLI application entrypoint built with Typer."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Optional

import typer
from rich.console import Console
from rich.table import Table

from DualCode.terminology.config import TerminologyEngine, build_engine, load_settings
from DualCode.terminology.exceptions import (
    InvalidSelection,
    TerminologyError,
    UnknownSourceCodeError,
)
from DualCode.terminology.matcher import MAX_RESULTS
from DualCode.terminology.models import ContextIds, TargetCandidate, TargetSystemGroup

from .logging import configure_logging

app = typer.Typer(help="Dual-code NAMASTE terms with ICD-11 TM2 and biomedical codes")


def _engine(ctx: typer.Context) -> TerminologyEngine:
    return ctx.obj["engine"]


def _fail(message: str) -> None:
    typer.echo(f"[error] {message}")
    raise typer.Exit(code=1)


def _dump(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


def _parse_target(raw: str) -> tuple[TargetSystemGroup, str]:
    if ":" not in raw:
        raise typer.BadParameter(f"Target '{raw}' must use GROUP:CODE format")
    group_token, code = raw.split(":", 1)
    try:
        group = TargetSystemGroup.parse(group_token)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    return group, code.strip()


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", help="Path to terminology configuration (TOML or JSON)."),
    log_format: str = typer.Option("text", "--log-format", help="Log format (text or json)."),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Append logs to this file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging."),
) -> None:
    """Resolve configuration, configure logging and load the vocabularies."""

    try:
        logger = configure_logging(log_file, log_format.lower(), verbose)
        settings = load_settings(config)
        engine = build_engine(settings)
    except (ValueError, FileNotFoundError) as exc:
        _fail(str(exc))
    ctx.obj = {"engine": engine, "logger": logger}


@app.command()
def search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Text to look up in displays and designations."),
    limit: Optional[int] = typer.Option(None, "--limit", min=1, max=MAX_RESULTS, help="Cap on listed matches."),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON instead of a table."),
) -> None:
    """Search the source catalog."""

    engine = _engine(ctx)
    matches = engine.matcher.search(query)[:limit]
    suggestions = engine.matcher.suggest(query)[:limit] if not matches else ()
    if as_json:
        typer.echo(
            _dump(
                {
                    "query": query,
                    "matches": [
                        {"code": e.code, "display": e.display, "designations": list(e.designations)}
                        for e in matches
                    ],
                    "suggestions": [
                        {"code": s.entry.code, "display": s.entry.display, "score": round(s.score, 1)}
                        for s in suggestions
                    ],
                }
            )
        )
        return
    if not matches:
        typer.echo("No matches. Try another spelling or synonym.")
        for suggestion in suggestions:
            typer.echo(f"  did you mean {suggestion.entry.display} ({suggestion.entry.code})?")
        return
    table = Table(title=f"Matches for '{query}'")
    table.add_column("Code", no_wrap=True)
    table.add_column("Display")
    table.add_column("Designations")
    for entry in matches:
        table.add_row(entry.code, entry.display, ", ".join(entry.designations))
    Console().print(table)


@app.command()
def translate(
    ctx: typer.Context,
    code: str = typer.Argument(..., help="Source code to translate."),
    group: Optional[str] = typer.Option(None, "--group", "-g", help="Restrict to one target group."),
) -> None:
    """List concept map candidates for a source code."""

    engine = _engine(ctx)
    try:
        candidates = engine.translator.translate(code, group=group)
    except ValueError as exc:
        _fail(str(exc))
    typer.echo(
        _dump(
            {
                "code": code,
                "mapped": engine.translator.is_mapped(code),
                "matches": [candidate.to_dict() for candidate in candidates],
            }
        )
    )


@app.command()
def synthesize(
    ctx: typer.Context,
    code: str = typer.Argument(..., help="Source code of the selected term."),
    targets: List[str] = typer.Option(
        [], "--target", "-t", help="Chosen target as GROUP:CODE; repeat per group.", show_default=False
    ),
    subject: str = typer.Option(..., "--subject", help="Patient identifier."),
    encounter: str = typer.Option(..., "--encounter", help="Encounter identifier."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the Bundle to this file."),
) -> None:
    """Build a dual-coded Condition bundle."""

    engine = _engine(ctx)
    try:
        source = engine.catalog.get(code)
        context = ContextIds(subject_id=subject, encounter_id=encounter)
    except (UnknownSourceCodeError, ValueError) as exc:
        _fail(str(exc))

    chosen: list[TargetCandidate] = []
    for raw in targets:
        group, target_code = _parse_target(raw)
        candidate = engine.translator.find_candidate(code, group, target_code)
        if candidate is None:
            _fail(f"No {group.value} mapping '{target_code}' for source '{code}'")
        chosen.append(candidate)

    try:
        bundle = engine.synthesizer.synthesize(source, chosen, context)
    except InvalidSelection as exc:
        _fail(f"invalid selection ({exc.reason.value}): {exc}")
    except TerminologyError as exc:
        _fail(str(exc))

    rendered = _dump(bundle.to_dict())
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(rendered + "\n", encoding="utf-8")
        typer.echo(str(output))
        return
    typer.echo(rendered)


@app.command()
def versions(ctx: typer.Context) -> None:
    """Show the vocabulary versions in effect."""

    engine = _engine(ctx)
    typer.echo(_dump(dict(engine.settings.versions.to_dict())))


def main() -> None:
    """Entrypoint for the CLI."""

    app()
