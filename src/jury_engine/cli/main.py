from __future__ import annotations

import asyncio
import json
import logging
import random
from pathlib import Path
from typing import Optional

import typer

from jury_engine.deliberation.arguments import LLMArgumentGenerator
from jury_engine.deliberation.engine import DeliberationConfig
from jury_engine.jury.core import Jury
from jury_engine.jury.opinion import CourtEvent
from jury_engine.personas.base import JurorTemplate
from jury_engine.personas.catalog import TemplateCatalog
from jury_engine.personas.generator import PersonaGenerator
from jury_engine.utils import json_serializable

app = typer.Typer(name="jury-engine", help="Simulate a jury through a trial and its deliberation.")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _load_jsonl(path: Path) -> list[dict]:
    rows: list[dict] = []
    with path.open("r", encoding="utf-8") as fh:
        for line in fh:
            if line.strip():
                rows.append(json.loads(line))
    return rows


def _write_jsonl(path: Path, rows: list[dict]) -> None:
    with path.open("w", encoding="utf-8") as fh:
        for row in rows:
            fh.write(json.dumps(row, ensure_ascii=True) + "\n")


def _load_catalog(path: Path | None) -> list[JurorTemplate]:
    if path is None:
        return TemplateCatalog.default()
    try:
        return TemplateCatalog.from_json(path)
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(f"Could not load template catalog: {exc}") from exc


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.command()
def pool(
    output: Path = typer.Option(..., help="Output JSONL file"),
    seed: Optional[int] = typer.Option(None, help="Random seed for reproducible pools"),
    case_id: Optional[str] = typer.Option(None, help="Case identifier for per-case bias variance"),
    size: int = typer.Option(18, help="Number of personas to generate"),
    catalog: Optional[Path] = typer.Option(None, help="JSON archetype catalog (defaults to built-in)"),
    verbose: bool = typer.Option(False, help="Enable debug logging"),
) -> None:
    """Generate a juror pool and write one persona per line."""
    _configure_logging(verbose)
    generator = PersonaGenerator(_load_catalog(catalog), rng=random.Random(seed))
    try:
        personas = generator.generate_pool(size=size, case_id=case_id)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    _write_jsonl(output, [persona.to_dict() for persona in personas])
    typer.echo(f"Wrote {len(personas)} persona(s) to {output}")


@app.command()
def simulate(
    events: Path = typer.Option(..., help="Input JSONL file of courtroom events"),
    output: Path = typer.Option(..., help="Output JSON file for the deliberation result"),
    seed: Optional[int] = typer.Option(None, help="Random seed for a reproducible run"),
    case_id: Optional[str] = typer.Option(None, help="Case identifier for per-case bias variance"),
    max_rounds: int = typer.Option(10, help="Deliberation round cap before a hung jury"),
    model: Optional[str] = typer.Option(None, help="LLM model for juror arguments (canned text if omitted)"),
    catalog: Optional[Path] = typer.Option(None, help="JSON archetype catalog (defaults to built-in)"),
    verbose: bool = typer.Option(False, help="Enable debug logging"),
) -> None:
    """Run a trial from JSONL events, deliberate, and write the verdict."""
    _configure_logging(verbose)
    if max_rounds < 1:
        raise typer.BadParameter("max_rounds must be at least 1")

    court_events = [CourtEvent.from_dict(row) for row in _load_jsonl(events)]
    jury = Jury.empanel(
        _load_catalog(catalog),
        case_id=case_id,
        rng=random.Random(seed),
        deliberation_config=DeliberationConfig(max_rounds=max_rounds),
        argument_generator=LLMArgumentGenerator(model=model) if model else None,
    )

    for turn, event in enumerate(court_events, start=1):
        jury.present(event, turn)
        outcome = jury.check_events(turn)
        if outcome is not None and outcome.applied:
            typer.echo(f"[turn {turn}] {outcome.event.description}")

    result = asyncio.run(jury.deliberate())
    payload = {
        "result": result.to_dict(),
        "jurors": [juror.to_dict() for juror in jury.seated],
        "stats": {
            "events_presented": jury.stats.events_presented,
            "jury_events": jury.stats.jury_events,
            "removals": jury.stats.removals,
            "replacements": jury.stats.replacements,
            "vacancies": jury.stats.vacancies,
        },
    }
    output.write_text(json.dumps(payload, default=json_serializable, ensure_ascii=True, indent=2), encoding="utf-8")

    guilty, not_guilty = result.final_tally
    typer.echo(
        f"Verdict: {result.verdict.value} after {result.total_rounds} round(s) "
        f"({guilty} guilty / {not_guilty} not guilty)"
    )


def main(argv: list[str] | None = None) -> None:
    if argv is not None:
        app(standalone_mode=False, args=argv)
    else:
        app()


if __name__ == "__main__":
    main()
