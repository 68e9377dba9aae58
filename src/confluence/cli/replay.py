"""Replay a recorded event stream through the engine."""

import json
from pathlib import Path
from typing import Any, Optional

import typer

from ..exceptions import ConfluenceError, InvalidEvent, UnknownDomainError
from ..logging_config import get_logger, setup_logging
from ..pipeline import ConfluenceEngine
from ..serialization import dumps
from . import app
from ._common import console, resolve_config
from ._display import print_summary

logger = get_logger(__name__)


def _parse_record(line: str) -> tuple[str, dict[str, Any]]:
    """Split one JSON Lines record into (domain, event payload).

    Raises:
        ValueError: If the line is not a {"domain": str, "event": {...}} object
    """
    record = json.loads(line)
    if not isinstance(record, dict):
        raise ValueError("record is not a JSON object")
    domain = record.get("domain")
    event = record.get("event")
    if not isinstance(domain, str):
        raise ValueError("record has no 'domain' string")
    if not isinstance(event, dict):
        raise ValueError("record has no 'event' object")
    return domain, event


@app.command()
def replay(
    file: Path = typer.Argument(
        ...,
        help='JSON Lines file, one {"domain": ..., "event": {...}} record per line',
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    tick_every: int = typer.Option(
        1,
        "--tick-every",
        "-t",
        help="Run one engine tick after every N accepted events",
        min=1,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="TOML config file",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Print every prediction as one JSON line",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable DEBUG logging",
    ),
):
    """
    Feed recorded events through the engine and report the consensus.

    Malformed lines and rejected events are logged and skipped.

    [bold cyan]Examples:[/bold cyan]

      confluence replay events.jsonl

      confluence replay events.jsonl --tick-every 5 --json
    """
    try:
        settings = resolve_config(config, verbose=verbose)
        setup_logging(settings.verbosity)
        engine = ConfluenceEngine.from_config(settings)

        accepted = rejected = 0
        with open(file, encoding="utf-8") as fh:
            for lineno, line in enumerate(fh, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    domain, payload = _parse_record(line)
                    engine.process_payload(domain, payload)
                except ValueError as e:
                    rejected += 1
                    logger.warning("line %d: malformed record: %s", lineno, e)
                    continue
                except (InvalidEvent, UnknownDomainError) as e:
                    rejected += 1
                    logger.warning("line %d: %s", lineno, e)
                    continue

                accepted += 1
                if accepted % tick_every == 0:
                    prediction = engine.tick()
                    if json_output:
                        print(dumps(prediction))

        if accepted % tick_every != 0:
            prediction = engine.tick()
            if json_output:
                print(dumps(prediction))

        if json_output:
            return

        console.print(
            f"[bold cyan]Replayed[/bold cyan] {accepted} events from {file.name}"
            + (f" ([yellow]{rejected} rejected[/yellow])" if rejected else "")
        )
        if accepted == 0:
            console.print("[yellow]No events accepted; nothing to report.[/yellow]")
            return
        print_summary(engine)

    except ConfluenceError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
