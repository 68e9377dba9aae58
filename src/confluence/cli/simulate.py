"""Run the engine on synthetic correlated streams."""

from pathlib import Path
from typing import List, Optional

import typer

from ..exceptions import ConfluenceError
from ..logging_config import get_logger, setup_logging
from ..pipeline import ConfluenceEngine
from ..serialization import dumps
from ..simulation import simulate_events
from . import app
from ._common import console, resolve_config
from ._display import print_summary

logger = get_logger(__name__)


class _SimulatedClock:
    """Clock that reads the timestamp of the event being replayed."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@app.command()
def simulate(
    ticks: int = typer.Option(
        200,
        "--ticks",
        "-n",
        help="Number of simulated ticks",
        min=1,
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="Random seed (same seed, same run)",
    ),
    domain: Optional[List[str]] = typer.Option(
        None,
        "--domain",
        "-d",
        help="Domain to simulate; repeat for several (default: configured domains)",
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
    Simulate correlated domains driven by one hidden random walk.

    [bold cyan]Examples:[/bold cyan]

      confluence simulate --ticks 300 --seed 7

      confluence simulate -d market -d sentiment --json
    """
    try:
        settings = resolve_config(config, verbose=verbose, domains=domain)
        setup_logging(settings.verbosity)
        events = simulate_events(settings.domains, ticks=ticks, seed=seed)

        clock = _SimulatedClock()
        engine = ConfluenceEngine.from_config(settings, clock=clock)
        per_tick = len(settings.domains)

        for i, (name, event) in enumerate(events, 1):
            clock.now = event.timestamp
            engine.process(name, event)
            if i % per_tick == 0:
                prediction = engine.tick(now=clock.now)
                if json_output:
                    print(dumps(prediction))

        if json_output:
            return

        console.print(
            f"[bold cyan]Simulated[/bold cyan] {ticks} ticks across "
            f"{per_tick} domains"
            + (f" (seed {seed})" if seed is not None else "")
        )
        print_summary(engine)

    except ConfluenceError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
