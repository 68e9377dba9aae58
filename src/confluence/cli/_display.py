"""Rich rendering of engine state, shared by replay and simulate."""

from typing import Mapping, Sequence

from rich.table import Table

from ..consensus.models import Direction, UnifiedPrediction
from ..correlation.models import CrossDomainCorrelation
from ..pipeline import ConfluenceEngine
from ..signals.models import Signature
from ._common import console

_DIRECTION_STYLE = {
    Direction.UP: "green",
    Direction.DOWN: "red",
    Direction.NEUTRAL: "yellow",
}


def signatures_table(engine: ConfluenceEngine, signatures: Mapping[str, Signature]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=True, title="Domain signatures")
    table.add_column("Domain", style="cyan")
    table.add_column("Regime")
    table.add_column("Quadrant")
    table.add_column("Flow")
    table.add_column("Samples", justify="right")
    table.add_column("Intensity", justify="right")
    table.add_column("Momentum", justify="right")
    table.add_column("Volatility", justify="right")
    table.add_column("Resonance", justify="right")
    table.add_column("Vote")

    for domain, sig in signatures.items():
        adapter = engine.adapter(domain)
        table.add_row(
            domain,
            adapter.regime(sig),
            sig.quadrant_profile.dominant(),
            sig.temporal_flow.dominant(),
            str(sig.sample_size),
            f"{sig.intensity:.3f}",
            f"{sig.momentum:+.4f}",
            f"{sig.volatility:.3f}",
            f"{sig.harmonic_resonance:.3f}",
            engine.aggregator.vote(sig).value,
        )
    return table


def correlations_table(correlations: Sequence[CrossDomainCorrelation]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=True, title="Strongest correlations")
    table.add_column("Pair", style="cyan")
    table.add_column("r", justify="right")
    table.add_column("Lead/lag", justify="right")
    table.add_column("Confidence", justify="right")
    table.add_column("Samples", justify="right")

    for c in correlations:
        table.add_row(
            f"{c.domain_a} / {c.domain_b}",
            f"{c.coefficient:+.3f}",
            f"{c.lead_lag:+d}",
            f"{c.confidence:.3f}",
            str(c.sample_size),
        )
    return table


def print_prediction(prediction: UnifiedPrediction) -> None:
    style = _DIRECTION_STYLE[prediction.direction]
    console.print(
        f"[bold]Prediction:[/bold] [{style}]{prediction.direction.value.upper()}[/{style}]  "
        f"confidence [bold]{prediction.confidence:.3f}[/bold]  "
        f"magnitude {prediction.magnitude:.3f}  "
        f"strength {prediction.consensus_strength:.3f}  "
        f"alignment {prediction.harmonic_alignment:.3f}"
    )
    if prediction.insufficient_correlation:
        console.print("[yellow]Insufficient correlation data:[/yellow] no domain pair is ready yet")


def print_summary(engine: ConfluenceEngine) -> None:
    """Final signatures, correlations and prediction of a run."""
    signatures = engine.snapshot()
    state = engine.state()

    console.print()
    console.print(signatures_table(engine, signatures))

    top = engine.correlations.top()
    if top:
        console.print()
        console.print(correlations_table(top))

    console.print()
    if state.last_prediction is not None:
        print_prediction(state.last_prediction)
    console.print(
        f"[dim]{state.predictions_made} predictions, "
        f"{state.ready_correlations} ready correlations, "
        f"calibration {state.calibration_progress:.0%}[/dim]"
    )
