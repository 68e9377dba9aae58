"""List the registered reference domains."""

import dataclasses
import json

import typer
from rich.table import Table

from ..adapters import ADAPTERS
from . import app
from ._common import console


@app.command()
def domains(
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    Show every registered domain adapter and its defaults.

    [bold cyan]Examples:[/bold cyan]

      confluence domains

      confluence domains --json
    """
    rows = []
    for name in sorted(ADAPTERS):
        cls = ADAPTERS[name]
        thresholds = cls.thresholds_class()
        rows.append(
            {
                "domain": name,
                "name": cls.name,
                "event": cls.event_type.__name__,
                "fields": [f.name for f in dataclasses.fields(cls.event_type)],
                "capacity": thresholds.capacity,
                "window": thresholds.signature_window,
                "harmonics": cls.harmonics_length,
            }
        )

    if json_output:
        print(json.dumps(rows, indent=2))
        return

    table = Table(show_header=True, show_lines=False, pad_edge=True)
    table.add_column("Domain", style="cyan")
    table.add_column("Adapter")
    table.add_column("Event")
    table.add_column("Capacity", justify="right")
    table.add_column("Window", justify="right")
    table.add_column("Harmonics", justify="right")
    for row in rows:
        table.add_row(
            row["domain"],
            row["name"],
            f"{row['event']}({', '.join(row['fields'])})",
            str(row["capacity"]),
            str(row["window"]),
            str(row["harmonics"]),
        )
    console.print(table)
