"""Command-line interface: the typer app and its subcommands."""

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="confluence",
    help="Confluence - Cross-Domain Signal Consensus",
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold cyan]Confluence[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
):
    """
    Normalize events from unrelated domains into comparable signals and
    combine them into one cross-domain prediction.
    """


# Import subcommands to register them
from .domains import domains as _domains  # noqa: F401, E402
from .replay import replay as _replay  # noqa: F401, E402
from .simulate import simulate as _simulate  # noqa: F401, E402
