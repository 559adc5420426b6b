"""CLI entry point for cashreg."""

import typer

from cashreg.commands.admin import config_command, init_command, serve_command
from cashreg.commands.change import batch_command, change_command

app = typer.Typer(
    name="cashreg",
    help="Cash register change calculator",
    add_completion=False,
)


@app.callback()
def main() -> None:
    """Cash register change calculator."""
    pass


@app.command(name="init")
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing config"),
) -> None:
    """Initialize cashreg configuration."""
    init_command(force)


@app.command()
def change(
    owed: str,
    paid: str,
    divisor: int = typer.Option(None, "--divisor", help="Randomization divisor (overrides config)"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
) -> None:
    """Calculate the change due for one purchase."""
    change_command(owed, paid, divisor, as_json)


@app.command()
def batch(
    file: str,
    divisor: int = typer.Option(None, "--divisor", help="Randomization divisor (overrides config)"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
) -> None:
    """Calculate change for each owed,paid line of a CSV file."""
    batch_command(file, divisor, as_json)


@app.command(name="config")
def config(
    divisor: int = typer.Option(None, "--divisor", help="Randomize when change in cents is divisible by this"),
    country: str = typer.Option(None, "--country", help="Country code (default: US)"),
    special_case: list[str] = typer.Option(None, "--special-case", help="Special case tag (repeatable)"),
    reset: bool = typer.Option(False, "--reset", help="Restore default policy"),
) -> None:
    """Show or replace your change policy."""
    config_command(divisor, country, special_case, reset)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind"),
    port: int = typer.Option(8080, "--port", envvar="PORT", help="Port to listen on"),
    debug: bool = typer.Option(False, "--debug", help="Enable Flask debug mode"),
) -> None:
    """Run the change HTTP API."""
    serve_command(host, port, debug)


if __name__ == "__main__":
    app()
