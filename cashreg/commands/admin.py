"""Admin commands for config setup and running the HTTP service."""

import sys

from rich.console import Console
from rich.table import Table

from cashreg.config import create_default_config, get_config_path, load_policy, save_policy
from cashreg.domain.errors import ChangeError
from cashreg.domain.models import PolicyConfig

console = Console()


def render_policy(policy: PolicyConfig) -> None:
    """Render the policy as a two-column table."""
    table = Table(title="Change policy")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Random divisor", str(policy.random_divisor))
    table.add_row("Country", policy.country)
    table.add_row("Special cases", ", ".join(policy.special_cases) or "[dim]-[/dim]")
    console.print(table)
    console.print(f"[dim]Config: {get_config_path()}[/dim]")


def init_command(force: bool = False) -> None:
    """Create the default config file."""
    config_path = get_config_path()

    if config_path.exists() and not force:
        console.print("[red]Initialization failed:[/red]", style="bold")
        console.print(f"  Config already exists: {config_path}")
        console.print("\n[yellow]Use 'cashreg init --force' to overwrite[/yellow]")
        sys.exit(1)

    try:
        create_default_config(config_path)
    except OSError as e:
        console.print(f"[red]Filesystem error: {e}[/red]", style="bold")
        sys.exit(1)

    console.print(f"[green]✓[/green] Config file created (permissions: 600): {config_path}")


def config_command(
    divisor: int | None = None,
    country: str | None = None,
    special_cases: list[str] | None = None,
    reset: bool = False,
) -> None:
    """Show or replace the stored change policy.

    Any option given replaces the whole policy; options left out take their defaults.

    Args:
        divisor: Randomization divisor.
        country: Country code.
        special_cases: Special case tags.
        reset: Restore all defaults.
    """
    try:
        current = load_policy()
    except ChangeError as e:
        console.print(f"[red]Config error: {e}[/red]", style="bold")
        sys.exit(1)

    if not reset and divisor is None and country is None and not special_cases:
        render_policy(current)
        return

    defaults = PolicyConfig()
    if reset:
        policy = defaults
    else:
        policy = PolicyConfig(
            random_divisor=defaults.random_divisor if divisor is None else divisor,
            country=country or defaults.country,
            special_cases=tuple(special_cases or ()),
        )

    if policy.random_divisor <= 0:
        console.print(
            f"[yellow]Divisor {policy.random_divisor} is not positive; calculations will use "
            f"{defaults.random_divisor}[/yellow]"
        )

    try:
        save_policy(policy)
    except OSError as e:
        console.print(f"[red]Filesystem error: {e}[/red]", style="bold")
        sys.exit(1)

    console.print("[green]✓[/green] Policy saved")
    render_policy(policy)


def serve_command(host: str = "127.0.0.1", port: int = 8080, debug: bool = False) -> None:
    """Run the HTTP service."""
    from cashreg.service import create_app

    try:
        app = create_app()
    except ChangeError as e:
        console.print(f"[red]Config error: {e}[/red]", style="bold")
        sys.exit(1)

    console.print(f"[cyan]Starting server on {host}:{port}...[/cyan]")
    app.run(host=host, port=port, debug=debug)
