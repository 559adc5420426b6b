"""Change commands for single calculations and CSV batches."""

import json
import sys
from dataclasses import replace
from pathlib import Path

from rich.console import Console
from rich.table import Table

from cashreg.config import load_policy
from cashreg.domain.batch import ChangeResponse, build_response, parse_change_lines, process_requests, total_change
from cashreg.domain.change import calculate_change, parse_amount
from cashreg.domain.errors import ChangeError
from cashreg.domain.models import DENOMINATIONS, ChangeRequest, PolicyConfig

console = Console()


def load_policy_or_exit(divisor: int | None = None) -> PolicyConfig:
    """Load the stored policy, applying an optional divisor override."""
    try:
        policy = load_policy()
    except ChangeError as e:
        console.print(f"[red]Config error: {e}[/red]", style="bold")
        sys.exit(1)

    if divisor is not None:
        policy = replace(policy, random_divisor=divisor)
    return policy


def render_breakdown(response: ChangeResponse) -> None:
    """Render one change breakdown as a table."""
    table = Table(title=f"Change: ${response.result.total:,.2f}")
    table.add_column("Denomination", style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("Value", justify="right", style="green")

    for denom in DENOMINATIONS:
        count = response.result.denominations.get(denom.name, 0)
        if count:
            table.add_row(denom.name if count == 1 else denom.plural, str(count), f"${count * denom.value / 100:,.2f}")

    console.print(table)
    if response.formatted:
        console.print(f"[dim]{response.formatted}[/dim]")


def render_batch(responses: list[ChangeResponse]) -> None:
    """Render batch results, one row per request."""
    table = Table(title=f"Batch results ({len(responses)})")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Owed", justify="right")
    table.add_column("Paid", justify="right")
    table.add_column("Change", justify="right", style="green")
    table.add_column("Breakdown", style="cyan")

    for index, response in enumerate(responses, 1):
        table.add_row(
            str(index),
            f"${response.request.amount_owed:,.2f}",
            f"${response.request.amount_paid:,.2f}",
            f"${response.result.total:,.2f}",
            response.formatted or "[dim]-[/dim]",
        )

    console.print(table)
    console.print(f"[bold]Total change:[/bold] ${total_change(responses):,.2f}")


def change_command(owed: str, paid: str, divisor: int | None = None, as_json: bool = False) -> None:
    """Calculate change for one purchase.

    Args:
        owed: Amount owed in dollars.
        paid: Amount paid in dollars.
        divisor: Optional override for the randomization divisor.
        as_json: Print the wire format instead of a table.
    """
    policy = load_policy_or_exit(divisor)

    try:
        request = ChangeRequest(
            amount_owed=parse_amount(owed, "amount owed"),
            amount_paid=parse_amount(paid, "amount paid"),
        )
        result = calculate_change(request, policy)
    except ChangeError as e:
        console.print(f"[red]Error: {e}[/red]", style="bold")
        sys.exit(1)

    response = build_response(request, result)

    if as_json:
        console.print_json(json.dumps(response.to_dict()))
        return

    if not result.denominations:
        console.print("[yellow]No change due[/yellow]")
        return

    render_breakdown(response)


def batch_command(file: str, divisor: int | None = None, as_json: bool = False) -> None:
    """Calculate change for every "owed,paid" line in a CSV file.

    Args:
        file: Path to the CSV file.
        divisor: Optional override for the randomization divisor.
        as_json: Print the wire format instead of a table.
    """
    csv_path = Path(file).expanduser()
    policy = load_policy_or_exit(divisor)

    try:
        content = csv_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Could not read {csv_path}: {e}[/red]", style="bold")
        sys.exit(1)

    try:
        responses = process_requests(parse_change_lines(content), policy)
    except ChangeError as e:
        console.print(f"[red]Batch aborted: {e}[/red]", style="bold")
        console.print("[dim]No results were produced. Fix the line above and retry.[/dim]")
        sys.exit(1)

    if as_json:
        console.print_json(json.dumps([r.to_dict() for r in responses]))
        return

    if not responses:
        console.print("[yellow]No lines to process[/yellow]")
        return

    render_batch(responses)
