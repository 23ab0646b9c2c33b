from __future__ import annotations

from typing import Any, Dict, Optional

from rich import box
from rich.console import Console
from rich.table import Table


def print_demo_results(results: Dict[str, Any], console: Optional[Console] = None) -> None:
    """
    Render the outcome of the demonstration flows as rich tables.

    Expects the dictionary returned by `bakery_backend.demo.run_all`.
    """
    console = console or Console()

    cleared = results.get("cleared", {})
    crud = results.get("crud", {})
    related = results.get("relationships", {})

    summary = Table(title="Bakery Backend Demo", box=box.ROUNDED)
    summary.add_column("Flow", style="cyan", no_wrap=True)
    summary.add_column("Outcome", style="green")

    summary.add_row(
        "reset",
        f"removed {cleared.get('chef', 0)} chef(s), {cleared.get('bakery', 0)} bakery(ies)",
    )
    if crud:
        bakery = crud.get("bakery", {})
        summary.add_row(
            "basic CRUD",
            f"bakery #{crud['bakery_id']} -> {bakery.get('name')!r} "
            f"(profit_margin={bakery.get('profit_margin')}), chef #{crud['chef_id']}",
        )
    if related:
        summary.add_row(
            "relationships",
            f"bakery #{related['bakery_id']} chefs: {', '.join(related['chefs'])}",
        )
    console.print(summary)

    joined = results.get("joined", [])
    if not joined:
        console.print("[yellow]No chef/bakery rows to display.[/yellow]")
        return

    table = Table(
        title="Chefs by bakery",
        box=box.ROUNDED,
        caption="Sorted by chef name (ascending)",
    )
    table.add_column("Chef", style="magenta")
    table.add_column("Bakery", style="cyan")
    for row in joined:
        table.add_row(row["chef_name"], row["bakery_name"])
    console.print(table)


__all__ = ["print_demo_results"]
