from __future__ import annotations

from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from ledger_stress.domain.results import ScenarioResult


def print_results(result: ScenarioResult, console: Optional[Console] = None) -> None:
    """
    Render scenario results as a rich table, one row per concurrency level in run order.

    The fixture build time goes in the caption; it is measured once per
    scenario, not per level.
    """
    console = console or Console()

    if not result.runs:
        console.print("[yellow]No load runs to display.[/yellow]")
        return

    fixture = result.fixture
    table = Table(
        title="Journal Entry Stress Results",
        box=box.ROUNDED,
        caption=(
            f"Fixture: {fixture.ledgers} ledgers / {fixture.accounts:,} accounts "
            f"in {fixture.duration_seconds:.1f}s ({fixture.mean_account_ms:.1f} ms/account)"
        ),
    )

    table.add_column("Workers", justify="right", style="cyan", no_wrap=True)
    table.add_column("Entries/worker", justify="right", style="magenta")
    table.add_column("Total", justify="right", style="magenta")
    table.add_column("Failed", justify="right", style="red")
    table.add_column("Summed time (s)", justify="right", style="green")
    table.add_column("Throughput (entries/s)", justify="right", style="bold green")
    table.add_column("Mean latency (ms)", justify="right", style="yellow")
    table.add_column("Wall (s)", justify="right", style="blue")
    table.add_column("Peak Memory (MB)", justify="right", style="yellow")

    for stats in result.runs:
        mem_str = "N/A"
        if stats.peak_rss_bytes:
            mem_str = f"{stats.peak_rss_bytes / (1024 * 1024):.2f}"

        failed_str = f"{stats.failed:,}"
        if stats.failures_by_type:
            kinds = ", ".join(f"{name}={count}" for name, count in sorted(stats.failures_by_type.items()))
            failed_str = f"{failed_str}\n[dim]{kinds}[/dim]"

        table.add_row(
            str(stats.workers),
            f"{stats.entries_per_worker:,}",
            f"{stats.total_entries:,}",
            failed_str,
            f"{stats.elapsed_seconds:.1f}",
            f"{stats.throughput_entries_per_sec:,.2f}",
            f"{stats.mean_latency_ms:.2f}",
            f"{stats.wall_seconds:.1f}",
            mem_str,
        )

    console.print(table)
