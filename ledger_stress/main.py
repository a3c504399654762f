from __future__ import annotations

import json
import sys
from typing import Optional, Tuple, Union

import typer
from pydantic import ValidationError

from ledger_stress.config import Settings, get_settings
from ledger_stress.domain.errors import StressTestError
from ledger_stress.events.polling import PollingNotificationGate
from ledger_stress.events.recorder import EventRecorder, NotificationGate
from ledger_stress.infrastructure.in_memory import InMemoryLedgerService
from ledger_stress.infrastructure.ledger_client import HttpLedgerClient
from ledger_stress.orchestrator import ScenarioConfig, run_scenario
from ledger_stress.reporter import print_results
from ledger_stress.utils.logging import configure_logging, get_logger

app = typer.Typer(help="Journal entry stress test for the accounting service.")
log = get_logger(__name__)

Service = Union[HttpLedgerClient, InMemoryLedgerService]


def _build_collaborators(
    settings: Settings, config: ScenarioConfig, simulate: bool
) -> Tuple[Service, NotificationGate]:
    if simulate:
        recorder = EventRecorder()
        service = InMemoryLedgerService(
            recorder=recorder,
            latency_seconds=settings.simulated_latency_ms / 1000.0,
            event_delay_seconds=settings.simulated_event_delay_ms / 1000.0,
            failure_rate=settings.simulated_failure_rate,
            seed=config.seed,
        )
        return service, recorder

    client = HttpLedgerClient.from_settings(
        settings, max_connections=max(config.concurrency_levels)
    )
    return client, PollingNotificationGate.for_client(
        client, poll_interval=settings.event_poll_interval_seconds
    )


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"SERVICE={settings.ledger_base_url} tenant={settings.ledger_tenant} "
        f"user={settings.ledger_user} | "
        f"ledgers={settings.stress_ledgers} accounts/ledger={settings.stress_accounts_per_ledger} "
        f"entries/worker={settings.stress_entries_per_worker} "
        f"levels={','.join(str(level) for level in settings.stress_concurrency_levels)}"
    )


@app.command()
def run(
    ledgers: Optional[int] = typer.Option(
        None, "--ledgers", "-l", help="Number of ledgers to create (default from settings)."
    ),
    accounts: Optional[int] = typer.Option(
        None, "--accounts", "-a", help="Accounts per ledger (default from settings)."
    ),
    entries: Optional[int] = typer.Option(
        None, "--entries", "-e", help="Journal entries per worker (default from settings)."
    ),
    concurrency: Optional[str] = typer.Option(
        None,
        "--concurrency",
        "-c",
        help="Comma-separated ascending concurrency levels, e.g. 4,8,16.",
    ),
    simulate: bool = typer.Option(
        False,
        "--simulate/--no-simulate",
        help="Run against the in-memory service instead of LEDGER_BASE_URL.",
    ),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for fixture and sampling RNGs."),
    persist: bool = typer.Option(
        True, "--persist/--no-persist", help="Write results to RESULTS_DIR."
    ),
    json_output: bool = typer.Option(False, "--json", help="Print results as JSON instead of a table."),
) -> None:
    """
    Build the fixture, then run the journal entry load at each concurrency level.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    try:
        config = ScenarioConfig.from_settings(
            settings,
            ledger_count=ledgers,
            accounts_per_ledger=accounts,
            entries_per_worker=entries,
            concurrency_levels=concurrency,
            seed=seed,
            persist=persist,
        )
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    typer.echo(
        f"Running {'simulated' if simulate else settings.ledger_base_url} scenario: "
        f"{config.ledger_count}x{config.accounts_per_ledger} fixture, "
        f"{config.entries_per_worker} entries/worker, levels={config.concurrency_levels}."
    )

    service, gate = _build_collaborators(settings, config, simulate)
    try:
        if isinstance(service, HttpLedgerClient):
            service.wait_until_ready()
        result = run_scenario(config, service=service, gate=gate)
    except StressTestError as exc:
        log.error("Scenario aborted", exc_info=True)
        typer.secho(f"Scenario aborted: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    finally:
        service.close()

    if json_output:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        print_results(result)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
