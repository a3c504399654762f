"""
Orchestrator for the journal-entry stress scenario.

Builds the fixture once, then drives the workload at each concurrency level
in ascending order, profiling each run and optionally persisting the results.

Usage (example from CLI):
    from ledger_stress.orchestrator import ScenarioConfig, run_scenario

    result = run_scenario(ScenarioConfig(), service=client, gate=gate)
    print(result.to_dict())

Outputs are saved to `results/` by default:
- `results/latest.json` (last run)
- `results/run-<timestamp>.json` (timestamped archive)
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ledger_stress.config import Settings, get_settings, parse_levels
from ledger_stress.domain.results import FixtureSummary, ScenarioResult
from ledger_stress.events.recorder import NotificationGate
from ledger_stress.fixture import FixtureGenerator
from ledger_stress.infrastructure.abstract import LedgerManager
from ledger_stress.utils.logging import get_logger
from ledger_stress.utils.profiler import profile_block
from ledger_stress.workload import DEFAULT_AMOUNT, WorkloadDriver

log = get_logger(__name__)


class ScenarioConfig(BaseModel):
    """
    Parameters of one orchestrator pass. Defaults are the standard scenario:
    32 ledgers x 512 accounts, 1024 entries per worker, levels 4/8/16/24/32.
    """

    ledger_count: int = Field(32, ge=0)
    accounts_per_ledger: int = Field(512, ge=0)
    entries_per_worker: int = Field(1024, ge=0)
    concurrency_levels: List[int] = Field(default_factory=lambda: [4, 8, 16, 24, 32])
    amount: Decimal = DEFAULT_AMOUNT
    event_timeout: float = Field(30.0, gt=0)
    seed: Optional[int] = None
    clerk: str = "setna"
    persist: bool = False
    results_dir: str = "results"

    model_config = {"frozen": True}

    @field_validator("concurrency_levels", mode="before")
    @classmethod
    def _parse_levels(cls, value):
        return parse_levels(value)

    @field_validator("concurrency_levels")
    @classmethod
    def _ascending_levels(cls, value: List[int]) -> List[int]:
        if not value:
            raise ValueError("at least one concurrency level is required")
        if any(level < 1 for level in value):
            raise ValueError(f"concurrency levels must be >= 1, got {value}")
        if any(later <= earlier for earlier, later in zip(value, value[1:])):
            raise ValueError(f"concurrency levels must be strictly ascending, got {value}")
        return value

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **overrides) -> "ScenarioConfig":
        settings = settings or get_settings()
        values = {
            "ledger_count": settings.stress_ledgers,
            "accounts_per_ledger": settings.stress_accounts_per_ledger,
            "entries_per_worker": settings.stress_entries_per_worker,
            "concurrency_levels": settings.stress_concurrency_levels,
            "amount": settings.stress_entry_amount,
            "event_timeout": settings.event_wait_timeout_seconds,
            "seed": settings.stress_seed,
            "clerk": settings.ledger_user,
            "results_dir": settings.results_dir,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)


def _persist_results(payload: dict, results_dir: Path) -> Path:
    results_dir.mkdir(parents=True, exist_ok=True)
    latest_path = results_dir / "latest.json"
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    archive_path = results_dir / f"run-{timestamp}.json"

    with latest_path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True)
    with archive_path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True)

    log.info("Results persisted", extra={"latest": str(latest_path), "archive": str(archive_path)})
    return latest_path


def run_scenario(
    config: ScenarioConfig,
    service: LedgerManager,
    gate: NotificationGate,
    driver: Optional[WorkloadDriver] = None,
) -> ScenarioResult:
    """
    Run the fixture phase once, then one load run per concurrency level.

    A fixture failure aborts the scenario before any load run. Each load run
    has fully joined its workers before the next level starts.

    Parameters
    ----------
    config : ScenarioConfig
        Scenario sizes and levels.
    service : LedgerManager
        Target of every create call.
    gate : NotificationGate
        Confirms fixture creates.
    driver : WorkloadDriver | None
        Override for the load phase (tests inject samplers/clocks this way).

    Returns
    -------
    ScenarioResult
        Fixture summary plus one `RunStatistics` per level, in run order.
    """
    generator = FixtureGenerator(
        service, gate, event_timeout=config.event_timeout, seed=config.seed
    )
    account_pool = generator.build(config.ledger_count, config.accounts_per_ledger)
    fixture = generator.last_summary or FixtureSummary(
        ledgers=config.ledger_count, accounts=len(account_pool), duration_seconds=0.0
    )

    driver = driver or WorkloadDriver(
        service, amount=config.amount, seed=config.seed, clerk=config.clerk
    )
    result = ScenarioResult(fixture=fixture)
    total_levels = len(config.concurrency_levels)

    for position, concurrency in enumerate(config.concurrency_levels, start=1):
        log.info(f"{'=' * 60}")
        log.info(
            f"[LEVEL {position}/{total_levels}] concurrency={concurrency}",
            extra={"workers": concurrency, "level": position, "total_levels": total_levels},
        )
        with profile_block(f"concurrency-{concurrency}") as profile:
            stats = driver.run_load(concurrency, config.entries_per_worker, account_pool)
        stats.peak_rss_bytes = profile.peak_rss_bytes
        stats.cpu_percent = profile.cpu_percent
        result.runs.append(stats)
        log.info(
            f"Average processing time for one journal entry: {stats.mean_latency_ms:.2f}ms",
            extra={
                "workers": concurrency,
                "throughput_eps": round(stats.throughput_entries_per_sec, 2),
                "wall_seconds": round(stats.wall_seconds, 3),
            },
        )

    if config.persist:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "config": config.model_dump(mode="json"),
            **result.to_dict(),
        }
        _persist_results(payload, Path(config.results_dir))

    log.info(
        f"[SCENARIO COMPLETE] {total_levels} concurrency level(s) executed",
        extra={"levels": list(config.concurrency_levels)},
    )
    return result


__all__ = ["ScenarioConfig", "run_scenario"]
