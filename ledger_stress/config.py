"""
Configuration settings for the ledger stress harness.

Uses Pydantic Settings to load environment variables for the ledger service
connection, event confirmation, logging, and the default stress scenario.
"""
from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from typing import Annotated, List, Optional, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def parse_levels(value: Union[str, List[int]]) -> List[int]:
    """
    Accept either a list of ints or a comma-separated string ("4,8,16").
    """
    if isinstance(value, str):
        value = value.strip().strip("[]")
        return [int(part) for part in value.split(",") if part.strip()]
    return [int(part) for part in value]


class Settings(BaseSettings):
    # Ledger service
    ledger_base_url: str = Field("http://localhost:2021/accounting/v1", alias="LEDGER_BASE_URL")
    ledger_tenant: str = Field("stress", alias="LEDGER_TENANT")
    ledger_user: str = Field("setna", alias="LEDGER_USER")
    ledger_token: Optional[str] = Field(None, alias="LEDGER_TOKEN")
    http_timeout_seconds: float = Field(30.0, alias="HTTP_TIMEOUT_SECONDS")

    # Event confirmation
    event_wait_timeout_seconds: float = Field(30.0, alias="EVENT_WAIT_TIMEOUT_SECONDS")
    event_poll_interval_seconds: float = Field(0.1, alias="EVENT_POLL_INTERVAL_SECONDS")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")
    results_dir: str = Field("results", alias="RESULTS_DIR")

    # Stress scenario defaults
    stress_ledgers: int = Field(32, alias="STRESS_LEDGERS")
    stress_accounts_per_ledger: int = Field(512, alias="STRESS_ACCOUNTS_PER_LEDGER")
    stress_entries_per_worker: int = Field(1024, alias="STRESS_ENTRIES_PER_WORKER")
    stress_concurrency_levels: Annotated[List[int], NoDecode] = Field(
        default_factory=lambda: [4, 8, 16, 24, 32], alias="STRESS_CONCURRENCY_LEVELS"
    )
    stress_entry_amount: Decimal = Field(Decimal("50.00"), alias="STRESS_ENTRY_AMOUNT")
    stress_seed: Optional[int] = Field(None, alias="STRESS_SEED")

    # In-memory simulation (used with `run --simulate`)
    simulated_latency_ms: float = Field(0.0, alias="SIMULATED_LATENCY_MS")
    simulated_event_delay_ms: float = Field(0.0, alias="SIMULATED_EVENT_DELAY_MS")
    simulated_failure_rate: float = Field(0.0, alias="SIMULATED_FAILURE_RATE")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("stress_concurrency_levels", mode="before")
    @classmethod
    def _split_levels(cls, value: Union[str, List[int]]) -> List[int]:
        return parse_levels(value)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings", "parse_levels"]
