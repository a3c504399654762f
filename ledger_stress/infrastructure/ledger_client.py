"""
HTTP client for the accounting service's REST API.

One `httpx.Client` is shared by every workload worker; httpx clients are
thread-safe and pool connections, so the pool limit must be at least the
highest concurrency level or workers queue on the client instead of the
service.

Writes are never retried. Only the readiness probe retries, with
exponential backoff on transport errors, to ride out a service that is
still starting.
"""

from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from ledger_stress.config import Settings, get_settings
from ledger_stress.domain.errors import LedgerServiceError
from ledger_stress.domain.models import Account, JournalEntry, Ledger
from ledger_stress.utils.logging import get_logger

log = get_logger(__name__)

TENANT_HEADER = "X-Tenant-Identifier"
USER_HEADER = "User"


def _is_transport_failure(exc: BaseException) -> bool:
    return isinstance(exc, LedgerServiceError) and exc.status_code is None


class HttpLedgerClient:
    """
    `LedgerManager` implementation speaking JSON over HTTP.

    Parameters
    ----------
    base_url : str
        Service root, e.g. ``http://localhost:2021/accounting/v1``.
    tenant : str
        Sent as the ``X-Tenant-Identifier`` header.
    user : str
        Sent as the ``User`` header.
    token : str | None
        Sent verbatim as the ``Authorization`` header when given.
    timeout : float
        Per-request timeout in seconds.
    max_connections : int
        Size of the connection pool shared by all workers.
    transport : httpx.BaseTransport | None
        Override for tests (``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str,
        tenant: str,
        user: str,
        token: Optional[str] = None,
        timeout: float = 30.0,
        max_connections: int = 32,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        headers = {
            TENANT_HEADER: tenant,
            USER_HEADER: user,
            "Accept": "application/json",
        }
        if token:
            headers["Authorization"] = token
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max_connections,
            ),
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings: Optional[Settings] = None, max_connections: Optional[int] = None
    ) -> "HttpLedgerClient":
        settings = settings or get_settings()
        highest_level = max(settings.stress_concurrency_levels, default=1)
        return cls(
            base_url=settings.ledger_base_url,
            tenant=settings.ledger_tenant,
            user=settings.ledger_user,
            token=settings.ledger_token,
            timeout=settings.http_timeout_seconds,
            max_connections=max_connections or highest_level,
        )

    def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> httpx.Response:
        try:
            return self._client.request(method, path, json=json)
        except httpx.RequestError as exc:
            raise LedgerServiceError(f"{method} {path} failed: {exc}") from exc

    def _post(self, path: str, payload: Dict[str, Any]) -> None:
        response = self._request("POST", path, json=payload)
        if response.is_error:
            raise LedgerServiceError(
                f"POST {path} returned {response.status_code}",
                status_code=response.status_code,
                detail=response.text,
            )

    def _find(self, path: str) -> Optional[Dict[str, Any]]:
        response = self._request("GET", path)
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        if response.is_error:
            raise LedgerServiceError(
                f"GET {path} returned {response.status_code}",
                status_code=response.status_code,
                detail=response.text,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise LedgerServiceError(
                f"GET {path} returned a non-JSON body",
                status_code=response.status_code,
                detail=response.text,
            ) from exc

    def create_ledger(self, ledger: Ledger) -> None:
        self._post("/ledgers", ledger.to_payload())

    def create_account(self, account: Account) -> None:
        self._post("/accounts", account.to_payload())

    def create_journal_entry(self, journal_entry: JournalEntry) -> None:
        self._post("/journal", journal_entry.to_payload())

    def find_ledger(self, identifier: str) -> Optional[Dict[str, Any]]:
        return self._find(f"/ledgers/{quote(identifier, safe='')}")

    def find_account(self, identifier: str) -> Optional[Dict[str, Any]]:
        return self._find(f"/accounts/{quote(identifier, safe='')}")

    @retry(
        stop=stop_after_attempt(5),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception(_is_transport_failure),
        reraise=True,
    )
    def wait_until_ready(self) -> None:
        """
        Probe the service until it answers.

        Retries up to 5 times with exponential backoff when the service cannot
        be reached. An HTTP error response is not retried: the service is up
        but refusing us (wrong tenant, missing token), which waiting won't fix.
        """
        response = self._request("GET", "/ledgers", json=None)
        if response.is_error:
            raise LedgerServiceError(
                f"Service at {self.base_url} is not ready ({response.status_code})",
                status_code=response.status_code,
                detail=response.text,
            )
        log.info("Ledger service reachable", extra={"base_url": self.base_url})

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpLedgerClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["HttpLedgerClient", "TENANT_HEADER", "USER_HEADER"]
