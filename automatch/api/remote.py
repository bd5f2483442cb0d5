"""
Client for the remote authoritative scoring service.

Connection failures are retried with bounded exponential backoff
(100ms, 200ms, 400ms by default). Auth rejections and exhausted retries
are raised as distinct exceptions so the orchestrator can fall back to
local scoring.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import httpx
import structlog

from automatch.config import settings

logger = structlog.get_logger()

# Transport errors worth retrying: the service is not accepting connections
RETRYABLE_ERRORS = (httpx.ConnectError, httpx.ConnectTimeout)


class RemoteScoringError(Exception):
    """Base class for remote scoring failures."""


class RemoteAuthError(RemoteScoringError):
    """The service rejected the forwarded credentials (401/403)."""

    def __init__(self, status_code: int, payload: Optional[dict] = None):
        self.status_code = status_code
        self.payload = payload or {}
        super().__init__(f"Remote scoring service rejected credentials ({status_code})")


class RemoteUnavailableError(RemoteScoringError):
    """The service could not be reached."""


@dataclass
class RemoteResponse:
    """Non-auth response from the scoring service."""

    status_code: int
    payload: dict[str, Any]

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def data(self) -> Any:
        """Payload with the service's {"success", "data"} envelope removed."""
        if "data" in self.payload and self.payload["data"] is not None:
            return self.payload["data"]
        return self.payload


class RemoteScoringClient:
    """Synchronous HTTP client for the scoring service."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        backoff_base: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.base_url = (base_url or settings.AUTOMATCH_API_BASE).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.REMOTE_TIMEOUT_SECONDS
        self.max_retries = max_retries if max_retries is not None else settings.REMOTE_MAX_RETRIES
        self.backoff_base = backoff_base if backoff_base is not None else settings.REMOTE_BACKOFF_BASE_SECONDS
        self._transport = transport
        self._sleep = sleep

    def backoff_delays(self) -> list[float]:
        """Delays between attempts: base, 2x base, 4x base, ..."""
        return [self.backoff_base * (2 ** attempt) for attempt in range(self.max_retries)]

    def run_automatch(
        self,
        request_id: str,
        access_token: str,
        body: Optional[dict[str, Any]] = None,
    ) -> RemoteResponse:
        """POST /automatch/run/{request_id}"""
        return self._send("POST", f"/automatch/run/{request_id}", access_token, json=body or {})

    def get_matches(self, request_id: str, access_token: Optional[str]) -> RemoteResponse:
        """GET /automatch/matches/{request_id}"""
        return self._send("GET", f"/automatch/matches/{request_id}", access_token)

    def _headers(self, access_token: Optional[str]) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    def _send(
        self,
        method: str,
        path: str,
        access_token: Optional[str],
        json: Optional[dict[str, Any]] = None,
    ) -> RemoteResponse:
        """
        Send a request, retrying connection failures.

        Raises:
            RemoteAuthError: On 401/403
            RemoteUnavailableError: When retries are exhausted or the
                transport fails in a non-retryable way
        """
        delays = self.backoff_delays()
        url = f"{self.base_url}{path}"

        with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
            for attempt in range(len(delays) + 1):
                try:
                    resp = client.request(method, url, headers=self._headers(access_token), json=json)
                    break
                except RETRYABLE_ERRORS as e:
                    if attempt == len(delays):
                        raise RemoteUnavailableError(
                            f"Scoring service unreachable after {attempt + 1} attempts: {e}"
                        ) from e
                    logger.info(
                        "remote_scoring_retry",
                        url=url,
                        attempt=attempt + 1,
                        delay=delays[attempt],
                        error=str(e),
                    )
                    self._sleep(delays[attempt])
                except httpx.HTTPError as e:
                    raise RemoteUnavailableError(f"Scoring service request failed: {e}") from e

        payload = _parse_json(resp)
        if resp.status_code in (401, 403):
            raise RemoteAuthError(resp.status_code, payload)

        return RemoteResponse(status_code=resp.status_code, payload=payload)


def _parse_json(resp: httpx.Response) -> dict[str, Any]:
    """Response body as a dict; anything unparseable becomes {}."""
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {"data": data}
