"""
AutoMatch orchestration.

Single-request runs try the remote authoritative scoring service first
and fall back to the local pipeline on auth rejection or unavailability.
Allocator scans always run locally. Both paths score with the same
automatch.core functions, so their results cannot drift.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

import structlog

from automatch.config import settings
from automatch.core import (
    DEFAULT_ENRICHER,
    MandateEnricher,
    match_request_to_pool,
    scan_requests,
)
from .remote import (
    RemoteAuthError,
    RemoteScoringClient,
    RemoteUnavailableError,
)
from .storage import RegistryError, RegistryStorage

logger = structlog.get_logger()


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class AutoMatchResponse:
    """
    Outcome of an AutoMatch call, normalized across both paths.

    status carries an HTTP-style code for the boundary layer. A remote
    success keeps the service's payload verbatim in ``payload``.
    """

    matches: list[dict[str, Any]] = field(default_factory=list)
    source: str = "local"  # "remote" or "local"
    status: int = 200
    error: Optional[str] = None
    request_id: str = ""
    timestamp: str = field(default_factory=_utc_now)
    payload: Optional[Any] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def to_dict(self) -> Any:
        """Convert to the JSON body returned to callers."""
        if self.payload is not None:
            return self.payload

        data: dict[str, Any] = {
            "matches": self.matches,
            "timestamp": self.timestamp,
            "source": self.source,
        }
        if self.request_id:
            data["requestId"] = self.request_id
        if self.error:
            data["error"] = self.error
        return data


class MatchOrchestrator:
    """
    Chooses between remote and local scoring.

    Args:
        storage: Registry the local pipeline reads from
        remote: Scoring service client (None disables the remote path)
        enricher: Mandate enricher used by the local pipeline
    """

    def __init__(
        self,
        storage: RegistryStorage,
        remote: Optional[RemoteScoringClient] = None,
        enricher: Optional[MandateEnricher] = None,
        allocator_limit: Optional[int] = None,
        request_limit: Optional[int] = None,
    ):
        self.storage = storage
        self.remote = remote
        self.enricher = enricher or DEFAULT_ENRICHER
        self.allocator_limit = allocator_limit or settings.ALLOCATOR_FETCH_LIMIT
        self.request_limit = request_limit or settings.REQUEST_FETCH_LIMIT

    def run_for_request(
        self,
        request_id: str,
        access_token: Optional[str] = None,
        min_score: float = settings.RUN_MIN_SCORE,
        max_results: int = settings.MAX_RESULTS,
        options: Optional[dict[str, Any]] = None,
    ) -> AutoMatchResponse:
        """
        Find allocators for one funding request.

        With an access token the remote service is tried first and its
        result returned verbatim. Auth rejection (401/403) or an
        unreachable service falls back to local scoring. Other remote
        error statuses are passed through.
        """
        if access_token and self.remote is not None:
            body = {"minScore": min_score, "maxResults": max_results, **(options or {})}
            try:
                resp = self.remote.run_automatch(request_id, access_token, body)
            except RemoteAuthError as e:
                logger.info("automatch_remote_auth_rejected", request_id=request_id, status=e.status_code)
            except RemoteUnavailableError as e:
                logger.info("automatch_remote_unavailable", request_id=request_id, error=str(e))
            else:
                if resp.ok:
                    return AutoMatchResponse(
                        source="remote",
                        status=resp.status_code,
                        request_id=request_id,
                        payload=resp.data,
                    )
                logger.warning("automatch_remote_failed", request_id=request_id, status=resp.status_code)
                return AutoMatchResponse(
                    source="remote",
                    status=resp.status_code,
                    request_id=request_id,
                    payload=resp.payload or {"error": "AutoMatch failed"},
                )

        return self.run_local(request_id, min_score=min_score, max_results=max_results)

    def run_local(
        self,
        request_id: str,
        min_score: float = settings.RUN_MIN_SCORE,
        max_results: int = settings.MAX_RESULTS,
    ) -> AutoMatchResponse:
        """Score a request against the active registry with the local pipeline."""
        try:
            request = self.storage.get_request(request_id)
            if request is None:
                return AutoMatchResponse(status=404, error="Request not found", request_id=request_id)

            mandates = self.storage.active_allocators(limit=self.allocator_limit)
        except RegistryError as e:
            logger.error("automatch_local_registry_failed", request_id=request_id, error=str(e))
            return AutoMatchResponse(status=500, error="AutoMatch scoring failed", request_id=request_id)

        matches = match_request_to_pool(
            request,
            mandates,
            min_score=min_score,
            max_results=max_results,
            enricher=self.enricher,
        )

        logger.info(
            "automatch_local_scoring",
            request_id=request_id,
            allocator_rows=len(mandates),
            matches=len(matches),
        )

        return AutoMatchResponse(
            matches=[m.to_dict() for m in matches],
            source="local",
            request_id=request_id,
        )

    def scan_for_allocator(
        self,
        allocator_id: str,
        min_score: float = settings.SCAN_MIN_SCORE,
        max_results: int = settings.MAX_RESULTS,
    ) -> AutoMatchResponse:
        """
        Find funding requests matching one allocator.

        Local pipeline only. The allocator may be given by row id or
        organization id. Unknown allocators return an empty list.
        """
        try:
            mandate = self.storage.find_allocator(allocator_id)
            if mandate is None:
                logger.info("automatch_scan_allocator_not_found", allocator_id=allocator_id)
                return AutoMatchResponse(error="Allocator not found")

            requests = self.storage.available_requests(limit=self.request_limit)
        except RegistryError as e:
            logger.error("automatch_scan_failed", allocator_id=allocator_id, error=str(e))
            return AutoMatchResponse(status=500, error="Scan failed")

        matches = scan_requests(
            mandate,
            requests,
            min_score=min_score,
            max_results=max_results,
            enricher=self.enricher,
        )

        logger.info(
            "automatch_scan",
            allocator_id=allocator_id,
            allocator_name=mandate.name,
            candidates=len(requests),
            matches=len(matches),
            min_score=min_score,
        )

        return AutoMatchResponse(matches=[m.to_dict() for m in matches])

    def get_saved_matches(self, request_id: str, access_token: Optional[str] = None) -> AutoMatchResponse:
        """Saved matches for a request, read from the remote service (no local fallback)."""
        if self.remote is None:
            return AutoMatchResponse(status=503, error="Scoring service not configured", request_id=request_id)

        try:
            resp = self.remote.get_matches(request_id, access_token)
        except RemoteAuthError as e:
            return AutoMatchResponse(
                source="remote",
                status=e.status_code,
                request_id=request_id,
                payload=e.payload or {"error": "Unauthorized"},
            )
        except RemoteUnavailableError as e:
            logger.warning("automatch_saved_matches_unavailable", request_id=request_id, error=str(e))
            return AutoMatchResponse(
                source="remote",
                status=503,
                error="Scoring service unavailable",
                request_id=request_id,
            )

        if not resp.ok:
            return AutoMatchResponse(
                source="remote",
                status=resp.status_code,
                request_id=request_id,
                payload=resp.payload or {"error": "Failed to fetch matches"},
            )

        return AutoMatchResponse(source="remote", status=resp.status_code, request_id=request_id, payload=resp.data)
