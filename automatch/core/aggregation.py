"""
Pool scoring: per-organization aggregation and ranked result lists.

The allocation registry stores one row per organization per allocation
year. When a request is scored against the registry, each organization
is reported once with its best-scoring year, under the id of its most
recent row (the currently active registration).
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence, TypeVar

from .enrichment import DEFAULT_ENRICHER, MandateEnricher
from .mandate import AllocatorMandate
from .request import FundingRequest
from .scoring import MatchResult, MatchTier, score_match


@dataclass
class OrgMatch:
    """Best match for one allocator organization."""

    allocator_id: str  # Id of the organization's most recent year row
    allocator_name: str
    score: int
    tier: MatchTier
    breakdown: dict[str, int] = field(default_factory=dict)
    reasons: list[str] = field(default_factory=list)
    organization_id: str = ""
    scored_year: int = 0  # Year of the row that produced the score

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "allocatorId": self.allocator_id,
            "allocatorName": self.allocator_name,
            "organizationId": self.organization_id,
            "score": self.score,
            "tier": self.tier.value,
            "breakdown": dict(self.breakdown),
            "reasons": list(self.reasons),
        }


@dataclass
class RequestMatch:
    """A funding request found by an allocator-side scan."""

    request: FundingRequest
    result: MatchResult

    @property
    def score(self) -> int:
        return self.result.score

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        request = self.request
        return {
            "requestId": request.request_id,
            "projectName": request.project_name or "Untitled",
            "sponsorName": request.sponsor_name or "Unknown",
            "city": request.city,
            "state": request.state,
            "requestedAmount": request.requested_amount,
            "score": self.result.score,
            "tier": self.result.tier.value,
            "tractTypes": request.tract_types,
            "program": request.programs[0] if request.programs else "NMTC",
            "breakdown": dict(self.result.breakdown),
            "reasons": list(self.result.reasons),
            "submittedAt": request.submitted_at,
        }


def latest_row_ids(mandates: Iterable[AllocatorMandate]) -> dict[str, str]:
    """Map each organization to the id of its most recent allocation-year row."""
    latest: dict[str, tuple[int, str]] = {}
    for mandate in mandates:
        existing = latest.get(mandate.org_key)
        if existing is None or mandate.year > existing[0]:
            latest[mandate.org_key] = (mandate.year, mandate.allocator_id)
    return {org: row_id for org, (_, row_id) in latest.items()}


def aggregate_by_organization(
    request: FundingRequest,
    mandates: Sequence[AllocatorMandate],
    enricher: Optional[MandateEnricher] = None,
) -> list[OrgMatch]:
    """
    Score every mandate row and keep the best year per organization.

    Ties keep the first row seen. The reported allocator_id is always the
    organization's latest-year row, which may differ from the row that
    produced the winning score.

    Returns:
        One OrgMatch per organization, in first-seen organization order
    """
    enricher = enricher or DEFAULT_ENRICHER
    latest_ids = latest_row_ids(mandates)
    best: dict[str, OrgMatch] = {}

    for mandate in mandates:
        result = score_match(request, enricher.enrich(mandate))
        org = mandate.org_key
        existing = best.get(org)

        if existing is None or result.score > existing.score:
            best[org] = OrgMatch(
                allocator_id=latest_ids.get(org, mandate.allocator_id),
                allocator_name=mandate.name or "Unknown",
                score=result.score,
                tier=result.tier,
                breakdown=result.breakdown,
                reasons=result.reasons,
                organization_id=org,
                scored_year=mandate.year,
            )

    return list(best.values())


T = TypeVar("T", OrgMatch, RequestMatch)


def rank_matches(matches: Iterable[T], min_score: float = 0, max_results: int = 500) -> list[T]:
    """
    Filter by minimum score, sort by score descending and cap.

    The sort is stable: equal scores keep their input order.
    """
    kept = [m for m in matches if m.score >= min_score]
    kept.sort(key=lambda m: m.score, reverse=True)
    return kept[:max(max_results, 0)]


def match_request_to_pool(
    request: FundingRequest,
    mandates: Sequence[AllocatorMandate],
    min_score: float = 0,
    max_results: int = 500,
    enricher: Optional[MandateEnricher] = None,
) -> list[OrgMatch]:
    """Score a request against an allocator pool and return the ranked list."""
    return rank_matches(
        aggregate_by_organization(request, mandates, enricher),
        min_score=min_score,
        max_results=max_results,
    )


def scan_requests(
    mandate: AllocatorMandate,
    requests: Iterable[FundingRequest],
    min_score: float = 70,
    max_results: int = 500,
    enricher: Optional[MandateEnricher] = None,
) -> list[RequestMatch]:
    """
    Find funding requests compatible with one allocator mandate.

    Args:
        mandate: The allocator mandate (enriched here)
        requests: Candidate funding requests
        min_score: Minimum score floor
        max_results: Result cap

    Returns:
        Ranked RequestMatch list
    """
    enriched = (enricher or DEFAULT_ENRICHER).enrich(mandate)
    matches = [RequestMatch(request=r, result=score_match(r, enriched)) for r in requests]
    return rank_matches(matches, min_score=min_score, max_results=max_results)
