"""
Binary criteria scoring for funding request / allocator mandate pairs.

Scoring model:
- 2 eliminators (geographic + financing): failing either scores 0
- 15 binary criteria in total (0 or 1 each, including the eliminators)
- score = round(points / 15 x 100), no weighting

This module is the single implementation of the rubric. Both the
authoritative scoring service and the local fallback call score_match().
"""

from dataclasses import dataclass, field
from enum import Enum

from .eliminators import passes_financing, passes_geographic
from .lookups import (
    MATCH_THRESHOLDS,
    SMALL_DEAL_THRESHOLD,
    TOTAL_CRITERIA,
    UNDERSERVED_STATES_BY_YEAR,
)
from .mandate import AllocatorMandate, CoverageMode
from .normalize import contains_word, get_state_info, normalize_text
from .request import FundingRequest


class MatchTier(Enum):
    """Qualitative match strength."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    WEAK = "weak"


# Canonical criterion names, in evaluation order
CRITERIA = (
    "geographic",
    "financing",
    "urbanRural",
    "sector",
    "dealSize",
    "smallDealFund",
    "severelyDistressed",
    "distressPercentile",
    "minorityFocus",
    "underservedGeographyFocus",
    "entityType",
    "ownerOccupied",
    "tribal",
    "allocationType",
    "hasAllocation",
)


@dataclass
class MatchResult:
    """
    Result of scoring one request against one mandate.

    breakdown holds all 15 criteria when both eliminators pass, otherwise
    only the eliminator(s) evaluated before the failure.
    """

    score: int  # 0 to 100
    tier: MatchTier
    breakdown: dict[str, int] = field(default_factory=dict)
    reasons: list[str] = field(default_factory=list)

    @property
    def eliminated(self) -> bool:
        return len(self.breakdown) < TOTAL_CRITERIA

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "score": self.score,
            "tier": self.tier.value,
            "breakdown": dict(self.breakdown),
            "reasons": list(self.reasons),
        }


def classify_tier(score: int) -> MatchTier:
    """Convert numeric score to a match tier."""
    if score >= MATCH_THRESHOLDS["excellent"]:
        return MatchTier.EXCELLENT
    elif score >= MATCH_THRESHOLDS["good"]:
        return MatchTier.GOOD
    elif score >= MATCH_THRESHOLDS["fair"]:
        return MatchTier.FAIR
    else:
        return MatchTier.WEAK


def get_match_tier_label(score: int) -> str:
    """Display label for a score (Excellent / Good / Fair / Poor)."""
    tier = classify_tier(score)
    if tier == MatchTier.WEAK:
        return "Poor"
    return tier.value.capitalize()


def is_underserved_state(state: str, allocation_years: frozenset[int]) -> bool:
    """
    Check whether a state is underserved in any of the given allocation years.

    Full state names resolve to their code first. Codes outside the state
    table (territories such as PR) are looked up as given.
    """
    info = get_state_info(state)
    code = info.abbrev if info else (state or "").strip().upper()
    if not code:
        return False
    return any(
        code in UNDERSERVED_STATES_BY_YEAR.get(year, frozenset())
        for year in allocation_years
    )


def _is_national(mandate: AllocatorMandate) -> bool:
    if mandate.coverage == CoverageMode.NATIONAL:
        return True
    return contains_word(normalize_text(mandate.predominant_market), "national")


def _score_urban_rural(request: FundingRequest, mandate: AllocatorMandate) -> int:
    rural_focus = bool(mandate.rural_focus)
    if request.is_rural and rural_focus:
        return 1
    if not request.is_rural and mandate.urban_focus:
        return 1
    if not rural_focus and not mandate.urban_focus:
        return 1
    return 0


def _score_sector(request: FundingRequest, mandate: AllocatorMandate) -> int:
    if not mandate.target_sectors:
        return 1

    category = normalize_text(request.project_type)
    for sector in (normalize_text(s) for s in mandate.target_sectors):
        if sector and (sector in category or category in sector):
            return 1

    market = normalize_text(mandate.predominant_market)
    if category and market and category in market:
        return 1
    return 0


def _score_deal_size(amount: float, mandate: AllocatorMandate) -> int:
    minimum = mandate.min_deal_size or 0
    maximum = mandate.max_deal_size or float("inf")
    return 1 if minimum <= amount <= maximum else 0


def score_match(request: FundingRequest, mandate: AllocatorMandate) -> MatchResult:
    """
    Score a funding request against an allocator mandate.

    Args:
        request: The funding request
        mandate: The allocator mandate (enriched beforehand if needed)

    Returns:
        MatchResult with score, tier, criteria breakdown and reasons
    """
    if not passes_geographic(request, mandate):
        return MatchResult(
            score=0,
            tier=MatchTier.WEAK,
            breakdown={"geographic": 0},
            reasons=[f"Does not serve {request.state}"],
        )

    if not passes_financing(request, mandate):
        return MatchResult(
            score=0,
            tier=MatchTier.WEAK,
            breakdown={"geographic": 1, "financing": 0},
            reasons=["Financing type mismatch"],
        )

    reasons = ["National coverage" if _is_national(mandate) else f"Serves {request.state}"]
    scores: dict[str, int] = {}

    # 1-2. Eliminators (both passed)
    scores["geographic"] = 1
    scores["financing"] = 1
    if mandate.predominant_financing:
        label = "Real Estate" if "real estate" in normalize_text(mandate.predominant_financing) else "Business"
        reasons.append(f"Financing: {label}")

    # 3. Urban / rural
    scores["urbanRural"] = _score_urban_rural(request, mandate)

    # 4. Sector
    scores["sector"] = _score_sector(request, mandate)
    if scores["sector"] and mandate.target_sectors:
        reasons.append("Sector match")

    # 5. Deal size (inclusive range)
    amount = request.requested_amount or 0
    scores["dealSize"] = _score_deal_size(amount, mandate)
    if scores["dealSize"]:
        reasons.append("Deal size fits")

    # 6. Small deal fund
    is_small_deal = 0 < amount <= SMALL_DEAL_THRESHOLD
    scores["smallDealFund"] = 1 if not is_small_deal or mandate.small_deal_fund else 0

    # 7. Severely distressed
    scores["severelyDistressed"] = (
        1 if not mandate.require_severely_distressed or request.severely_distressed else 0
    )
    if request.severely_distressed:
        reasons.append("Distressed tract")

    # 8. Distress percentile (0 means no minimum)
    min_distress = mandate.min_distress_percentile or 0
    if min_distress == 0:
        scores["distressPercentile"] = 1
    else:
        scores["distressPercentile"] = 1 if request.distress_percentile >= min_distress else 0

    # 9. Minority focus
    scores["minorityFocus"] = 1 if not mandate.minority_focus or request.is_minority_owned else 0

    # 10. Underserved geography, checked against every active allocation year
    underserved = request.is_underserved_state or is_underserved_state(
        request.state, mandate.active_years
    )
    scores["underservedGeographyFocus"] = (
        1 if not mandate.underserved_geography_focus or underserved else 0
    )
    if underserved and mandate.underserved_geography_focus:
        reasons.append("Underserved target state")

    # 11. Entity type
    scores["entityType"] = 0 if not mandate.forprofit_accepted and not request.is_nonprofit else 1
    if mandate.nonprofit_preferred and request.is_nonprofit:
        reasons.append("Nonprofit preferred match")

    # 12. Owner occupied (request defaults to owner-occupied)
    scores["ownerOccupied"] = 1 if not mandate.owner_occupied_preferred or request.owner_occupied else 0
    if request.is_owner_occupied:
        reasons.append("Owner-occupied")

    # 13. Tribal
    scores["tribal"] = 1 if not mandate.native_american_focus or request.is_tribal else 0

    # 14. Allocation type
    request_type = normalize_text(request.allocation_type or "federal")
    mandate_type = normalize_text(mandate.allocation_type or "federal")
    scores["allocationType"] = (
        1 if not request_type or not mandate_type or request_type == mandate_type else 0
    )

    # 15. Has allocation
    scores["hasAllocation"] = 1 if (mandate.remaining_allocation or 0) > 0 else 0

    total_points = sum(scores.values())
    score = round(total_points / TOTAL_CRITERIA * 100)

    return MatchResult(
        score=score,
        tier=classify_tier(score),
        breakdown=scores,
        reasons=reasons,
    )


def calculate_request_score(request: FundingRequest) -> int:
    """
    Marketplace ranking score for a funding request on its own.

    Base 50, plus impact bonuses, capped at 100.
    """
    score = 50
    if request.severely_distressed:
        score += 20
    if request.is_qct:
        score += 10
    if request.is_nonprofit:
        score += 10
    if request.requested_amount >= SMALL_DEAL_THRESHOLD:
        score += 10
    return min(score, 100)
