"""
Hard elimination gates.

Two gates are evaluated before any preference scoring: geographic
coverage and financing-type compatibility. Failing either one zeroes
the match. Both are total: they return a bool for every input,
including empty fields, and give the benefit of the doubt whenever a
side is unknown.
"""

from enum import Enum

from .lookups import REAL_ESTATE_KEYWORDS
from .mandate import AllocatorMandate, CoverageMode
from .normalize import contains_word, get_state_info, normalize_text, parse_state_codes
from .request import FundingRequest


class FinancingCategory(Enum):
    """Financing posture of either side of a match."""

    REAL_ESTATE = "real_estate"
    BUSINESS = "business"
    UNKNOWN = "unknown"


def passes_geographic(request: FundingRequest, mandate: AllocatorMandate) -> bool:
    """
    Check the allocator serves the request's state.

    Passes when coverage is national, when the state code or full name is
    listed in primary_states, when the code appears as a standalone token
    in the market text, or when the full name appears there as a whole
    word. A request without a resolvable state passes.
    """
    if mandate.coverage == CoverageMode.NATIONAL:
        return True

    state = get_state_info(request.state)
    if state is None:
        return True

    for listed in mandate.primary_states:
        cleaned = listed.strip()
        if cleaned.upper() == state.abbrev or cleaned.lower() == state.name:
            return True

    market = mandate.predominant_market
    if market:
        if state.abbrev in parse_state_codes(market):
            return True
        if contains_word(market, state.name):
            return True

    return False


def classify_mandate_financing(mandate: AllocatorMandate) -> FinancingCategory:
    """Classify the mandate's predominant financing text."""
    financing = normalize_text(mandate.predominant_financing)
    if "real estate" in financing:
        return FinancingCategory.REAL_ESTATE
    if "business" in financing or "operating" in financing:
        return FinancingCategory.BUSINESS
    return FinancingCategory.UNKNOWN


def classify_request_financing(request: FundingRequest) -> FinancingCategory:
    """
    Classify the request's financing need.

    Explicit is_real_estate first, then the intake venture type, then a
    keyword match on the project type.
    """
    if request.is_real_estate is not None:
        return FinancingCategory.REAL_ESTATE if request.is_real_estate else FinancingCategory.BUSINESS

    venture = normalize_text(request.venture_type)
    if "real estate" in venture:
        return FinancingCategory.REAL_ESTATE
    if "business" in venture or "operating" in venture:
        return FinancingCategory.BUSINESS

    project_type = normalize_text(request.project_type)
    if project_type and any(keyword in project_type for keyword in REAL_ESTATE_KEYWORDS):
        return FinancingCategory.REAL_ESTATE

    return FinancingCategory.UNKNOWN


def passes_financing(request: FundingRequest, mandate: AllocatorMandate) -> bool:
    """
    Check financing-type compatibility.

    Owner-occupied requests are financeable under either posture and
    always pass. Otherwise both sides must share a known category.
    """
    if request.owner_occupied:
        return True

    mandate_category = classify_mandate_financing(mandate)
    request_category = classify_request_financing(request)

    if FinancingCategory.UNKNOWN in (mandate_category, request_category):
        return True

    return mandate_category == request_category
