"""
Core modules for the AutoMatch engine.

Pure, side-effect-free scoring shared by every call site:
- lookups: state tables, underserved states by year, thresholds
- normalize: text normalization and state resolution
- request / mandate: typed input records with documented defaults
- enrichment: infer missing mandate preferences from registry text
- eliminators: geographic and financing gates
- scoring: 15-criteria binary rubric, score and tier
- aggregation: per-organization best match, ranking and scans
"""

from .lookups import (
    TOTAL_CRITERIA,
    SMALL_DEAL_THRESHOLD,
    MATCH_THRESHOLDS,
    UNDERSERVED_STATES_BY_YEAR,
    ABBREV_TO_NAME,
    NAME_TO_ABBREV,
    SECTOR_CATEGORIES,
    Sector,
)
from .normalize import StateInfo, normalize_text, get_state_info, parse_state_codes
from .request import FundingRequest
from .mandate import AllocatorMandate, CoverageMode
from .enrichment import MandateEnricher, RegistryTextEnricher, DEFAULT_ENRICHER
from .eliminators import (
    FinancingCategory,
    passes_geographic,
    passes_financing,
    classify_mandate_financing,
    classify_request_financing,
)
from .scoring import (
    CRITERIA,
    MatchResult,
    MatchTier,
    score_match,
    classify_tier,
    get_match_tier_label,
    is_underserved_state,
    calculate_request_score,
)
from .aggregation import (
    OrgMatch,
    RequestMatch,
    aggregate_by_organization,
    latest_row_ids,
    rank_matches,
    match_request_to_pool,
    scan_requests,
)

__all__ = [
    # Lookup tables
    "TOTAL_CRITERIA",
    "SMALL_DEAL_THRESHOLD",
    "MATCH_THRESHOLDS",
    "UNDERSERVED_STATES_BY_YEAR",
    "ABBREV_TO_NAME",
    "NAME_TO_ABBREV",
    "SECTOR_CATEGORIES",
    "Sector",
    # Normalizer
    "StateInfo",
    "normalize_text",
    "get_state_info",
    "parse_state_codes",
    # Data models
    "FundingRequest",
    "AllocatorMandate",
    "CoverageMode",
    # Enrichment
    "MandateEnricher",
    "RegistryTextEnricher",
    "DEFAULT_ENRICHER",
    # Eliminators
    "FinancingCategory",
    "passes_geographic",
    "passes_financing",
    "classify_mandate_financing",
    "classify_request_financing",
    # Scoring
    "CRITERIA",
    "MatchResult",
    "MatchTier",
    "score_match",
    "classify_tier",
    "get_match_tier_label",
    "is_underserved_state",
    "calculate_request_score",
    # Aggregation
    "OrgMatch",
    "RequestMatch",
    "aggregate_by_organization",
    "latest_row_ids",
    "rank_matches",
    "match_request_to_pool",
    "scan_requests",
]
