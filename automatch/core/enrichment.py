"""
Mandate enrichment.

Many registry rows leave preference columns null. Enrichers infer
plausible values from the adjacent free-text fields so the scorer never
has to special-case "unknown".

Enrichment only fills fields that are unset: None, empty or False.
Registry boolean columns default to False, so a stored False counts as
"not recorded". True flags and non-empty lists are never overwritten,
and enriching an already-enriched mandate returns it unchanged.
"""

from dataclasses import replace
from typing import Any, Callable

from .lookups import RURAL_COMMITMENT_THRESHOLD, Sector
from .mandate import AllocatorMandate
from .normalize import parse_state_codes


class MandateEnricher:
    """Base enricher: returns the mandate untouched."""

    def enrich(self, mandate: AllocatorMandate) -> AllocatorMandate:
        return mandate

    def enrich_all(self, mandates: list[AllocatorMandate]) -> list[AllocatorMandate]:
        return [self.enrich(mandate) for mandate in mandates]


# Keyword families in the financing description -> sector labels
FINANCING_SECTOR_RULES: list[tuple[tuple[str, ...], tuple[str, ...]]] = [
    (("community", "facilit"), (
        Sector.COMMUNITY_FACILITY,
        Sector.HEALTHCARE,
        Sector.EDUCATION,
        Sector.CHILDCARE,
        Sector.SENIOR_SERVICES,
        Sector.FOOD_ACCESS,
    )),
    (("industrial", "manufactur"), (Sector.INDUSTRIAL,)),
    (("mixed",), (Sector.MIXED_USE, Sector.RETAIL_COMMERCIAL, Sector.HOUSING)),
    (("housing", "for-sale"), (Sector.HOUSING,)),
    (("office",), (Sector.RETAIL_COMMERCIAL,)),
    (("retail",), (Sector.RETAIL_COMMERCIAL,)),
    (("operating", "business"), (Sector.RETAIL_COMMERCIAL, Sector.INDUSTRIAL)),
    (("other real estate",), (Sector.MIXED_USE, Sector.RETAIL_COMMERCIAL)),
]

# "Providing QLICIs for Non-Real Estate Activities" signals business financing
ACTIVITY_SECTOR_RULES: list[tuple[tuple[str, ...], tuple[str, ...]]] = [
    (("non-real estate",), (Sector.RETAIL_COMMERCIAL, Sector.INDUSTRIAL)),
]

# Market-text hints
MARKET_SECTOR_RULES: list[tuple[tuple[str, ...], tuple[str, ...]]] = [
    (("health", "medical"), (Sector.HEALTHCARE,)),
    (("education", "school"), (Sector.EDUCATION,)),
    (("food", "grocery"), (Sector.FOOD_ACCESS,)),
    (("child", "daycare"), (Sector.CHILDCARE,)),
    (("senior", "elder"), (Sector.SENIOR_SERVICES,)),
]

TRIBAL_KEYWORDS = ("indian country", "tribal")
SMALL_DOLLAR_KEYWORDS = ("small dollar",)
UNDERSERVED_KEYWORDS = ("targeting identified states", "underserved")


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)


def _apply_sector_rules(
    text: str,
    rules: list[tuple[tuple[str, ...], tuple[str, ...]]],
) -> list[str]:
    sectors: list[str] = []
    for keywords, labels in rules:
        if _contains_any(text, keywords):
            sectors.extend(labels)
    return sectors


def derive_target_sectors(mandate: AllocatorMandate) -> tuple[str, ...]:
    """Map registry free text to the intake-form sector vocabulary."""
    financing = mandate.predominant_financing.lower()
    activities = mandate.innovative_activities.lower()
    market = mandate.predominant_market.lower()

    sectors = _apply_sector_rules(financing, FINANCING_SECTOR_RULES)
    sectors += _apply_sector_rules(activities, ACTIVITY_SECTOR_RULES)
    sectors += _apply_sector_rules(market, MARKET_SECTOR_RULES)

    # De-duplicate, preserving first-seen order
    return tuple(dict.fromkeys(sectors))


class RegistryTextEnricher(MandateEnricher):
    """
    Infers missing preferences from registry free text.

    - primary_states from comma-separated codes in the market field
    - rural_focus from a non-metro commitment of 40% or more
    - native_american_focus / small_deal_fund / underserved focus from
      keywords in the innovative activities field
    - target_sectors from financing, activities and market keywords
    """

    def __init__(self, rural_threshold: float = RURAL_COMMITMENT_THRESHOLD):
        self.rural_threshold = rural_threshold

    def enrich(self, mandate: AllocatorMandate) -> AllocatorMandate:
        activities = mandate.innovative_activities.lower()
        updates: dict[str, Any] = {}

        if not mandate.primary_states:
            states = parse_state_codes(mandate.predominant_market)
            if states:
                updates["primary_states"] = tuple(states)

        inferred_flags: dict[str, Callable[[], bool]] = {
            "rural_focus": lambda: mandate.non_metro_commitment >= self.rural_threshold,
            "native_american_focus": lambda: _contains_any(activities, TRIBAL_KEYWORDS),
            "small_deal_fund": lambda: _contains_any(activities, SMALL_DOLLAR_KEYWORDS),
            "underserved_geography_focus": lambda: _contains_any(activities, UNDERSERVED_KEYWORDS),
        }
        for field_name, infer in inferred_flags.items():
            current = getattr(mandate, field_name)
            if not current:
                inferred = infer()
                if inferred != current:
                    updates[field_name] = inferred

        if not mandate.target_sectors:
            sectors = derive_target_sectors(mandate)
            if sectors:
                updates["target_sectors"] = sectors

        if not updates:
            return mandate
        return replace(mandate, **updates)


DEFAULT_ENRICHER = RegistryTextEnricher()
