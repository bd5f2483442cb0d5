"""
Static reference data for the matching engine.

Loaded once at import and never mutated:
- State abbreviation <-> full name tables
- Underserved target states per allocation round
- Match tier thresholds and the total criteria count
- Sector vocabulary shared with the intake forms
"""

from types import MappingProxyType


TOTAL_CRITERIA = 15

# Deals at or below this amount count as "small" for the small-deal-fund check
SMALL_DEAL_THRESHOLD = 5_000_000

# Non-metro commitment (%) at which an allocator is treated as rural-focused
RURAL_COMMITMENT_THRESHOLD = 40.0

# Underserved target states by allocation round. Deals in these states
# satisfy an underserved-geography focus for allocators funded that year.
UNDERSERVED_STATES_BY_YEAR = MappingProxyType({
    2025: frozenset({"AZ", "CA", "CO", "CT", "FL", "KS", "NC", "TX", "VA", "WV", "PR"}),
    2024: frozenset({"AZ", "CA", "CO", "CT", "FL", "KS", "NC", "TX", "VA", "WV", "PR"}),
    2023: frozenset({"AZ", "CA", "CO", "FL", "KS", "NV", "NC", "TX", "VA", "WV", "PR"}),
    2022: frozenset({
        "AZ", "CA", "CO", "FL", "NV", "NC", "TN", "TX", "VA", "WV",
        "VI", "AS", "GU", "MP",
    }),
})

ABBREV_TO_NAME = MappingProxyType({
    "AL": "alabama", "AK": "alaska", "AZ": "arizona", "AR": "arkansas",
    "CA": "california", "CO": "colorado", "CT": "connecticut", "DE": "delaware",
    "FL": "florida", "GA": "georgia", "HI": "hawaii", "ID": "idaho",
    "IL": "illinois", "IN": "indiana", "IA": "iowa", "KS": "kansas",
    "KY": "kentucky", "LA": "louisiana", "ME": "maine", "MD": "maryland",
    "MA": "massachusetts", "MI": "michigan", "MN": "minnesota", "MS": "mississippi",
    "MO": "missouri", "MT": "montana", "NE": "nebraska", "NV": "nevada",
    "NH": "new hampshire", "NJ": "new jersey", "NM": "new mexico", "NY": "new york",
    "NC": "north carolina", "ND": "north dakota", "OH": "ohio", "OK": "oklahoma",
    "OR": "oregon", "PA": "pennsylvania", "RI": "rhode island", "SC": "south carolina",
    "SD": "south dakota", "TN": "tennessee", "TX": "texas", "UT": "utah",
    "VT": "vermont", "VA": "virginia", "WA": "washington", "WV": "west virginia",
    "WI": "wisconsin", "WY": "wyoming",
})

NAME_TO_ABBREV = MappingProxyType({name: abbrev for abbrev, name in ABBREV_TO_NAME.items()})

# Match strength thresholds (score = points / 15 x 100)
MATCH_THRESHOLDS = MappingProxyType({
    "excellent": 80,
    "good": 65,
    "fair": 50,
    "weak": 0,
})


# Sector labels as used by the intake form. Derived target sectors must
# come from this list or sector matching silently fails.
class Sector:
    COMMUNITY_FACILITY = "Community Facility"
    HEALTHCARE = "Healthcare/Medical"
    EDUCATION = "Education/Schools"
    CHILDCARE = "Childcare/Early Education"
    SENIOR_SERVICES = "Senior Services"
    FOOD_ACCESS = "Food Access/Grocery"
    INDUSTRIAL = "Industrial/Manufacturing"
    MIXED_USE = "Mixed-Use"
    RETAIL_COMMERCIAL = "Retail/Commercial"
    HOUSING = "Housing/Residential"


SECTOR_CATEGORIES = (
    Sector.COMMUNITY_FACILITY,
    Sector.HEALTHCARE,
    Sector.EDUCATION,
    Sector.CHILDCARE,
    Sector.SENIOR_SERVICES,
    Sector.FOOD_ACCESS,
    Sector.INDUSTRIAL,
    Sector.MIXED_USE,
    Sector.RETAIL_COMMERCIAL,
    Sector.HOUSING,
)

# Project-type keywords that imply real estate financing
REAL_ESTATE_KEYWORDS = (
    "community facility", "community center", "healthcare", "medical", "clinic", "hospital",
    "education", "school", "charter", "housing", "residential", "affordable", "senior",
    "shelter", "homeless", "rescue", "mission", "childcare", "daycare", "industrial",
    "manufacturing", "warehouse", "retail", "commercial", "office", "mixed use",
    "renovation", "construction", "development", "building", "facility", "real estate",
)
