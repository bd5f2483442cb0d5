"""
Allocator mandate data model.

Defines an allocator's investable criteria as recorded in the
allocation registry:
- Coverage mode and geography
- Free-text market / financing / activities descriptions
- Deal size range and remaining capacity
- Preference flags mirroring the funding request flags

The registry stores one row per organization per allocation year,
so a single organization may have several mandates.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .coercion import (
    as_bool,
    as_float,
    as_int,
    as_int_set,
    as_mapping,
    as_optional_bool,
    as_optional_float,
    as_str,
    as_str_list,
)
from .normalize import normalize_text


class CoverageMode(Enum):
    """Geographic coverage of an allocator's service area."""

    NATIONAL = "national"
    REGIONAL = "regional"
    STATEWIDE = "statewide"  # Single geography
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class AllocatorMandate:
    """
    One allocation-year record of an allocator's mandate.

    Preference flags that the enricher can infer are Optional[bool].
    None and False both mean "not recorded" to the enricher, which may
    set them from registry text. The scorer treats None as False.
    """

    # Identification
    allocator_id: str  # Registry row id (unique per year)
    organization_id: str = ""  # Shared across an organization's yearly rows
    name: str = ""
    year: int = 0
    allocation_years: frozenset[int] = field(default_factory=frozenset)

    # Geography
    service_area_type: str = ""  # "national", "regional", "statewide", ...
    primary_states: tuple[str, ...] = ()

    # Registry free text
    predominant_market: str = ""
    predominant_financing: str = ""
    innovative_activities: str = ""
    non_metro_commitment: float = 0.0  # Percent of QLICIs in non-metro areas

    # Deal size (USD)
    min_deal_size: Optional[float] = None
    max_deal_size: Optional[float] = None

    # Preference flags
    rural_focus: Optional[bool] = None
    urban_focus: bool = False
    minority_focus: bool = False
    underserved_geography_focus: Optional[bool] = None
    native_american_focus: Optional[bool] = None
    small_deal_fund: Optional[bool] = None
    owner_occupied_preferred: bool = False
    nonprofit_preferred: bool = False
    forprofit_accepted: bool = True
    require_severely_distressed: bool = False
    min_distress_percentile: float = 0.0

    # Capacity
    remaining_allocation: float = 0.0
    allocation_type: str = "federal"
    target_sectors: tuple[str, ...] = ()

    status: str = "active"

    @property
    def org_key(self) -> str:
        """Grouping key for per-organization aggregation."""
        return self.organization_id or self.allocator_id

    @property
    def coverage(self) -> CoverageMode:
        service_type = normalize_text(self.service_area_type)
        for mode in CoverageMode:
            if service_type == mode.value:
                return mode
        return CoverageMode.UNKNOWN

    @property
    def active_years(self) -> frozenset[int]:
        """Years with active allocation, falling back to the row's own year."""
        if self.allocation_years:
            return self.allocation_years
        return frozenset({self.year}) if self.year else frozenset()

    def to_dict(self) -> dict:
        """Convert mandate to dictionary representation."""
        return {
            "id": self.allocator_id,
            "organization_id": self.organization_id,
            "name": self.name,
            "year": self.year,
            "allocation_years": sorted(self.allocation_years),
            "service_area_type": self.service_area_type,
            "primary_states": list(self.primary_states),
            "predominant_market": self.predominant_market,
            "predominant_financing": self.predominant_financing,
            "innovative_activities": self.innovative_activities,
            "non_metro_commitment": self.non_metro_commitment,
            "min_deal_size": self.min_deal_size,
            "max_deal_size": self.max_deal_size,
            "rural_focus": self.rural_focus,
            "urban_focus": self.urban_focus,
            "minority_focus": self.minority_focus,
            "uts_focus": self.underserved_geography_focus,
            "native_american_focus": self.native_american_focus,
            "small_deal_fund": self.small_deal_fund,
            "owner_occupied_preferred": self.owner_occupied_preferred,
            "nonprofit_preferred": self.nonprofit_preferred,
            "forprofit_accepted": self.forprofit_accepted,
            "require_severely_distressed": self.require_severely_distressed,
            "min_distress_percentile": self.min_distress_percentile,
            "amount_remaining": self.remaining_allocation,
            "allocation_type": self.allocation_type,
            "target_sectors": list(self.target_sectors),
            "status": self.status,
        }

    @classmethod
    def from_record(cls, row: dict[str, Any]) -> "AllocatorMandate":
        """
        Create mandate from a registry row.

        Accepts legacy column names (underserved_states_focus,
        min_distress_score) and defaults anything missing or malformed.
        """
        row = as_mapping(row)

        uts_focus = row.get("uts_focus")
        if uts_focus is None:
            uts_focus = row.get("underserved_states_focus")

        min_distress = as_float(row.get("min_distress_percentile")) or as_float(
            row.get("min_distress_score")
        )

        forprofit = as_optional_bool(row.get("forprofit_accepted"))

        return cls(
            allocator_id=as_str(row.get("id")),
            organization_id=as_str(row.get("organization_id")),
            name=as_str(row.get("name")),
            year=as_int(row.get("year")),
            allocation_years=as_int_set(row.get("allocation_years")),
            service_area_type=as_str(row.get("service_area_type")),
            primary_states=tuple(as_str_list(row.get("primary_states"))),
            predominant_market=as_str(row.get("predominant_market")),
            predominant_financing=as_str(row.get("predominant_financing")),
            innovative_activities=as_str(row.get("innovative_activities")),
            non_metro_commitment=as_float(row.get("non_metro_commitment")),
            min_deal_size=as_optional_float(row.get("min_deal_size")),
            max_deal_size=as_optional_float(row.get("max_deal_size")),
            rural_focus=as_optional_bool(row.get("rural_focus")),
            urban_focus=as_bool(row.get("urban_focus")),
            minority_focus=as_bool(row.get("minority_focus")),
            underserved_geography_focus=as_optional_bool(uts_focus),
            native_american_focus=as_optional_bool(row.get("native_american_focus")),
            small_deal_fund=as_optional_bool(row.get("small_deal_fund")),
            owner_occupied_preferred=as_bool(row.get("owner_occupied_preferred")),
            nonprofit_preferred=as_bool(row.get("nonprofit_preferred")),
            forprofit_accepted=True if forprofit is None else forprofit,
            require_severely_distressed=as_bool(row.get("require_severely_distressed")),
            min_distress_percentile=min_distress,
            remaining_allocation=as_float(row.get("amount_remaining")),
            allocation_type=as_str(row.get("allocation_type")) or "federal",
            target_sectors=tuple(as_str_list(row.get("target_sectors"))),
            status=as_str(row.get("status"), default="active"),
        )
