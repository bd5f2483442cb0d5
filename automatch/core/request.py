"""
Funding request data model.

A funding request ("deal") is a sponsor's project seeking allocation.
Built from a registry row plus its intake answers and treated as
read-only for the duration of a match computation.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from .coercion import (
    as_bool,
    as_float,
    as_mapping,
    as_optional_bool,
    as_str,
    as_str_list,
)
from .normalize import normalize_text


@dataclass(frozen=True)
class FundingRequest:
    """
    A sponsor's project seeking capital.

    Optional flags default as follows when unset:
    - is_owner_occupied: treated as True (most deals are owner-occupied)
    - is_real_estate: unknown, inferred from venture/project type
    - allocation_type: "federal"
    """

    request_id: str
    state: str = ""
    project_type: str = ""  # Sector category, e.g. "Healthcare/Medical"
    requested_amount: float = 0.0

    project_name: str = ""
    sponsor_name: str = ""
    city: str = ""

    # Financing posture
    is_owner_occupied: Optional[bool] = None
    is_real_estate: Optional[bool] = None
    venture_type: str = ""  # Intake answer, e.g. "Real Estate" / "Operating Business"

    # Impact / eligibility flags
    is_rural: bool = False
    is_nonprofit: bool = False
    is_minority_owned: bool = False
    is_tribal: bool = False
    severely_distressed: bool = False
    is_qct: bool = False
    distress_percentile: float = 0.0  # 0-100
    is_underserved_state: bool = False
    allocation_type: str = "federal"  # "federal" or "state"

    # Marketplace metadata
    status: str = ""
    programs: list[str] = field(default_factory=list)
    submitted_at: str = ""

    @property
    def owner_occupied(self) -> bool:
        """Owner-occupied with the documented default applied."""
        return True if self.is_owner_occupied is None else self.is_owner_occupied

    @property
    def tract_types(self) -> list[str]:
        """Tract classification labels for display."""
        types = []
        if self.is_qct:
            types.append("QCT")
        if self.severely_distressed:
            types.append("SD")
        return types or ["LIC"]

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "request_id": self.request_id,
            "project_name": self.project_name,
            "sponsor_name": self.sponsor_name,
            "city": self.city,
            "state": self.state,
            "project_type": self.project_type,
            "requested_amount": self.requested_amount,
            "is_owner_occupied": self.is_owner_occupied,
            "is_real_estate": self.is_real_estate,
            "venture_type": self.venture_type,
            "is_rural": self.is_rural,
            "is_nonprofit": self.is_nonprofit,
            "is_minority_owned": self.is_minority_owned,
            "is_tribal": self.is_tribal,
            "severely_distressed": self.severely_distressed,
            "is_qct": self.is_qct,
            "distress_percentile": self.distress_percentile,
            "is_underserved_state": self.is_underserved_state,
            "allocation_type": self.allocation_type,
            "status": self.status,
            "programs": list(self.programs),
            "submitted_at": self.submitted_at,
        }

    @classmethod
    def from_record(cls, row: dict[str, Any]) -> "FundingRequest":
        """
        Build from a registry row.

        The row carries snake_case columns and a nested ``intake_data``
        map of camelCase intake answers. Missing or malformed values fall
        back to defaults rather than raising.
        """
        row = as_mapping(row)
        intake = as_mapping(row.get("intake_data"))

        tract_classification = normalize_text(as_str(row.get("tract_classification")))
        is_rural = as_bool(intake.get("isRural")) or "rural" in tract_classification

        organization_type = normalize_text(
            as_str(intake.get("organizationType")) or as_str(intake.get("entityType"))
        )
        is_nonprofit = (
            "nonprofit" in organization_type
            or "non profit" in organization_type
            or "501" in organization_type
        )

        distress = as_float(intake.get("distressPercentile")) or as_float(row.get("distress_score"))

        return cls(
            request_id=as_str(row.get("id")),
            state=as_str(row.get("state")).strip(),
            project_type=as_str(
                intake.get("sectorCategory")
                or row.get("project_type")
                or intake.get("projectType")
            ),
            requested_amount=as_float(row.get("nmtc_financing_requested")),
            project_name=as_str(row.get("project_name")),
            sponsor_name=as_str(
                row.get("sponsor_organization_name") or row.get("sponsor_name")
            ),
            city=as_str(row.get("city")),
            is_owner_occupied=as_optional_bool(intake.get("isOwnerOccupied")),
            is_real_estate=as_optional_bool(intake.get("isRealEstate")),
            venture_type=as_str(intake.get("ventureType")),
            is_rural=is_rural,
            is_nonprofit=is_nonprofit,
            is_minority_owned=as_bool(intake.get("minorityOwned")) or as_bool(intake.get("isMinorityOwned")),
            is_tribal=as_bool(intake.get("isTribal")) or as_bool(intake.get("isAian")),
            severely_distressed=as_bool(row.get("tract_severely_distressed")),
            is_qct=as_bool(row.get("tract_eligible")),
            distress_percentile=min(max(distress, 0.0), 100.0),
            is_underserved_state=as_bool(intake.get("isUts")),
            allocation_type=as_str(row.get("program_level")) or "federal",
            status=as_str(row.get("status")),
            programs=as_str_list(row.get("programs")),
            submitted_at=as_str(row.get("submitted_at") or row.get("created_at")),
        )
