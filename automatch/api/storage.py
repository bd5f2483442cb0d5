"""
Registry storage with in-memory and JSON file persistence.

Holds the raw allocator registry rows (one per organization per
allocation year) and funding request rows. Rows are kept as plain
dicts, the way the registry returns them, and converted to typed
records on read.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from automatch.core import AllocatorMandate, FundingRequest


# Request statuses visible to allocator scans
AVAILABLE_STATUSES = ("available", "seeking_capital")


class RegistryError(Exception):
    """Raised when the registry cannot be read or written."""


class RegistryStorage:
    """
    In-memory registry storage with optional JSON file persistence.

    The file is read lazily on first access so a corrupt file surfaces as
    a RegistryError at the call site instead of at construction.
    """

    def __init__(self, storage_path: Optional[str] = None):
        """
        Initialize storage.

        Args:
            storage_path: Optional path to JSON file for persistence.
                         If None, storage is in-memory only.
        """
        self._allocators: dict[str, dict[str, Any]] = {}
        self._requests: dict[str, dict[str, Any]] = {}
        self._storage_path = storage_path
        self._loaded = storage_path is None

    def _ensure_loaded(self) -> None:
        """Load rows from the JSON file if not already loaded."""
        if self._loaded:
            return

        path = Path(self._storage_path)
        if path.exists():
            try:
                with open(path, "r") as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                raise RegistryError(f"Could not load registry from {path}: {e}") from e

            if not isinstance(data, dict):
                raise RegistryError(f"Registry file {path} is not a JSON object")

            for row in data.get("allocators", []):
                if isinstance(row, dict) and row.get("id"):
                    self._allocators[str(row["id"])] = row
            for row in data.get("requests", []):
                if isinstance(row, dict) and row.get("id"):
                    self._requests[str(row["id"])] = row

        self._loaded = True

    def _save(self) -> None:
        """Save rows to JSON file if path is set."""
        if not self._storage_path:
            return

        path = Path(self._storage_path)
        data = {
            "version": "1.0",
            "updated_at": datetime.now().isoformat(),
            "allocators": list(self._allocators.values()),
            "requests": list(self._requests.values()),
        }

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            raise RegistryError(f"Could not save registry to {path}: {e}") from e

    # -- Allocator rows ------------------------------------------------------

    def add_allocator(self, row: dict[str, Any]) -> AllocatorMandate:
        """
        Add or replace an allocator registry row.

        Raises:
            ValueError: If the row has no id
        """
        self._ensure_loaded()
        if not row.get("id"):
            raise ValueError("Allocator row requires an 'id'")

        self._allocators[str(row["id"])] = dict(row)
        self._save()
        return AllocatorMandate.from_record(row)

    def find_allocator(self, allocator_id: str) -> Optional[AllocatorMandate]:
        """
        Find an allocator by row id or organization id.

        An organization id resolves to its most recent allocation-year row.
        """
        self._ensure_loaded()
        row = self._allocators.get(allocator_id)
        if row is not None:
            return AllocatorMandate.from_record(row)

        org_rows = [
            AllocatorMandate.from_record(r)
            for r in self._allocators.values()
            if str(r.get("organization_id") or "") == allocator_id
        ]
        if not org_rows:
            return None
        return max(org_rows, key=lambda m: m.year)

    def active_allocators(self, limit: int = 1000) -> list[AllocatorMandate]:
        """Active allocator rows, in registry order, capped at limit."""
        self._ensure_loaded()
        active = [
            row for row in self._allocators.values()
            if str(row.get("status") or "active").lower() == "active"
        ]
        return [AllocatorMandate.from_record(row) for row in active[:limit]]

    # -- Funding request rows ------------------------------------------------

    def add_request(self, row: dict[str, Any]) -> FundingRequest:
        """
        Add or replace a funding request row.

        Raises:
            ValueError: If the row has no id
        """
        self._ensure_loaded()
        if not row.get("id"):
            raise ValueError("Request row requires an 'id'")

        self._requests[str(row["id"])] = dict(row)
        self._save()
        return FundingRequest.from_record(row)

    def get_request(self, request_id: str) -> Optional[FundingRequest]:
        """Get a funding request by id."""
        self._ensure_loaded()
        row = self._requests.get(request_id)
        return FundingRequest.from_record(row) if row is not None else None

    def available_requests(self, limit: int = 100, program: str = "NMTC") -> list[FundingRequest]:
        """Requests open to allocators for the given program, capped at limit."""
        self._ensure_loaded()
        results = []

        for row in self._requests.values():
            request = FundingRequest.from_record(row)
            if request.status not in AVAILABLE_STATUSES:
                continue
            if program and program not in request.programs:
                continue
            results.append(request)
            if len(results) >= limit:
                break

        return results

    def count(self) -> dict[str, int]:
        """Get row counts."""
        self._ensure_loaded()
        return {"allocators": len(self._allocators), "requests": len(self._requests)}


def create_sample_registry(storage: RegistryStorage) -> None:
    """Seed a small registry for local development."""

    allocators = [
        {
            "id": "cde-2023-0141",
            "organization_id": "org-heartland-capital",
            "name": "Heartland Community Capital",
            "year": 2023,
            "service_area_type": "regional",
            "predominant_market": "IA,KS,MO,NE",
            "predominant_financing": "Real Estate Financing - Community Facilities",
            "innovative_activities": "Small dollar QLICIs; targeting identified states",
            "non_metro_commitment": 55,
            "min_deal_size": 2000000,
            "max_deal_size": 12000000,
            "amount_remaining": 8500000,
            "status": "active",
        },
        {
            "id": "cde-2024-0098",
            "organization_id": "org-heartland-capital",
            "name": "Heartland Community Capital",
            "year": 2024,
            "service_area_type": "regional",
            "predominant_market": "IA,KS,MO,NE,OK",
            "predominant_financing": "Real Estate Financing - Community Facilities",
            "innovative_activities": "Small dollar QLICIs",
            "non_metro_commitment": 48,
            "min_deal_size": 3000000,
            "max_deal_size": 15000000,
            "amount_remaining": 25000000,
            "status": "active",
        },
        {
            "id": "cde-2024-0212",
            "organization_id": "org-meridian-impact",
            "name": "Meridian Impact Fund",
            "year": 2024,
            "service_area_type": "national",
            "predominant_market": "National",
            "predominant_financing": "Operating Business Financing",
            "innovative_activities": "Providing QLICIs for Non-Real Estate Activities",
            "min_deal_size": 5000000,
            "max_deal_size": 20000000,
            "amount_remaining": 40000000,
            "status": "active",
        },
    ]

    requests = [
        {
            "id": "deal-10482",
            "project_name": "Wichita Eastside Health Center",
            "sponsor_name": "Eastside Health Partners",
            "city": "Wichita",
            "state": "KS",
            "project_type": "Healthcare/Medical",
            "nmtc_financing_requested": 6500000,
            "tract_eligible": True,
            "tract_severely_distressed": True,
            "status": "available",
            "programs": ["NMTC"],
            "intake_data": {"organizationType": "501(c)(3) Nonprofit", "isOwnerOccupied": True},
        },
        {
            "id": "deal-10517",
            "project_name": "Rio Grande Food Processing Expansion",
            "sponsor_name": "Valle Foods Cooperative",
            "city": "McAllen",
            "state": "TX",
            "project_type": "Industrial/Manufacturing",
            "nmtc_financing_requested": 9000000,
            "tract_eligible": True,
            "status": "seeking_capital",
            "programs": ["NMTC"],
            "intake_data": {"isOwnerOccupied": False, "ventureType": "Operating Business"},
        },
    ]

    for row in allocators:
        storage.add_allocator(row)
    for row in requests:
        storage.add_request(row)
