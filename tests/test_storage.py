"""
Tests for registry storage.
"""

import json

import pytest

from automatch.api import RegistryError, RegistryStorage, create_sample_registry


@pytest.fixture
def storage():
    """In-memory registry seeded with sample rows."""
    storage = RegistryStorage()
    create_sample_registry(storage)
    return storage


class TestRegistryStorage:
    """Test registry reads and writes."""

    def test_count(self, storage):
        """Sample registry counts."""
        assert storage.count() == {"allocators": 3, "requests": 2}

    def test_find_allocator_by_row_id(self, storage):
        """Row id finds that exact year."""
        mandate = storage.find_allocator("cde-2023-0141")
        assert mandate.year == 2023

    def test_find_allocator_by_organization(self, storage):
        """Organization id resolves to the latest year."""
        mandate = storage.find_allocator("org-heartland-capital")
        assert mandate.allocator_id == "cde-2024-0098"

    def test_find_missing_allocator(self, storage):
        """Unknown ids return None."""
        assert storage.find_allocator("nope") is None

    def test_active_allocators(self, storage):
        """Inactive rows are excluded and the limit applies."""
        storage.add_allocator({"id": "cde-old", "name": "Closed Fund", "status": "inactive"})
        ids = [m.allocator_id for m in storage.active_allocators()]
        assert "cde-old" not in ids
        assert len(storage.active_allocators(limit=2)) == 2

    def test_available_requests(self, storage):
        """Only open NMTC requests are returned."""
        storage.add_request({"id": "deal-closed", "status": "closed", "programs": ["NMTC"]})
        storage.add_request({"id": "deal-htc", "status": "available", "programs": ["HTC"]})
        ids = [r.request_id for r in storage.available_requests()]
        assert ids == ["deal-10482", "deal-10517"]

    def test_rows_require_id(self, storage):
        """Rows without an id are rejected."""
        with pytest.raises(ValueError):
            storage.add_allocator({"name": "No Id"})
        with pytest.raises(ValueError):
            storage.add_request({"project_name": "No Id"})


class TestPersistence:
    """Test JSON file persistence."""

    def test_round_trip(self, tmp_path):
        """Rows survive a reload."""
        path = tmp_path / "registry.json"
        create_sample_registry(RegistryStorage(str(path)))

        reloaded = RegistryStorage(str(path))
        assert reloaded.count() == {"allocators": 3, "requests": 2}
        assert reloaded.get_request("deal-10482").state == "KS"

        data = json.loads(path.read_text())
        assert data["version"] == "1.0"

    def test_corrupt_file(self, tmp_path):
        """Unreadable registry raises RegistryError on access."""
        path = tmp_path / "registry.json"
        path.write_text("{not json")

        storage = RegistryStorage(str(path))
        with pytest.raises(RegistryError):
            storage.count()

    def test_non_object_file(self, tmp_path):
        """A JSON array is not a registry."""
        path = tmp_path / "registry.json"
        path.write_text("[]")

        with pytest.raises(RegistryError):
            RegistryStorage(str(path)).active_allocators()
