"""
Tests for the AutoMatch orchestrator.

Covers remote-first execution, fallback to local scoring, pass-through
of remote errors, allocator scans and registry failures.
"""

import httpx
import pytest

from automatch.api import (
    MatchOrchestrator,
    RegistryStorage,
    RemoteScoringClient,
    create_sample_registry,
)


# --- Test Data Fixtures ---

@pytest.fixture
def storage():
    storage = RegistryStorage()
    create_sample_registry(storage)
    return storage


def remote_returning(status: int, payload=None, calls=None) -> RemoteScoringClient:
    """Remote client whose service always answers with the given status."""
    def handler(request):
        if calls is not None:
            calls.append(request)
        return httpx.Response(status, json=payload if payload is not None else {})

    return RemoteScoringClient(
        base_url="http://scoring.test",
        transport=httpx.MockTransport(handler),
        sleep=lambda _: None,
    )


def remote_unreachable() -> RemoteScoringClient:
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    return RemoteScoringClient(
        base_url="http://scoring.test",
        transport=httpx.MockTransport(handler),
        sleep=lambda _: None,
    )


# --- Local Pipeline ---

class TestLocalScoring:
    """Test the local pipeline over the sample registry."""

    def test_matches_per_organization(self, storage):
        """One match per organization, ties in registry order."""
        result = MatchOrchestrator(storage).run_local("deal-10482")

        assert result.ok
        assert result.source == "local"
        assert [m["allocatorId"] for m in result.matches] == ["cde-2024-0098", "cde-2024-0212"]
        assert [m["score"] for m in result.matches] == [93, 93]

    def test_latest_row_id_with_earlier_reasons(self, storage):
        """Heartland is reported under its 2024 row with its 2023 reasons."""
        result = MatchOrchestrator(storage).run_local("deal-10482")
        heartland = result.matches[0]

        assert heartland["allocatorName"] == "Heartland Community Capital"
        assert heartland["reasons"] == [
            "Serves KS",
            "Financing: Real Estate",
            "Sector match",
            "Deal size fits",
            "Distressed tract",
            "Underserved target state",
            "Owner-occupied",
        ]

    def test_request_not_found(self, storage):
        """Unknown request returns 404 with an error and no matches."""
        result = MatchOrchestrator(storage).run_local("deal-missing")
        assert result.status == 404
        assert result.matches == []
        assert result.to_dict()["error"] == "Request not found"

    def test_min_score_filter(self, storage):
        """Min score above every match returns nothing."""
        result = MatchOrchestrator(storage).run_local("deal-10482", min_score=95)
        assert result.matches == []

    def test_registry_failure(self, tmp_path):
        """Registry errors become a 500 with empty matches."""
        path = tmp_path / "registry.json"
        path.write_text("{broken")

        result = MatchOrchestrator(RegistryStorage(str(path))).run_local("deal-10482")
        assert result.status == 500
        assert result.matches == []
        assert result.error == "AutoMatch scoring failed"


# --- Remote First ---

class TestRemoteFirst:
    """Test remote execution and fallback."""

    def test_remote_success_verbatim(self, storage):
        """A 2xx remote payload is returned as-is, envelope removed."""
        payload = {"matches": [{"allocatorId": "remote-1", "score": 88}], "source": "remote"}
        orchestrator = MatchOrchestrator(storage, remote=remote_returning(200, {"success": True, "data": payload}))

        result = orchestrator.run_for_request("deal-10482", access_token="tok")
        assert result.source == "remote"
        assert result.to_dict() == payload

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_rejection_falls_back(self, storage, status):
        """401/403 fall back to local scoring."""
        orchestrator = MatchOrchestrator(storage, remote=remote_returning(status, {"error": "no"}))
        result = orchestrator.run_for_request("deal-10482", access_token="tok")

        assert result.source == "local"
        assert len(result.matches) == 2

    def test_unreachable_falls_back(self, storage):
        """Exhausted retries fall back to local scoring."""
        orchestrator = MatchOrchestrator(storage, remote=remote_unreachable())
        result = orchestrator.run_for_request("deal-10482", access_token="tok")

        assert result.source == "local"
        assert result.ok

    def test_other_errors_pass_through(self, storage):
        """Non-auth remote errors are returned with their status."""
        orchestrator = MatchOrchestrator(storage, remote=remote_returning(422, {"error": "Invalid request"}))
        result = orchestrator.run_for_request("deal-10482", access_token="tok")

        assert result.status == 422
        assert result.source == "remote"
        assert result.to_dict() == {"error": "Invalid request"}

    def test_no_token_skips_remote(self, storage):
        """Without a token the remote service is never called."""
        calls = []
        orchestrator = MatchOrchestrator(storage, remote=remote_returning(200, {}, calls))
        result = orchestrator.run_for_request("deal-10482")

        assert calls == []
        assert result.source == "local"


# --- Allocator Scan ---

class TestScan:
    """Test allocator-side scans."""

    def test_scan_by_organization(self, storage):
        """Organization id scans with its latest year."""
        result = MatchOrchestrator(storage).scan_for_allocator("org-heartland-capital")

        assert result.ok
        assert [m["requestId"] for m in result.matches] == ["deal-10482"]
        assert result.matches[0]["score"] == 93
        assert result.matches[0]["tier"] == "excellent"

    def test_scan_min_score(self, storage):
        """Lowering the floor includes weaker requests."""
        result = MatchOrchestrator(storage).scan_for_allocator("cde-2024-0098", min_score=0)
        assert [m["requestId"] for m in result.matches] == ["deal-10482", "deal-10517"]
        assert result.matches[1]["score"] == 0

    def test_scan_unknown_allocator(self, storage):
        """Unknown allocators return an empty list with an error."""
        result = MatchOrchestrator(storage).scan_for_allocator("nobody")
        assert result.status == 200
        assert result.matches == []
        assert result.error == "Allocator not found"


# --- Saved Matches ---

class TestSavedMatches:
    """Test the saved-matches proxy."""

    def test_proxied(self, storage):
        """Saved matches come from the remote service."""
        payload = {"success": True, "data": {"matches": [{"allocatorId": "x"}]}}
        orchestrator = MatchOrchestrator(storage, remote=remote_returning(200, payload))

        result = orchestrator.get_saved_matches("deal-10482", "tok")
        assert result.to_dict() == {"matches": [{"allocatorId": "x"}]}

    def test_unauthorized(self, storage):
        """Auth failures are passed through, not replaced with local data."""
        orchestrator = MatchOrchestrator(storage, remote=remote_returning(401, {"error": "Unauthorized"}))
        result = orchestrator.get_saved_matches("deal-10482", None)
        assert result.status == 401

    def test_unavailable(self, storage):
        """Unreachable service is a 503."""
        orchestrator = MatchOrchestrator(storage, remote=remote_unreachable())
        result = orchestrator.get_saved_matches("deal-10482", "tok")
        assert result.status == 503
        assert result.error == "Scoring service unavailable"
