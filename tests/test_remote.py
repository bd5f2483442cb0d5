"""
Tests for the remote scoring client.

Uses httpx.MockTransport so no network is touched.
"""

import httpx
import pytest

from automatch.api import (
    RemoteAuthError,
    RemoteScoringClient,
    RemoteUnavailableError,
)


def make_client(handler, sleeps=None) -> RemoteScoringClient:
    return RemoteScoringClient(
        base_url="http://scoring.test/",
        transport=httpx.MockTransport(handler),
        sleep=(sleeps.append if sleeps is not None else lambda _: None),
    )


class TestRemoteScoringClient:
    """Test request shape, envelopes and errors."""

    def test_run_forwards_token_and_body(self):
        """Bearer token and options reach the service."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            seen["body"] = request.content
            return httpx.Response(200, json={"success": True, "data": {"matches": []}})

        resp = make_client(handler).run_automatch("deal-1", "tok-123", {"minScore": 70})

        assert seen["url"] == "http://scoring.test/automatch/run/deal-1"
        assert seen["auth"] == "Bearer tok-123"
        assert b'"minScore"' in seen["body"]
        assert resp.ok
        assert resp.data == {"matches": []}

    def test_unenveloped_payload(self):
        """Payloads without a data envelope pass through."""
        def handler(request):
            return httpx.Response(200, json={"matches": [{"score": 90}]})

        resp = make_client(handler).get_matches("deal-1", "tok")
        assert resp.data == {"matches": [{"score": 90}]}

    def test_list_payload(self):
        """A top-level JSON list is wrapped as data."""
        def handler(request):
            return httpx.Response(200, json=[1, 2])

        assert make_client(handler).get_matches("deal-1", "tok").data == [1, 2]

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_rejection(self, status):
        """401/403 raise RemoteAuthError without retrying."""
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(status, json={"error": "Unauthorized"})

        with pytest.raises(RemoteAuthError) as exc_info:
            make_client(handler).run_automatch("deal-1", "bad")

        assert exc_info.value.status_code == status
        assert exc_info.value.payload == {"error": "Unauthorized"}
        assert len(calls) == 1

    def test_server_error_returned(self):
        """Other error statuses are returned, not raised."""
        def handler(request):
            return httpx.Response(500, text="boom")

        resp = make_client(handler).run_automatch("deal-1", "tok")
        assert resp.status_code == 500
        assert not resp.ok
        assert resp.payload == {}


class TestRetry:
    """Test bounded retry with exponential backoff."""

    def test_backoff_delays(self):
        """Default delays are 100ms, 200ms, 400ms."""
        client = RemoteScoringClient(base_url="http://scoring.test", max_retries=3, backoff_base=0.1)
        assert client.backoff_delays() == pytest.approx([0.1, 0.2, 0.4])

    def test_connect_errors_exhaust_retries(self):
        """Connection failures retry, then raise RemoteUnavailableError."""
        calls = []
        sleeps = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        client = RemoteScoringClient(
            base_url="http://scoring.test",
            max_retries=3,
            backoff_base=0.1,
            transport=httpx.MockTransport(handler),
            sleep=sleeps.append,
        )
        with pytest.raises(RemoteUnavailableError):
            client.run_automatch("deal-1", "tok")

        assert len(calls) == 4
        assert sleeps == pytest.approx([0.1, 0.2, 0.4])

    def test_recovers_after_retry(self):
        """A later successful attempt is returned."""
        attempts = []

        def handler(request):
            attempts.append(request)
            if len(attempts) < 3:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json={"data": {"matches": []}})

        sleeps = []
        resp = make_client(handler, sleeps).run_automatch("deal-1", "tok")
        assert resp.ok
        assert len(attempts) == 3
        assert len(sleeps) == 2

    def test_read_timeout_not_retried(self):
        """Non-connection transport errors fail immediately."""
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(RemoteUnavailableError):
            make_client(handler).run_automatch("deal-1", "tok")
        assert len(calls) == 1
