"""Unit tests for the payout and event webhook HTTP clients"""

import json
import httpx
import pytest
from lending_pool.infrastructure.clients.payout import PayoutClient
from lending_pool.infrastructure.clients.events import EventWebhookClient
from lending_pool.utils.clock import MonotonicClock


def test_payout_success():
    """Test a 2xx response with success=true settles the transfer"""
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.url.path, json.loads(request.content)))
        return httpx.Response(200, json={"success": True})

    client = PayoutClient(base_url="http://payout.test", transport=httpx.MockTransport(handler))

    assert client.transfer("alice", 40) is True
    assert seen == [("/payouts", {"destination": "alice", "amount": 40})]


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json={"success": False}),
        httpx.Response(200, json={"success": "yes"}),
        httpx.Response(200, json=["success"]),
        httpx.Response(200, content=b"not json"),
        httpx.Response(500, json={"success": True}),
    ],
)
def test_payout_failure_responses(response: httpx.Response):
    """Test anything but an explicit success reports failure"""
    client = PayoutClient(base_url="http://payout.test", transport=httpx.MockTransport(lambda request: response))
    assert client.transfer("alice", 40) is False


def test_payout_network_error():
    """Test connection errors report failure instead of raising"""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = PayoutClient(base_url="http://payout.test", transport=httpx.MockTransport(handler))
    assert client.transfer("alice", 40) is False


async def test_event_client_retries_then_succeeds():
    """Test transient 5xx responses are retried"""
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(json.loads(request.content))
        return httpx.Response(503 if len(attempts) < 3 else 200)

    client = EventWebhookClient(webhook_url="http://events.test/hook", transport=httpx.MockTransport(handler))
    client.backoff_base = 0

    await client.send_event({"event": "Deposited", "identity": "alice", "amount": 5})

    assert len(attempts) == 3
    assert attempts[0]["event"] == "Deposited"


async def test_event_client_gives_up_after_max_retries():
    """Test the last error is raised once retries are exhausted"""
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        return httpx.Response(500)

    client = EventWebhookClient(webhook_url="http://events.test/hook", transport=httpx.MockTransport(handler))
    client.backoff_base = 0
    client.max_retries = 2

    with pytest.raises(httpx.HTTPStatusError):
        await client.send_event({"event": "Deposited"})

    assert len(attempts) == 2


def test_monotonic_clock_never_goes_backwards():
    """Test clock holds its last value when the source steps back"""
    readings = iter([100.9, 105.2, 99.0, 106.0])
    clock = MonotonicClock(source=lambda: next(readings))

    assert [clock() for _ in range(4)] == [100, 105, 105, 106]
