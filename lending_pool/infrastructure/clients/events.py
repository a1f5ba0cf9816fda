"""Event webhook client with exponential backoff retry logic"""

import httpx
import asyncio
from typing import Dict, Any
from lending_pool.config import settings
from lending_pool.infrastructure.observability.metrics import webhook_latency_histogram, webhook_failure_counter


class EventWebhookClient:
    """Client for delivering pool events to the notification webhook"""

    def __init__(self, webhook_url: str | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.webhook_url = webhook_url or settings.event_webhook_url
        self.max_retries = settings.webhook_max_retries
        self.backoff_base = settings.webhook_backoff_base
        self.transport = transport

    async def send_event(self, payload: Dict[str, Any], target_url: str | None = None) -> None:
        """
        Post one event with retry logic.

        Retry strategy:
        - Exponential backoff: 1s, 2s, 4s, 8s (base * 2^attempt)
        - Retries on non-2xx responses and network failures
        - Re-raises the last error once retries are exhausted
        """
        url = target_url or self.webhook_url
        attempt = 0
        async with httpx.AsyncClient(transport=self.transport) as client:
            while attempt < self.max_retries:
                try:
                    with webhook_latency_histogram.time():
                        response = await client.post(url, json=payload, timeout=10.0)
                        response.raise_for_status()
                        return

                except (httpx.HTTPStatusError, httpx.RequestError):
                    attempt += 1
                    webhook_failure_counter.inc()

                    if attempt >= self.max_retries:
                        raise

                    backoff = self.backoff_base * (2 ** (attempt - 1))
                    await asyncio.sleep(backoff)
