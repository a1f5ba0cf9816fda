"""Payout HTTP client - the value-transfer primitive used by withdrawals"""

import logging
import httpx
from lending_pool.config import settings
from lending_pool.infrastructure.observability.metrics import transfer_failure_counter

logger = logging.getLogger(__name__)


class PayoutClient:
    """Moves native currency to a destination through the payout service"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url or settings.payout_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    def transfer(self, destination: str, amount: int) -> bool:
        """
        Request a payout and report whether it settled.

        Only an explicit {"success": true} from a 2xx response counts as
        success. Timeouts, network errors, non-2xx statuses and malformed
        bodies all report failure; no retries, the caller decides.
        """
        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = client.post(
                    f"{self.base_url}/payouts",
                    json={"destination": destination, "amount": amount},
                )
                response.raise_for_status()
                succeeded = response.json().get("success") is True

            except httpx.TimeoutException:
                logger.error(f"Payout timeout after {self.timeout}s", extra={"destination": destination})
                succeeded = False
            except httpx.HTTPStatusError as e:
                logger.error(f"Payout error: {e.response.status_code}", extra={"destination": destination})
                succeeded = False
            except httpx.RequestError as e:
                logger.error(f"Payout request failed: {e}", extra={"destination": destination})
                succeeded = False
            except (ValueError, AttributeError) as e:
                logger.error(f"Invalid payout response: {e}", extra={"destination": destination})
                succeeded = False

        if not succeeded:
            transfer_failure_counter.inc()
        return succeeded
