"""Background delivery of committed events from the outbox table"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List

import httpx
from sqlalchemy.orm import sessionmaker
from starlette.concurrency import run_in_threadpool

from lending_pool.config import settings
from lending_pool.infrastructure.clients.events import EventWebhookClient
from lending_pool.infrastructure.database.repositories import WebhookRepository


@dataclass
class ClaimedEvent:
    """Outbox row taken by one delivery run"""

    id: uuid.UUID
    event_type: str
    payload: Dict[str, Any]
    target_url: str


async def deliver_pending_events(
    session_factory: sessionmaker,
    client: EventWebhookClient,
    max_attempts: int | None = None,
) -> int:
    """
    Claim pending outbox rows, send them, and record the outcome.

    Rows are only written by committed operations, so a rolled-back
    operation never produces a delivery. Each row is claimed before it is
    sent, so overlapping runs never post the same event twice. Failed rows
    are picked up again by later runs until max_attempts is reached.
    Database work runs in the threadpool to keep the event loop free.
    Returns the number delivered.
    """
    max_attempts = max_attempts or settings.webhook_max_retries
    claimed = await run_in_threadpool(_claim_pending, session_factory, max_attempts)

    delivered = 0
    for event in claimed:
        try:
            await client.send_event(event.payload, target_url=event.target_url)
            ok = True
            delivered += 1
        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            ok = False
            logging.error(
                f"Event delivery failed: {e}",
                extra={"event_type": event.event_type, "webhook_id": str(event.id)},
            )
        await run_in_threadpool(_record_attempt, session_factory, event.id, ok)

    return delivered


def _claim_pending(session_factory: sessionmaker, max_attempts: int) -> List[ClaimedEvent]:
    db = session_factory()
    try:
        repo = WebhookRepository(db)
        claimed = []
        for row in repo.get_pending(max_attempts):
            snapshot = ClaimedEvent(
                id=row.id,
                event_type=row.event_type,
                payload=row.payload,
                target_url=row.target_url,
            )
            if repo.claim(row.id, max_attempts):
                claimed.append(snapshot)
            db.commit()
        return claimed
    finally:
        db.close()


def _record_attempt(session_factory: sessionmaker, webhook_id: uuid.UUID, delivered: bool) -> None:
    db = session_factory()
    try:
        WebhookRepository(db).record_attempt(webhook_id, delivered=delivered)
        db.commit()
    finally:
        db.close()
