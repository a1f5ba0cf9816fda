"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session
from lending_pool.config import settings
from lending_pool.infrastructure.clients.payout import PayoutClient
from lending_pool.infrastructure.clients.events import EventWebhookClient
from lending_pool.infrastructure.database.session import get_db
from lending_pool.infrastructure.database.unit_of_work import PoolUnitOfWork


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_caller_id(x_caller_id: str = Header(..., min_length=1, description="Authenticated caller identity")) -> str:
    """Caller identity, authenticated upstream and passed through as a header"""
    return x_caller_id


def get_payout_client() -> PayoutClient:
    """Provide payout client instance"""
    return PayoutClient()


def get_event_client() -> EventWebhookClient:
    """Provide event webhook client instance"""
    return EventWebhookClient()


def get_unit_of_work(
    db: Session = Depends(get_db),
    payout_client: PayoutClient = Depends(get_payout_client),
) -> PoolUnitOfWork:
    """Provide a unit of work bound to this request's session"""
    return PoolUnitOfWork(
        db,
        transfer=payout_client.transfer,
        max_balance=settings.max_balance,
        event_target_url=settings.event_webhook_url,
    )
