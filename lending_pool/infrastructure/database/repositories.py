"""Data access layer for pool state"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List
from sqlalchemy.orm import Session
from lending_pool.infrastructure.database.models import AccountRecord, LoanRecord, OutboundWebhook
from lending_pool.domain.ledger import Ledger
from lending_pool.domain.loan_book import LoanBook
from lending_pool.domain.models import Event, Loan


@dataclass
class PoolState:
    """Ledger and loan book loaded for one unit of work"""

    ledger: Ledger
    loan_book: LoanBook


class PoolRepository:
    """Loads and saves the ledger and loan book"""

    def __init__(self, db: Session, max_balance: int):
        self.db = db
        self.max_balance = max_balance

    def load(self) -> PoolState:
        """Build in-memory state from persisted rows"""
        balances = {row.identity: row.balance for row in self.db.query(AccountRecord).all()}
        loans = [_to_loan(row) for row in self.db.query(LoanRecord).order_by(LoanRecord.index).all()]
        return PoolState(
            ledger=Ledger(balances, max_balance=self.max_balance),
            loan_book=LoanBook(loans),
        )

    def save(self, state: PoolState) -> None:
        """Write back every balance and loan touched since load"""
        for identity, balance in state.ledger.touched().items():
            self.db.merge(AccountRecord(identity=identity, balance=balance))

        for loan in state.loan_book.appended():
            self.db.add(
                LoanRecord(
                    index=loan.index,
                    borrower=loan.borrower,
                    principal=loan.principal,
                    rate=loan.rate,
                    duration=loan.duration,
                    created_at=loan.created_at,
                    maturity=loan.maturity,
                    repaid=loan.repaid,
                    repaid_at=loan.repaid_at,
                )
            )

        for loan in state.loan_book.repaid_since_load():
            row = self.db.get(LoanRecord, loan.index)
            row.repaid = True
            row.repaid_at = loan.repaid_at

        self.db.flush()  # Surface constraint errors before commit


RETRYABLE_STATUSES = ("pending", "failed")


class WebhookRepository:
    """Outbox of events awaiting delivery"""

    def __init__(self, db: Session):
        self.db = db

    def enqueue(self, event: Event, target_url: str) -> OutboundWebhook:
        """Store event in the same transaction as the state change that caused it"""
        row = OutboundWebhook(
            event_type=event.name,
            payload=event.to_payload(),
            target_url=target_url,
        )
        self.db.add(row)
        return row

    def get_pending(self, max_attempts: int, limit: int = 100) -> List[OutboundWebhook]:
        """New rows plus failed rows that still have attempts left"""
        return (
            self.db.query(OutboundWebhook)
            .filter(OutboundWebhook.status.in_(RETRYABLE_STATUSES))
            .filter(OutboundWebhook.attempts < max_attempts)
            .order_by(OutboundWebhook.created_at)
            .limit(limit)
            .all()
        )

    def claim(self, webhook_id: uuid.UUID, max_attempts: int) -> bool:
        """
        Move a row to "sending" unless another delivery already took it.

        The conditional UPDATE is the claim; only the caller whose update
        matched the row may send it.
        """
        claimed = (
            self.db.query(OutboundWebhook)
            .filter(OutboundWebhook.id == webhook_id)
            .filter(OutboundWebhook.status.in_(RETRYABLE_STATUSES))
            .filter(OutboundWebhook.attempts < max_attempts)
            .update({"status": "sending"}, synchronize_session=False)
        )
        return claimed == 1

    def record_attempt(self, webhook_id: uuid.UUID, delivered: bool) -> None:
        row = self.db.get(OutboundWebhook, webhook_id)
        row.attempts += 1
        row.last_attempt_at = datetime.now(timezone.utc)
        row.status = "delivered" if delivered else "failed"


def _to_loan(row: LoanRecord) -> Loan:
    return Loan(
        index=row.index,
        borrower=row.borrower,
        principal=row.principal,
        rate=row.rate,
        duration=row.duration,
        created_at=row.created_at,
        maturity=row.maturity,
        repaid=row.repaid,
        repaid_at=row.repaid_at,
    )
