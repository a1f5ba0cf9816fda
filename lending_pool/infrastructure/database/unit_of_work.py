"""Runs one engine operation against persisted state as a single transaction"""

import threading
from contextlib import contextmanager
from typing import Iterator, List
from sqlalchemy.orm import Session

from lending_pool.domain.engine import AccountingEngine, TransferFn
from lending_pool.domain.models import Event
from lending_pool.infrastructure.database.repositories import PoolRepository, PoolState, WebhookRepository

# Operations are admitted one at a time, run to completion
_operation_lock = threading.Lock()


class PoolUnitOfWork:
    """
    Load state, run an operation, then commit state and its events together.

    Any exception raised inside the block rolls the session back, so a failed
    operation leaves no persisted trace and enqueues no events.
    """

    def __init__(self, db: Session, transfer: TransferFn, max_balance: int, event_target_url: str):
        self.db = db
        self.transfer = transfer
        self.max_balance = max_balance
        self.event_target_url = event_target_url

    @contextmanager
    def engine(self) -> Iterator[AccountingEngine]:
        with _operation_lock:
            repo = PoolRepository(self.db, self.max_balance)
            state = repo.load()
            events: List[Event] = []
            engine = AccountingEngine(state.ledger, state.loan_book, self.transfer)
            engine.subscribe(events.append)

            try:
                yield engine
                repo.save(state)
                outbox = WebhookRepository(self.db)
                for event in events:
                    outbox.enqueue(event, self.event_target_url)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

    def snapshot(self) -> PoolState:
        """Read-only view of the current state"""
        return PoolRepository(self.db, self.max_balance).load()
