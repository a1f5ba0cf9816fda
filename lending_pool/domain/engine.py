"""Accounting engine - the only entry point that mutates pool state"""

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, List

from lending_pool.domain.ledger import Ledger
from lending_pool.domain.loan_book import LoanBook
from lending_pool.domain.models import Event, Deposited, Withdrawn, LoanRequested, LoanRepaid
from lending_pool.domain.exceptions import (
    InsufficientBalance,
    ReentrantCall,
    TransferFailed,
    Unauthorized,
    AlreadyRepaid,
)
from lending_pool.utils.clock import MonotonicClock

logger = logging.getLogger(__name__)

TransferFn = Callable[[str, int], bool]
ClockFn = Callable[[], int]
Listener = Callable[[Event], None]


class AccountingEngine:
    """
    Deposit, withdraw, request and repay loans against a Ledger and LoanBook.

    Every operation either applies all of its effects and emits exactly one
    event, or raises a DomainException and leaves state untouched. Mutating
    operations hold a reentrancy guard for their whole duration, so a transfer
    callback that calls back into the engine is rejected with ReentrantCall.
    """

    def __init__(
        self,
        ledger: Ledger,
        loan_book: LoanBook,
        transfer: TransferFn,
        clock: ClockFn | None = None,
    ):
        self.ledger = ledger
        self.loan_book = loan_book
        self.transfer = transfer
        self.clock = clock or MonotonicClock()
        self._listeners: List[Listener] = []
        self._active: str | None = None

    def subscribe(self, listener: Listener) -> None:
        """Register a callback invoked with each emitted event"""
        self._listeners.append(listener)

    @contextmanager
    def _operation(self, name: str) -> Iterator[List[Event]]:
        if self._active is not None:
            logger.warning(f"Rejected reentrant {name} during {self._active}")
            raise ReentrantCall(f"{name} called while {self._active} is in progress")

        self._active = name
        pending: List[Event] = []
        try:
            yield pending
        finally:
            self._active = None

        # Only reached when the operation committed
        for event in pending:
            for listener in self._listeners:
                listener(event)

    def deposit(self, caller: str, amount: int) -> int:
        """
        Credit caller with value that accompanied the call.

        The environment guarantees the value was actually received; this is
        bookkeeping only. Returns the new balance.
        """
        with self._operation("deposit") as events:
            balance = self.ledger.credit(caller, amount)
            events.append(Deposited(identity=caller, amount=amount))
        return balance

    def withdraw(self, caller: str, amount: int) -> int:
        """
        Pay amount out of caller's balance through the transfer primitive.

        The debit is applied before the external call. If the transfer
        reports failure or raises, exactly that debit is credited back and
        TransferFailed is raised.
        """
        with self._operation("withdraw") as events:
            self.ledger.debit(caller, amount)
            try:
                succeeded = self.transfer(caller, amount)
            except Exception as e:
                self.ledger.credit(caller, amount)
                logger.error(f"Transfer of {amount} to {caller} raised: {e}")
                raise TransferFailed(f"Transfer of {amount} to {caller} raised: {e}") from e

            if succeeded is not True:
                self.ledger.credit(caller, amount)
                logger.error(f"Transfer of {amount} to {caller} reported failure")
                raise TransferFailed(f"Transfer of {amount} to {caller} reported failure")

            balance = self.ledger.balance_of(caller)
            events.append(Withdrawn(identity=caller, amount=amount))
        return balance

    def request_loan(
        self,
        caller: str,
        principal: int,
        rate: int,
        duration: int,
        now: int | None = None,
    ) -> int:
        """
        Record a new open loan for caller and return its index.

        Only the terms are recorded; no funds move to the borrower.
        """
        with self._operation("request_loan") as events:
            if now is None:
                now = self.clock()
            index = self.loan_book.append(caller, principal, rate, duration, now)
            loan = self.loan_book.get(index)
            events.append(
                LoanRequested(
                    index=index,
                    borrower=caller,
                    principal=principal,
                    rate=rate,
                    duration=duration,
                    maturity=loan.maturity,
                )
            )
        return index

    def repay_loan(self, caller: str, index: int) -> int:
        """
        Settle a loan from the borrower's own tracked balance.

        All checks run before any mutation. Returns the total debited.
        """
        with self._operation("repay_loan") as events:
            loan = self.loan_book.get(index)
            if caller != loan.borrower:
                raise Unauthorized(f"{caller} is not the borrower of loan {index}")
            if loan.repaid:
                raise AlreadyRepaid(f"Loan {index} is already repaid")

            total = loan.total_due
            balance = self.ledger.balance_of(caller)
            if total > balance:
                raise InsufficientBalance(f"{caller} has {balance}, repayment of loan {index} needs {total}")

            repaid_at = self.clock()
            self.ledger.debit(caller, total)
            self.loan_book.mark_repaid(index, now=repaid_at)
            events.append(LoanRepaid(index=index, total_amount=total))
        return total

    def balance_of(self, identity: str) -> int:
        return self.ledger.balance_of(identity)
