"""Append-only record of loans, addressed by stable position"""

from typing import Iterable, Iterator, List
from lending_pool.domain.models import Loan
from lending_pool.domain.exceptions import InvalidLoanTerms, LoanNotFound, AlreadyRepaid


class LoanBook:
    """
    Ordered sequence of loans.

    Indices are assigned monotonically from 0 and never reused: loans are
    never removed, and the only mutation is the one-way repaid flag.
    """

    def __init__(self, loans: Iterable[Loan] = ()):
        self._loans: List[Loan] = sorted(loans, key=lambda loan: loan.index)
        for position, loan in enumerate(self._loans):
            if loan.index != position:
                raise ValueError(f"Loan index gap at position {position} (found {loan.index})")
        self._new_from = len(self._loans)
        self._repaid_since_load: set[int] = set()

    def __len__(self) -> int:
        return len(self._loans)

    def __iter__(self) -> Iterator[Loan]:
        return iter(self._loans)

    def append(self, borrower: str, principal: int, rate: int, duration: int, now: int) -> int:
        """
        Record a new open loan and return its index.

        Raises:
            InvalidLoanTerms: principal, rate or duration is not positive
        """
        for name, value in (("principal", principal), ("rate", rate), ("duration", duration)):
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise InvalidLoanTerms(f"{name} must be a positive integer, got {value!r}")

        index = len(self._loans)
        self._loans.append(
            Loan(
                index=index,
                borrower=borrower,
                principal=principal,
                rate=rate,
                duration=duration,
                created_at=now,
                maturity=now + duration,
            )
        )
        return index

    def get(self, index: int) -> Loan:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self._loans):
            raise LoanNotFound(f"No loan at index {index!r}")
        return self._loans[index]

    def mark_repaid(self, index: int, now: int | None = None) -> Loan:
        """Flip a loan to repaid. A second call is rejected, not ignored."""
        loan = self.get(index)
        if loan.repaid:
            raise AlreadyRepaid(f"Loan {index} is already repaid")

        loan.repaid = True
        loan.repaid_at = now
        self._repaid_since_load.add(index)
        return loan

    def loans_of(self, borrower: str) -> List[Loan]:
        return [loan for loan in self._loans if loan.borrower == borrower]

    def appended(self) -> List[Loan]:
        """Loans added since construction"""
        return self._loans[self._new_from:]

    def repaid_since_load(self) -> List[Loan]:
        return [self._loans[i] for i in sorted(self._repaid_since_load) if i < self._new_from]
