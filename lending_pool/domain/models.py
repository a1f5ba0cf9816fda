"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, asdict
from typing import Any, Dict


@dataclass
class Loan:
    """Loan record held by the loan book"""

    index: int
    borrower: str
    principal: int
    rate: int  # whole percent
    duration: int  # seconds
    created_at: int
    maturity: int  # advisory only, never enforced
    repaid: bool = False
    repaid_at: int | None = None

    @property
    def total_due(self) -> int:
        """Principal plus simple interest, floored to the base unit"""
        return self.principal + self.principal * self.rate // 100


@dataclass(frozen=True)
class Event:
    """Notification emitted once per successful operation"""

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_payload(self) -> Dict[str, Any]:
        return {"event": self.name, **asdict(self)}


@dataclass(frozen=True)
class Deposited(Event):
    identity: str
    amount: int


@dataclass(frozen=True)
class Withdrawn(Event):
    identity: str
    amount: int


@dataclass(frozen=True)
class LoanRequested(Event):
    index: int
    borrower: str
    principal: int
    rate: int
    duration: int
    maturity: int


@dataclass(frozen=True)
class LoanRepaid(Event):
    index: int
    total_amount: int
