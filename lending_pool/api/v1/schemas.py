"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from typing import List, Optional
from lending_pool.domain.models import Loan


class AmountRequest(BaseModel):
    """Request body for POST /v1/deposit and POST /v1/withdraw"""

    amount: int = Field(..., description="Amount in base units")


class BalanceResponse(BaseModel):
    """Balance of one identity"""

    identity: str
    balance: int


class LoanRequest(BaseModel):
    """Request body for POST /v1/loans"""

    principal: int = Field(..., description="Borrowed amount in base units")
    rate: int = Field(..., description="Simple interest in whole percent")
    duration: int = Field(..., description="Loan term in seconds")


class LoanResponse(BaseModel):
    """Single loan record"""

    index: int
    borrower: str
    principal: int
    rate: int
    duration: int
    created_at: int
    maturity: int
    repaid: bool
    repaid_at: Optional[int] = None
    total_due: int

    @classmethod
    def from_loan(cls, loan: Loan) -> "LoanResponse":
        return cls(
            index=loan.index,
            borrower=loan.borrower,
            principal=loan.principal,
            rate=loan.rate,
            duration=loan.duration,
            created_at=loan.created_at,
            maturity=loan.maturity,
            repaid=loan.repaid,
            repaid_at=loan.repaid_at,
            total_due=loan.total_due,
        )


class RepayResponse(BaseModel):
    """Response for POST /v1/loans/{index}/repay"""

    loan: LoanResponse
    total_paid: int
    balance: int


class LoanListResponse(BaseModel):
    """Response for GET /v1/loans"""

    borrower: str
    loans: List[LoanResponse]
