"""Loan endpoints: request, inspect, list and repay"""

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import sessionmaker

from lending_pool.api.v1.schemas import LoanListResponse, LoanRequest, LoanResponse, RepayResponse
from lending_pool.api.dependencies import get_caller_id, get_event_client, get_request_id, get_unit_of_work
from lending_pool.infrastructure.clients.events import EventWebhookClient
from lending_pool.infrastructure.database.session import get_session_factory
from lending_pool.infrastructure.database.unit_of_work import PoolUnitOfWork
from lending_pool.infrastructure.delivery import deliver_pending_events
from lending_pool.infrastructure.observability.tracking import track_operation

router = APIRouter()


@router.post("/loans", response_model=LoanResponse, status_code=201)
def request_loan(
    request_body: LoanRequest,
    background_tasks: BackgroundTasks,
    caller: str = Depends(get_caller_id),
    request_id: str = Depends(get_request_id),
    uow: PoolUnitOfWork = Depends(get_unit_of_work),
    session_factory: sessionmaker = Depends(get_session_factory),
    event_client: EventWebhookClient = Depends(get_event_client),
):
    """
    Record a loan request for the caller.

    Only the terms are recorded. No principal is credited to the borrower
    and no lender funds are reserved.
    """
    with track_operation(request_id, caller, "request_loan"):
        with uow.engine() as engine:
            index = engine.request_loan(
                caller,
                principal=request_body.principal,
                rate=request_body.rate,
                duration=request_body.duration,
            )
            loan = engine.loan_book.get(index)

    background_tasks.add_task(deliver_pending_events, session_factory, event_client)
    return LoanResponse.from_loan(loan)


@router.get("/loans", response_model=LoanListResponse)
def list_loans(
    borrower: str = Query(..., description="Borrower identity"),
    uow: PoolUnitOfWork = Depends(get_unit_of_work),
):
    """All loans of one borrower, oldest first"""
    state = uow.snapshot()
    loans = [LoanResponse.from_loan(loan) for loan in state.loan_book.loans_of(borrower)]
    return LoanListResponse(borrower=borrower, loans=loans)


@router.get("/loans/{index}", response_model=LoanResponse)
def get_loan(index: int, uow: PoolUnitOfWork = Depends(get_unit_of_work)):
    """Single loan by index; 404 when out of range"""
    state = uow.snapshot()
    return LoanResponse.from_loan(state.loan_book.get(index))


@router.post("/loans/{index}/repay", response_model=RepayResponse)
def repay_loan(
    index: int,
    background_tasks: BackgroundTasks,
    caller: str = Depends(get_caller_id),
    request_id: str = Depends(get_request_id),
    uow: PoolUnitOfWork = Depends(get_unit_of_work),
    session_factory: sessionmaker = Depends(get_session_factory),
    event_client: EventWebhookClient = Depends(get_event_client),
):
    """
    Settle a loan from the caller's tracked balance.

    Only the borrower may repay. The total is principal plus floored simple
    interest, and a loan can be repaid once.
    """
    with track_operation(request_id, caller, "repay_loan"):
        with uow.engine() as engine:
            total = engine.repay_loan(caller, index)
            loan = engine.loan_book.get(index)
            balance = engine.balance_of(caller)

    background_tasks.add_task(deliver_pending_events, session_factory, event_client)
    return RepayResponse(loan=LoanResponse.from_loan(loan), total_paid=total, balance=balance)
