"""POST /v1/deposit, POST /v1/withdraw, GET /v1/accounts/{identity}"""

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import sessionmaker

from lending_pool.api.v1.schemas import AmountRequest, BalanceResponse
from lending_pool.api.dependencies import get_caller_id, get_event_client, get_request_id, get_unit_of_work
from lending_pool.infrastructure.clients.events import EventWebhookClient
from lending_pool.infrastructure.database.session import get_session_factory
from lending_pool.infrastructure.database.unit_of_work import PoolUnitOfWork
from lending_pool.infrastructure.delivery import deliver_pending_events
from lending_pool.infrastructure.observability.tracking import track_operation

router = APIRouter()


@router.post("/deposit", response_model=BalanceResponse)
def deposit(
    request_body: AmountRequest,
    background_tasks: BackgroundTasks,
    caller: str = Depends(get_caller_id),
    request_id: str = Depends(get_request_id),
    uow: PoolUnitOfWork = Depends(get_unit_of_work),
    session_factory: sessionmaker = Depends(get_session_factory),
    event_client: EventWebhookClient = Depends(get_event_client),
):
    """
    Credit the caller with the value that accompanied this call.

    The fronting environment has already received the funds; this endpoint
    only records them.
    """
    with track_operation(request_id, caller, "deposit", request_body.amount):
        with uow.engine() as engine:
            balance = engine.deposit(caller, request_body.amount)

    background_tasks.add_task(deliver_pending_events, session_factory, event_client)
    return BalanceResponse(identity=caller, balance=balance)


@router.post("/withdraw", response_model=BalanceResponse)
def withdraw(
    request_body: AmountRequest,
    background_tasks: BackgroundTasks,
    caller: str = Depends(get_caller_id),
    request_id: str = Depends(get_request_id),
    uow: PoolUnitOfWork = Depends(get_unit_of_work),
    session_factory: sessionmaker = Depends(get_session_factory),
    event_client: EventWebhookClient = Depends(get_event_client),
):
    """
    Pay out part of the caller's balance.

    Flow:
    1. Debit the ledger
    2. Call the payout service
    3. On payout failure, credit the debit back and return 502
    4. Commit balance and Withdrawn event together
    """
    with track_operation(request_id, caller, "withdraw", request_body.amount):
        with uow.engine() as engine:
            balance = engine.withdraw(caller, request_body.amount)

    background_tasks.add_task(deliver_pending_events, session_factory, event_client)
    return BalanceResponse(identity=caller, balance=balance)


@router.get("/accounts/{identity}", response_model=BalanceResponse)
def get_balance(identity: str, uow: PoolUnitOfWork = Depends(get_unit_of_work)):
    """Balance of any identity; 0 if it was never credited"""
    state = uow.snapshot()
    return BalanceResponse(identity=identity, balance=state.ledger.balance_of(identity))
