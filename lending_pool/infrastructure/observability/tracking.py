"""Per-operation logging and metrics"""

import time
from contextlib import contextmanager
from typing import Iterator
from lending_pool.domain.exceptions import DomainException
from lending_pool.infrastructure.observability.logging import log_operation
from lending_pool.infrastructure.observability.metrics import record_operation


@contextmanager
def track_operation(request_id: str, caller: str, operation: str, amount: int = 0) -> Iterator[None]:
    """Record outcome and latency of the wrapped operation, re-raising any error"""
    start_time = time.time()
    try:
        yield
    except DomainException as e:
        _finish(request_id, caller, operation, e.code, start_time, error_code=e.code)
        raise
    except Exception:
        _finish(request_id, caller, operation, "error", start_time, error_code="INTERNAL_ERROR")
        raise

    _finish(request_id, caller, operation, "ok", start_time, amount=amount)


def _finish(
    request_id: str,
    caller: str,
    operation: str,
    outcome: str,
    start_time: float,
    amount: int = 0,
    error_code: str | None = None,
) -> None:
    duration_ms = (time.time() - start_time) * 1000
    record_operation(operation, outcome, amount)
    log_operation(request_id, caller, operation, outcome, duration_ms, error_code=error_code)
