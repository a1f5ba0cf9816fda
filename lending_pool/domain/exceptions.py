"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    code = "DOMAIN_ERROR"
    http_status = 400

    def __init__(self, message: str | None = None):
        self.message = message or self.__doc__
        super().__init__(self.message)

    def to_response(self) -> dict:
        return {"error": {"code": self.code, "message": self.message}}


class InvalidAmount(DomainException):
    """Amount must be a positive integer"""

    code = "INVALID_AMOUNT"
    http_status = 422


class InvalidLoanTerms(DomainException):
    """Principal, rate and duration must all be positive"""

    code = "INVALID_LOAN_TERMS"
    http_status = 422


class InsufficientBalance(DomainException):
    """Account balance does not cover the requested amount"""

    code = "INSUFFICIENT_BALANCE"
    http_status = 409


class Unauthorized(DomainException):
    """Caller is not allowed to act on this loan"""

    code = "UNAUTHORIZED"
    http_status = 403


class AlreadyRepaid(DomainException):
    """Loan has already been repaid"""

    code = "ALREADY_REPAID"
    http_status = 409


class LoanNotFound(DomainException):
    """No loan exists at this index"""

    code = "LOAN_NOT_FOUND"
    http_status = 404


class Overflow(DomainException):
    """Balance would exceed its representable range"""

    code = "OVERFLOW"
    http_status = 422


class TransferFailed(DomainException):
    """External value transfer did not succeed"""

    code = "TRANSFER_FAILED"
    http_status = 502


class ReentrantCall(DomainException):
    """Engine was re-entered while an operation was in progress"""

    code = "REENTRANT_CALL"
    http_status = 409
