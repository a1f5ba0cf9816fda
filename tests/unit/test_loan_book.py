"""Unit tests for the append-only loan book"""

import pytest
from lending_pool.domain.loan_book import LoanBook
from lending_pool.domain.models import Loan
from lending_pool.domain.exceptions import InvalidLoanTerms, LoanNotFound, AlreadyRepaid


def test_append_assigns_increasing_indices():
    """Test indices start at 0 and increase by one"""
    book = LoanBook()
    indices = [book.append("bob", 10, 5, 60, now=1000) for _ in range(3)]

    assert indices == [0, 1, 2]
    assert len(book) == 3


def test_append_computes_maturity():
    """Test maturity is creation time plus duration"""
    book = LoanBook()
    index = book.append("bob", 10, 10, 86400, now=1_700_000_000)
    loan = book.get(index)

    assert loan.maturity == 1_700_000_000 + 86400
    assert loan.created_at == 1_700_000_000
    assert loan.repaid is False


@pytest.mark.parametrize(
    "principal,rate,duration",
    [(0, 10, 60), (-5, 10, 60), (10, 0, 60), (10, -1, 60), (10, 10, 0), (10, 10, -60)],
)
def test_append_rejects_non_positive_terms(principal, rate, duration):
    """Test invalid terms are rejected and nothing is appended"""
    book = LoanBook()

    with pytest.raises(InvalidLoanTerms):
        book.append("bob", principal, rate, duration, now=0)

    assert len(book) == 0


def test_get_out_of_bounds():
    """Test get is defined for 0 <= i < N only"""
    book = LoanBook()
    book.append("bob", 10, 10, 60, now=0)

    assert book.get(0).borrower == "bob"
    with pytest.raises(LoanNotFound):
        book.get(1)
    with pytest.raises(LoanNotFound):
        book.get(-1)


def test_mark_repaid_is_not_idempotent():
    """Test second mark_repaid is rejected and flag stays set"""
    book = LoanBook()
    index = book.append("bob", 10, 10, 60, now=0)

    book.mark_repaid(index, now=30)
    with pytest.raises(AlreadyRepaid):
        book.mark_repaid(index, now=40)

    loan = book.get(index)
    assert loan.repaid is True
    assert loan.repaid_at == 30


def test_mark_repaid_unknown_index():
    """Test mark_repaid on a missing loan"""
    with pytest.raises(LoanNotFound):
        LoanBook().mark_repaid(0)


def test_loaded_book_continues_numbering():
    """Test a book rebuilt from stored loans keeps index stability"""
    stored = [
        Loan(index=1, borrower="carol", principal=20, rate=5, duration=60, created_at=0, maturity=60),
        Loan(index=0, borrower="bob", principal=10, rate=5, duration=60, created_at=0, maturity=60),
    ]
    book = LoanBook(stored)

    assert book.append("bob", 30, 5, 60, now=10) == 2
    assert [loan.index for loan in book.loans_of("bob")] == [0, 2]
    assert [loan.index for loan in book.appended()] == [2]

    book.mark_repaid(0, now=20)
    book.mark_repaid(2, now=20)
    assert [loan.index for loan in book.repaid_since_load()] == [0]


def test_loaded_book_rejects_index_gaps():
    """Test stored loans must form a contiguous sequence"""
    stored = [Loan(index=1, borrower="bob", principal=10, rate=5, duration=60, created_at=0, maturity=60)]

    with pytest.raises(ValueError):
        LoanBook(stored)
