"""Unit tests for ledger balance bookkeeping"""

import pytest
from lending_pool.domain.ledger import Ledger
from lending_pool.domain.exceptions import InvalidAmount, InsufficientBalance, Overflow


def test_unseen_identity_has_zero_balance():
    """Test balance defaults to 0 for identities never credited"""
    assert Ledger().balance_of("nobody") == 0


def test_credit_and_debit():
    """Test credit adds and debit subtracts"""
    ledger = Ledger()
    assert ledger.credit("alice", 100) == 100
    assert ledger.debit("alice", 30) == 70
    assert ledger.balance_of("alice") == 70


def test_debit_entire_balance():
    """Test debiting exactly the balance leaves zero"""
    ledger = Ledger({"alice": 50})
    ledger.debit("alice", 50)
    assert ledger.balance_of("alice") == 0


@pytest.mark.parametrize("amount", [0, -1, True, 1.5, "10"])
def test_rejects_non_positive_or_non_integer_amounts(amount):
    """Test both credit and debit reject invalid amounts without mutating"""
    ledger = Ledger({"alice": 10})

    with pytest.raises(InvalidAmount):
        ledger.credit("alice", amount)
    with pytest.raises(InvalidAmount):
        ledger.debit("alice", amount)

    assert ledger.balance_of("alice") == 10


def test_debit_more_than_balance():
    """Test overdraft is rejected and balance is unchanged"""
    ledger = Ledger({"alice": 10})

    with pytest.raises(InsufficientBalance):
        ledger.debit("alice", 11)

    assert ledger.balance_of("alice") == 10


def test_credit_overflow():
    """Test credit past max_balance is rejected and balance is unchanged"""
    ledger = Ledger({"alice": 95}, max_balance=100)

    ledger.credit("alice", 5)  # exactly at the ceiling is fine
    with pytest.raises(Overflow):
        ledger.credit("alice", 1)

    assert ledger.balance_of("alice") == 100


def test_total_supply_and_touched():
    """Test aggregate supply and the set of balances changed since load"""
    ledger = Ledger({"alice": 10, "bob": 20})
    ledger.credit("carol", 5)
    ledger.debit("bob", 20)

    assert ledger.total_supply() == 15
    assert ledger.touched() == {"carol": 5, "bob": 0}
