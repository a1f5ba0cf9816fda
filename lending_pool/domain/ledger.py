"""Per-account balance bookkeeping with overflow and underflow checks"""

from typing import Dict, Iterator, Mapping, Tuple
from lending_pool.domain.exceptions import InvalidAmount, InsufficientBalance, Overflow

# Signed 64-bit ceiling, matches the BIGINT balance column
DEFAULT_MAX_BALANCE = 2**63 - 1


class Ledger:
    """Mapping from account identity to a non-negative integer balance"""

    def __init__(self, balances: Mapping[str, int] | None = None, max_balance: int = DEFAULT_MAX_BALANCE):
        self.max_balance = max_balance
        self._balances: Dict[str, int] = {k: v for k, v in (balances or {}).items() if v}
        self._touched: set[str] = set()

    def balance_of(self, identity: str) -> int:
        """Current balance, 0 for identities never credited"""
        return self._balances.get(identity, 0)

    def credit(self, identity: str, amount: int) -> int:
        """
        Add amount to identity's balance.

        Raises:
            InvalidAmount: amount is not a positive integer
            Overflow: result would exceed max_balance
        """
        _require_positive(amount)
        current = self.balance_of(identity)
        if amount > self.max_balance - current:
            raise Overflow(f"Crediting {amount} to {identity} exceeds {self.max_balance}")

        self._balances[identity] = current + amount
        self._touched.add(identity)
        return self._balances[identity]

    def debit(self, identity: str, amount: int) -> int:
        """
        Subtract amount from identity's balance.

        Raises:
            InvalidAmount: amount is not a positive integer
            InsufficientBalance: amount exceeds the current balance
        """
        _require_positive(amount)
        current = self.balance_of(identity)
        if amount > current:
            raise InsufficientBalance(f"{identity} has {current}, needs {amount}")

        self._balances[identity] = current - amount
        self._touched.add(identity)
        return self._balances[identity]

    def total_supply(self) -> int:
        return sum(self._balances.values())

    def items(self) -> Iterator[Tuple[str, int]]:
        return iter(self._balances.items())

    def touched(self) -> Dict[str, int]:
        """Balances mutated since construction, for persistence"""
        return {identity: self.balance_of(identity) for identity in self._touched}


def _require_positive(amount: int) -> None:
    # bool is an int subclass; reject it along with non-integers
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidAmount(f"Amount must be a positive integer, got {amount!r}")
