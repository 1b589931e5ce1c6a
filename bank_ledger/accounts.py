"""
Account Module

An account is a named balance. Bounds checking is not done here: whether
funds suffice is decided by the transaction acting on the account. Balance
updates are exact or they do not happen.
"""

from decimal import Decimal
from typing import Any, Dict

from .amounts import AmountLike, check_amount, exact_add, exact_sub
from .errors import BalanceOverflowError


class Account:
    """
    Named account holding a mutable Decimal balance.

    The name is the account's identity inside a Ledger and cannot change.

    Raises:
        ValueError: If the name is empty
        InvalidAmountError: If the starting balance is out of range
    """

    def __init__(self, name: str, balance: AmountLike = Decimal('0')):
        if not name or not name.strip():
            raise ValueError("Account name must not be empty")
        self._name = name
        self.balance = check_amount(balance, positive=False)

    @property
    def name(self) -> str:
        return self._name

    def credit(self, amount: Decimal) -> None:
        """
        Add amount to the balance.

        Raises:
            BalanceOverflowError: If the new balance would need rounding;
                the balance is left unchanged
        """
        try:
            self.balance = exact_add(self.balance, amount)
        except ArithmeticError:
            raise BalanceOverflowError(self._name, "credit", amount)

    def debit(self, amount: Decimal) -> None:
        """Subtract amount from the balance, same guarantees as credit()"""
        try:
            self.balance = exact_sub(self.balance, amount)
        except ArithmeticError:
            raise BalanceOverflowError(self._name, "debit", amount)

    def has_funds(self, amount: Decimal) -> bool:
        """Check if the balance covers amount"""
        return self.balance >= amount

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self._name, "balance": str(self.balance)}

    def __repr__(self) -> str:
        return f"Account(name={self._name!r}, balance={self.balance!r})"
