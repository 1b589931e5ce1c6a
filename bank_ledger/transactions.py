"""
Transaction Processing Module

Deposits, withdrawals and transfers. Each transaction carries its own
lifecycle state (success, executed, reversed, timestamp) and knows how to
apply and undo its balance mutation.

Lifecycle:
    created --execute()--> executed (success True or False)
    executed, success --rollback()--> reversed (success False)

execute() runs at most once. rollback() runs at most once, and only after
an execution that succeeded.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from .accounts import Account
from .amounts import (
    AmountLike, DEFAULT_PRECISION, DEFAULT_SYMBOL, check_amount, format_amount
)
from .errors import AlreadyExecutedError, BalanceOverflowError, CannotRollbackError


Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TransactionType(Enum):
    """Types of ledger transactions"""
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    TRANSFER = "transfer"


@dataclass(frozen=True)
class TransactionSnapshot:
    """Read-only view of a transaction at the time it was described"""
    index: Optional[int]
    transaction_type: TransactionType
    amount: Decimal
    success: bool
    executed: bool
    reversed: bool
    timestamp: Optional[datetime]
    accounts: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary"""
        result = asdict(self)
        result['transaction_type'] = self.transaction_type.value
        result['amount'] = str(self.amount)
        result['timestamp'] = self.timestamp.isoformat() if self.timestamp else None
        result['accounts'] = list(self.accounts)
        return result

    def lines(self, symbol: str = DEFAULT_SYMBOL,
              precision: int = DEFAULT_PRECISION) -> List[str]:
        """Console rendering, one field per line"""
        stamp = self.timestamp.isoformat(sep=" ", timespec="seconds") if self.timestamp else "-"
        return [
            f"Transaction Type: {self.transaction_type.value} ({' -> '.join(self.accounts)})",
            f"Transaction Amount: {format_amount(self.amount, symbol, precision)}",
            f"Transaction Success: {self.success}",
            f"Transaction Executed: {self.executed}",
            f"Transaction Reversed: {self.reversed}",
            f"Transaction DateStamp: {stamp}",
        ]


class Transaction(ABC):
    """
    Base class for a single balance mutation with execute/rollback lifecycle.

    Subclasses implement _apply() and _revert(); the base class owns every
    lifecycle check so the guards live in exactly one place.
    """

    transaction_type: TransactionType

    def __init__(self, amount: AmountLike, clock: Optional[Clock] = None):
        self._amount = check_amount(amount)
        self._clock = clock or utc_now
        self._success = False
        self._executed = False
        self._reversed = False
        self._timestamp: Optional[datetime] = None

    @property
    def amount(self) -> Decimal:
        return self._amount

    @property
    def success(self) -> bool:
        return self._success

    @property
    def executed(self) -> bool:
        return self._executed

    @property
    def reversed(self) -> bool:
        return self._reversed

    @property
    def timestamp(self) -> Optional[datetime]:
        return self._timestamp

    @property
    @abstractmethod
    def accounts(self) -> Tuple[Account, ...]:
        """Accounts this transaction acts on, source first"""

    @property
    def can_rollback(self) -> bool:
        """Check if transaction can be reversed"""
        return self._executed and self._success and not self._reversed

    def rollback_refusal(self) -> Optional[str]:
        """Reason rollback would be refused, or None if it is allowed"""
        if not self._executed:
            return "not executed"
        if self._reversed:
            return "already reversed"
        if not self._success:
            return "execution did not succeed"
        return None

    def execute(self) -> bool:
        """
        Apply the balance mutation.

        Returns:
            True if the mutation was applied, False if funds were insufficient

        Raises:
            AlreadyExecutedError: If execute() already ran on this transaction
            BalanceOverflowError: If a balance cannot be updated exactly; the
                transaction stays unexecuted and balances are unchanged
        """
        if self._executed:
            raise AlreadyExecutedError(self.transaction_type.value)

        timestamp = self._clock()
        success = self._apply()

        self._executed = True
        self._timestamp = timestamp
        self._success = success
        return success

    def rollback(self) -> None:
        """
        Undo a successful execution.

        Raises:
            CannotRollbackError: If the transaction was not executed, was
                already reversed, or its execution did not succeed
            BalanceOverflowError: If a balance cannot be updated exactly; the
                transaction and balances are left as they were
        """
        reason = self.rollback_refusal()
        if reason:
            raise CannotRollbackError(reason)

        self._revert()
        self._success = False
        self._reversed = True
        self._timestamp = self._clock()

    def describe(self, index: Optional[int] = None) -> TransactionSnapshot:
        return TransactionSnapshot(
            index=index,
            transaction_type=self.transaction_type,
            amount=self._amount,
            success=self._success,
            executed=self._executed,
            reversed=self._reversed,
            timestamp=self._timestamp,
            accounts=tuple(account.name for account in self.accounts),
        )

    @abstractmethod
    def _apply(self) -> bool:
        """Apply the forward mutation; return False to leave balances untouched"""

    @abstractmethod
    def _revert(self) -> None:
        """Apply the inverse of a successful _apply()"""

    def __repr__(self) -> str:
        names = ", ".join(account.name for account in self.accounts)
        return (
            f"{type(self).__name__}({names}, amount={self._amount}, "
            f"executed={self._executed}, success={self._success}, "
            f"reversed={self._reversed})"
        )


def _require_account(account: Optional[Account], role: str) -> Account:
    if account is None:
        raise ValueError(f"{role} must not be None")
    return account


class DepositTransaction(Transaction):
    """Adds funds to an account. Always succeeds."""

    transaction_type = TransactionType.DEPOSIT

    def __init__(self, account: Account, amount: AmountLike,
                 clock: Optional[Clock] = None):
        self.account = _require_account(account, "account")
        super().__init__(amount, clock)

    @property
    def accounts(self) -> Tuple[Account, ...]:
        return (self.account,)

    def _apply(self) -> bool:
        self.account.credit(self._amount)
        return True

    def _revert(self) -> None:
        self.account.debit(self._amount)


class WithdrawTransaction(Transaction):
    """Removes funds from an account if the balance covers the amount"""

    transaction_type = TransactionType.WITHDRAW

    def __init__(self, account: Account, amount: AmountLike,
                 clock: Optional[Clock] = None):
        self.account = _require_account(account, "account")
        super().__init__(amount, clock)

    @property
    def accounts(self) -> Tuple[Account, ...]:
        return (self.account,)

    def _apply(self) -> bool:
        if not self.account.has_funds(self._amount):
            return False
        self.account.debit(self._amount)
        return True

    def _revert(self) -> None:
        self.account.credit(self._amount)


class TransferTransaction(Transaction):
    """Moves funds between two accounts; both legs apply or neither does"""

    transaction_type = TransactionType.TRANSFER

    def __init__(self, from_account: Account, to_account: Account,
                 amount: AmountLike, clock: Optional[Clock] = None):
        self.from_account = _require_account(from_account, "from_account")
        self.to_account = _require_account(to_account, "to_account")
        super().__init__(amount, clock)

    @property
    def accounts(self) -> Tuple[Account, ...]:
        return (self.from_account, self.to_account)

    def _apply(self) -> bool:
        if not self.from_account.has_funds(self._amount):
            return False
        self._move(self.from_account, self.to_account)
        return True

    def _revert(self) -> None:
        self._move(self.to_account, self.from_account)

    def _move(self, source: Account, target: Account) -> None:
        source.debit(self._amount)
        try:
            target.credit(self._amount)
        except BalanceOverflowError:
            # undo the first leg
            source.credit(self._amount)
            raise
