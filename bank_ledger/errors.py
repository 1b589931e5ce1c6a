"""
Ledger Error Hierarchy

All ledger errors inherit from LedgerError, which is itself a ValueError,
so callers may catch either. Every error is recoverable: the engine reports
misuse to its caller and never aborts.

Insufficient funds is NOT an error. It is the normal success=False outcome
of a well-formed withdrawal or transfer.
"""

from typing import Any, Dict, Optional


class LedgerError(ValueError):
    """
    Base exception for all ledger errors.

    Example:
        >>> try:
        ...     ledger.rollback(3)
        ... except LedgerError as e:
        ...     print(f"Ledger error: {e}")
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class DuplicateAccountError(LedgerError):
    """An account with the same name is already registered"""

    def __init__(self, name: str):
        super().__init__(f"Account '{name}' already exists", {"name": name})
        self.name = name


class AccountNotFoundError(LedgerError):
    """No account with the given name is registered"""

    def __init__(self, name: str):
        super().__init__(f"Account '{name}' not found", {"name": name})
        self.name = name


class InvalidAmountError(LedgerError):
    """
    Amount is not acceptable to the ledger.

    Raised when:
    - A transaction amount is zero or negative
    - The amount has more decimal places than the ledger keeps
    - The amount exceeds the configured maximum
    - The value is not a finite number
    """

    def __init__(self, amount: Any, reason: str = "must be positive"):
        super().__init__(
            f"Invalid amount {amount}: {reason}",
            {"amount": str(amount), "reason": reason}
        )
        self.amount = amount
        self.reason = reason


class BalanceOverflowError(LedgerError):
    """A balance update cannot be represented exactly"""

    def __init__(self, account: str, operation: str, amount: Any):
        super().__init__(
            f"Cannot {operation} {amount} on account '{account}' without losing precision",
            {"account": account, "operation": operation, "amount": str(amount)}
        )
        self.account = account
        self.operation = operation
        self.amount = amount


class ExecutionError(LedgerError):
    """Base exception for misuse of Transaction.execute"""
    pass


class AlreadyExecutedError(ExecutionError):
    """Transaction.execute was called on a transaction that already ran"""

    def __init__(self, transaction_type: str):
        super().__init__(
            f"{transaction_type.capitalize()} transaction has already been executed",
            {"transaction_type": transaction_type}
        )


class RollbackError(LedgerError):
    """Base exception for refused rollbacks"""
    pass


class CannotRollbackError(RollbackError):
    """
    Transaction is not in a state that allows rollback.

    Raised when:
    - The transaction was never executed
    - The transaction was already reversed
    - The execution did not succeed, so there is nothing to undo
    """

    def __init__(self, reason: str, index: Optional[int] = None):
        where = f"Transaction {index}" if index is not None else "Transaction"
        super().__init__(
            f"{where} cannot be rolled back: {reason}",
            {"reason": reason, "index": index}
        )
        self.reason = reason
        self.index = index


class IndexOutOfRangeError(RollbackError):
    """No transaction is logged at the given index"""

    def __init__(self, index: int, count: int):
        super().__init__(
            f"Invalid transaction index {index} (ledger holds {count} transactions)",
            {"index": index, "count": count}
        )
        self.index = index
        self.count = count
