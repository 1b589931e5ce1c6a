"""
Bank Ledger

An in-memory ledger of named accounts and deposit, withdraw and transfer
transactions with an explicit execute/rollback lifecycle. Balances use
Decimal throughout.
"""

from .accounts import Account
from .errors import (
    AccountNotFoundError, AlreadyExecutedError, BalanceOverflowError,
    CannotRollbackError, DuplicateAccountError, ExecutionError,
    IndexOutOfRangeError, InvalidAmountError, LedgerError, RollbackError
)
from .ledger import Ledger
from .transactions import (
    DepositTransaction, Transaction, TransactionSnapshot, TransactionType,
    TransferTransaction, WithdrawTransaction
)

__version__ = "1.0.0"

__all__ = [
    "Account",
    "Ledger",
    "Transaction",
    "DepositTransaction",
    "WithdrawTransaction",
    "TransferTransaction",
    "TransactionSnapshot",
    "TransactionType",
    "LedgerError",
    "DuplicateAccountError",
    "AccountNotFoundError",
    "InvalidAmountError",
    "BalanceOverflowError",
    "ExecutionError",
    "AlreadyExecutedError",
    "RollbackError",
    "CannotRollbackError",
    "IndexOutOfRangeError",
]
