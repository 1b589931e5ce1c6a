"""
Ledger Module

The Ledger owns the accounts and the append-only transaction log. It is the
only component that runs transactions against account state: callers hand
it a transaction (or ask for a deposit/withdraw/transfer by account name),
and may later roll a logged transaction back by its index.

All mutating operations are serialized by a single re-entrant lock, so a
transfer is atomic with respect to any concurrent operation on either of
its accounts.
"""

import threading
from decimal import Decimal
from typing import Dict, Iterator, List, Optional, Union

from .accounts import Account
from .amounts import AmountLike
from .errors import (
    AccountNotFoundError, CannotRollbackError, DuplicateAccountError,
    IndexOutOfRangeError
)
from .logging_config import get_logger, log_action
from .transactions import (
    Clock, DepositTransaction, Transaction, TransactionSnapshot,
    TransferTransaction, WithdrawTransaction
)


class Ledger:
    """
    In-memory bank: accounts keyed by name plus an ordered transaction log.

    Log indices are stable: entries are appended and never removed, and a
    rollback updates the logged transaction in place.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self._accounts: Dict[str, Account] = {}
        self._transactions: List[Transaction] = []
        self._clock = clock
        self._lock = threading.RLock()
        self.logger = get_logger("bank_ledger.ledger")

    # Accounts

    def add_account(
        self,
        account: Union[Account, str, None],
        initial_balance: AmountLike = Decimal('0')
    ) -> Account:
        """
        Register an account.

        Args:
            account: An Account, or a name to build one from
            initial_balance: Starting balance when a name is given

        Returns:
            The registered Account

        Raises:
            ValueError: If account is None
            InvalidAmountError: If initial_balance is out of range
            DuplicateAccountError: If the name is already registered
        """
        if account is None:
            raise ValueError("Account must not be None")
        if isinstance(account, str):
            account = Account(account, initial_balance)

        with self._lock:
            if account.name in self._accounts:
                raise DuplicateAccountError(account.name)
            self._accounts[account.name] = account

        log_action(
            self.logger, "info", f"Account added: {account.name}",
            action="add_account", resource=f"account:{account.name}",
            extra={"balance": str(account.balance)}
        )
        return account

    def find_account(self, name: str) -> Optional[Account]:
        """Get account by name, or None"""
        return self._accounts.get(name)

    def get_account(self, name: str) -> Account:
        """Get account by name, raising AccountNotFoundError if missing"""
        account = self._accounts.get(name)
        if account is None:
            raise AccountNotFoundError(name)
        return account

    def get_balance(self, name: str) -> Optional[Decimal]:
        """Current balance of the named account, or None if unknown"""
        account = self._accounts.get(name)
        return account.balance if account else None

    def accounts(self) -> List[Account]:
        """All accounts in registration order"""
        with self._lock:
            return list(self._accounts.values())

    # Execution

    def execute(self, transaction: Transaction) -> int:
        """
        Execute a transaction and append it to the log.

        Insufficient funds is not an error: the transaction is logged with
        success=False and balances are left unchanged.

        Returns:
            Index of the transaction in the log

        Raises:
            AccountNotFoundError: If the transaction acts on an account not
                registered with this ledger
            AlreadyExecutedError: If the transaction already ran
            BalanceOverflowError: If a balance cannot be updated exactly; the
                transaction is not logged
        """
        with self._lock:
            for account in transaction.accounts:
                if self._accounts.get(account.name) is not account:
                    raise AccountNotFoundError(account.name)

            transaction.execute()
            self._transactions.append(transaction)
            index = len(self._transactions) - 1

        snapshot = transaction.describe(index)
        log_action(
            self.logger, "info" if transaction.success else "warning",
            f"Transaction {index} executed: {snapshot.transaction_type.value} "
            f"{'succeeded' if transaction.success else 'failed (insufficient funds)'}",
            action="execute_transaction", resource=f"transaction:{index}",
            extra={
                "amount": str(snapshot.amount),
                "accounts": list(snapshot.accounts),
                "success": snapshot.success
            }
        )
        return index

    def deposit(self, account_name: str, amount: AmountLike) -> int:
        """Convenience method for deposits"""
        account = self.get_account(account_name)
        return self.execute(DepositTransaction(account, amount, clock=self._clock))

    def withdraw(self, account_name: str, amount: AmountLike) -> int:
        """Convenience method for withdrawals"""
        account = self.get_account(account_name)
        return self.execute(WithdrawTransaction(account, amount, clock=self._clock))

    def transfer(self, from_name: str, to_name: str, amount: AmountLike) -> int:
        """Convenience method for transfers"""
        from_account = self.get_account(from_name)
        to_account = self.get_account(to_name)
        return self.execute(
            TransferTransaction(from_account, to_account, amount, clock=self._clock)
        )

    def rollback(self, index: int) -> Transaction:
        """
        Roll back the transaction logged at index.

        Raises:
            IndexOutOfRangeError: If no transaction is logged at index
            CannotRollbackError: If the transaction was already reversed or
                its execution did not succeed
            BalanceOverflowError: If a balance cannot be restored exactly
        """
        with self._lock:
            transaction = self._transaction_at(index)

            reason = transaction.rollback_refusal()
            if reason:
                log_action(
                    self.logger, "warning",
                    f"Rollback of transaction {index} refused: {reason}",
                    action="rollback_transaction", resource=f"transaction:{index}"
                )
                raise CannotRollbackError(reason, index)

            transaction.rollback()

        log_action(
            self.logger, "info", f"Transaction {index} rolled back",
            action="rollback_transaction", resource=f"transaction:{index}",
            extra={
                "amount": str(transaction.amount),
                "accounts": [account.name for account in transaction.accounts]
            }
        )
        return transaction

    # Queries

    def history(self) -> Iterator[TransactionSnapshot]:
        """
        Snapshots of every logged transaction, oldest first.

        The snapshots are taken when this is called, so later executions
        or rollbacks do not show up in an iteration already handed out.
        """
        with self._lock:
            snapshots = [
                transaction.describe(index)
                for index, transaction in enumerate(self._transactions)
            ]
        return iter(snapshots)

    def transaction_count(self) -> int:
        return len(self._transactions)

    def transaction_at(self, index: int) -> Transaction:
        """
        Get logged transaction by index.

        Raises:
            IndexOutOfRangeError: If index is negative or past the end
        """
        with self._lock:
            return self._transaction_at(index)

    def _transaction_at(self, index: int) -> Transaction:
        if not 0 <= index < len(self._transactions):
            raise IndexOutOfRangeError(index, len(self._transactions))
        return self._transactions[index]

    def __len__(self) -> int:
        return len(self._transactions)
