"""
Interactive Menu Module

Console front end for a Ledger. Reads choices and values from an input
function, calls into the ledger, and prints results. Every ledger error and
every unparsable number is reported as text and the menu keeps running.
"""

from decimal import Decimal
from typing import Callable, Optional

from .amounts import format_amount, to_decimal
from .config import get_config
from .errors import LedgerError
from .ledger import Ledger
from .logging_config import get_logger, setup_logging


MENU = (
    "1. Add new account",
    "2. Deposit",
    "3. Withdraw",
    "4. Transfer",
    "5. Print account details",
    "6. Print transaction history",
    "7. Rollback transaction",
    "0. Exit",
)


class BankMenu:
    """
    Menu loop bound to one Ledger.

    Args:
        ledger: Ledger to operate on
        input_func: Prompting reader, input() by default
        output: Line writer, print() by default
    """

    def __init__(
        self,
        ledger: Ledger,
        input_func: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
        currency_symbol: Optional[str] = None,
        precision: Optional[int] = None
    ):
        settings = get_config()
        self.ledger = ledger
        self._input = input_func
        self._output = output
        self.symbol = currency_symbol if currency_symbol is not None else settings.currency_symbol
        self.precision = precision if precision is not None else settings.amount_precision
        self.logger = get_logger("bank_ledger.cli")
        self._actions = {
            "1": self.add_account,
            "2": self.deposit,
            "3": self.withdraw,
            "4": self.transfer,
            "5": self.print_account,
            "6": self.print_history,
            "7": self.rollback,
        }

    def run(self) -> None:
        """Show the menu until the user exits or input runs out"""
        while True:
            for line in MENU:
                self._output(line)
            try:
                choice = self._input("Enter your choice: ").strip()
            except EOFError:
                self._output("Exiting the program.")
                return

            if choice == "0":
                self._output("Exiting the program.")
                return

            action = self._actions.get(choice)
            if action is None:
                self._output("Invalid choice. Please try again.")
                continue

            try:
                action()
            except EOFError:
                self._output("Exiting the program.")
                return
            except LedgerError as e:
                self.logger.debug(f"Menu action {choice} failed: {e}")
                self._output(f"Error: {e}")

    # Menu actions

    def add_account(self) -> None:
        name = self._input("Enter account name: ").strip()
        balance = self._read_amount("Enter starting balance: ")
        if balance is None:
            return
        if not name:
            self._output("Account name must not be empty.")
            return
        self.ledger.add_account(name, balance)
        self._output("Account added successfully.")

    def deposit(self) -> None:
        account = self._find_account()
        if account is None:
            return
        amount = self._read_amount("Enter the deposit amount: ")
        if amount is None:
            return
        index = self.ledger.deposit(account.name, amount)
        self._report("Deposit", index)

    def withdraw(self) -> None:
        account = self._find_account()
        if account is None:
            return
        amount = self._read_amount("Enter the withdrawal amount: ")
        if amount is None:
            return
        index = self.ledger.withdraw(account.name, amount)
        self._report("Withdrawal", index)

    def transfer(self) -> None:
        from_account = self._find_account("Enter source account name: ")
        if from_account is None:
            return
        to_account = self._find_account("Enter destination account name: ")
        if to_account is None:
            return
        amount = self._read_amount("Enter the transfer amount: ")
        if amount is None:
            return
        index = self.ledger.transfer(from_account.name, to_account.name, amount)
        self._report("Transfer", index)

    def print_account(self) -> None:
        account = self._find_account()
        if account is None:
            return
        self._output(f"Account Name: {account.name}")
        self._output(f"Balance: {self._money(account.balance)}")

    def print_history(self) -> None:
        self._output("Transaction History:")
        for snapshot in self.ledger.history():
            self._output(f"Transaction {snapshot.index}:")
            for line in snapshot.lines(self.symbol, self.precision):
                self._output(line)
            self._output("")

    def rollback(self) -> None:
        self.print_history()
        raw = self._input("Enter the index of the transaction to rollback: ").strip()
        try:
            index = int(raw)
        except ValueError:
            self._output("Invalid transaction index. Please try again.")
            return
        self.ledger.rollback(index)
        self._output("Transaction rolled back successfully.")

    # Helpers

    def _find_account(self, prompt: str = "Enter account name: "):
        name = self._input(prompt).strip()
        account = self.ledger.find_account(name)
        if account is None:
            self._output("Account not found.")
        return account

    def _read_amount(self, prompt: str) -> Optional[Decimal]:
        raw = self._input(prompt)
        try:
            return to_decimal(raw)
        except ValueError:
            self._output(f"Invalid amount: {raw.strip()!r}")
            return None

    def _report(self, label: str, index: int) -> None:
        transaction = self.ledger.transaction_at(index)
        if transaction.success:
            self._output(f"{label} successful.")
        else:
            self._output(f"{label} failed: insufficient funds.")

    def _money(self, value: Decimal) -> str:
        return format_amount(value, self.symbol, self.precision)


def main() -> None:
    """Run the menu against a fresh in-memory ledger"""
    # Log lines would interleave with the menu, so only errors are shown
    setup_logging("ERROR", fmt=get_config().log_format)
    BankMenu(Ledger()).run()
