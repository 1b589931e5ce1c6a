"""
FastAPI REST API Module

Exposes a Ledger over HTTP: account registration and lookup, deposits,
withdrawals, transfers, transaction history and rollback. The app is built
around an explicitly passed Ledger; nothing is held in module globals.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request, status
from pydantic import BaseModel, Field
import uvicorn

from .amounts import to_decimal
from .config import get_config
from .errors import (
    AccountNotFoundError, CannotRollbackError, DuplicateAccountError,
    IndexOutOfRangeError, InvalidAmountError, LedgerError
)
from .ledger import Ledger
from .logging_config import setup_logging


# Pydantic models for API requests
class CreateAccountRequest(BaseModel):
    name: str = Field(..., min_length=1)
    initial_balance: str = Field("0", description="Decimal amount as string")


class DepositRequest(BaseModel):
    account: str
    amount: str = Field(..., description="Decimal amount as string")


class WithdrawRequest(BaseModel):
    account: str
    amount: str = Field(..., description="Decimal amount as string")


class TransferRequest(BaseModel):
    from_account: str
    to_account: str
    amount: str = Field(..., description="Decimal amount as string")


def get_ledger(request: Request) -> Ledger:
    return request.app.state.ledger


def _to_http_error(error: LedgerError) -> HTTPException:
    """Map a ledger error kind to an HTTP status"""
    if isinstance(error, (AccountNotFoundError, IndexOutOfRangeError)):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, (DuplicateAccountError, CannotRollbackError)):
        code = status.HTTP_409_CONFLICT
    elif isinstance(error, InvalidAmountError):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=str(error))


def _parse_amount(raw: str):
    try:
        return to_decimal(raw)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


def _executed(ledger: Ledger, index: int) -> dict:
    snapshot = ledger.transaction_at(index).describe(index)
    return {"index": index, "transaction": snapshot.to_dict()}


def create_app(ledger: Optional[Ledger] = None) -> FastAPI:
    """
    Build the API around a ledger.

    Args:
        ledger: Ledger to expose; a fresh empty one if not given
    """
    app = FastAPI(
        title="Bank Ledger API",
        description="In-memory ledger with execute/rollback transactions",
        version="1.0.0",
    )
    app.state.ledger = ledger if ledger is not None else Ledger()

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

    # Account Endpoints
    @app.post("/accounts", status_code=status.HTTP_201_CREATED)
    async def create_account(
        request: CreateAccountRequest,
        ledger: Ledger = Depends(get_ledger)
    ):
        """Register a new account"""
        balance = _parse_amount(request.initial_balance)
        try:
            account = ledger.add_account(request.name, balance)
        except LedgerError as e:
            raise _to_http_error(e)
        return account.to_dict()

    @app.get("/accounts/{name}")
    async def get_account(name: str, ledger: Ledger = Depends(get_ledger)):
        """Get account balance"""
        account = ledger.find_account(name)
        if account is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Account not found")
        return account.to_dict()

    # Transaction Endpoints
    @app.post("/transactions/deposit", status_code=status.HTTP_201_CREATED)
    async def deposit(request: DepositRequest, ledger: Ledger = Depends(get_ledger)):
        """Make a deposit"""
        amount = _parse_amount(request.amount)
        try:
            index = ledger.deposit(request.account, amount)
        except LedgerError as e:
            raise _to_http_error(e)
        return _executed(ledger, index)

    @app.post("/transactions/withdraw", status_code=status.HTTP_201_CREATED)
    async def withdraw(request: WithdrawRequest, ledger: Ledger = Depends(get_ledger)):
        """Make a withdrawal"""
        amount = _parse_amount(request.amount)
        try:
            index = ledger.withdraw(request.account, amount)
        except LedgerError as e:
            raise _to_http_error(e)
        return _executed(ledger, index)

    @app.post("/transactions/transfer", status_code=status.HTTP_201_CREATED)
    async def transfer(request: TransferRequest, ledger: Ledger = Depends(get_ledger)):
        """Make a transfer between accounts"""
        amount = _parse_amount(request.amount)
        try:
            index = ledger.transfer(request.from_account, request.to_account, amount)
        except LedgerError as e:
            raise _to_http_error(e)
        return _executed(ledger, index)

    @app.get("/transactions")
    async def list_transactions(ledger: Ledger = Depends(get_ledger)):
        """Transaction history, oldest first"""
        transactions = [snapshot.to_dict() for snapshot in ledger.history()]
        return {"count": len(transactions), "transactions": transactions}

    @app.get("/transactions/{index}")
    async def get_transaction(index: int, ledger: Ledger = Depends(get_ledger)):
        """Get a logged transaction"""
        try:
            transaction = ledger.transaction_at(index)
        except LedgerError as e:
            raise _to_http_error(e)
        return transaction.describe(index).to_dict()

    @app.post("/transactions/{index}/rollback")
    async def rollback_transaction(index: int, ledger: Ledger = Depends(get_ledger)):
        """Roll back a logged transaction"""
        try:
            transaction = ledger.rollback(index)
        except LedgerError as e:
            raise _to_http_error(e)
        return transaction.describe(index).to_dict()

    return app


def run_server(host: Optional[str] = None, port: Optional[int] = None):
    """Run the FastAPI server"""
    settings = get_config()
    setup_logging(settings.log_level, fmt=settings.log_format)
    uvicorn.run(
        create_app(),
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_level=settings.log_level.lower()
    )
