"""REST endpoints for orders, balance and history."""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, Header
from pydantic import BaseModel

from .auth import Authenticator
from .ledger import BalanceLedger
from .order_desk import OrderDesk


class OrderRequest(BaseModel):
    """Market order body. The execution price always comes from the quote cache."""

    asset: str
    type: str
    amount: Decimal


def create_wallet_router(
    desk: OrderDesk,
    ledger: BalanceLedger,
    authenticator: Authenticator,
) -> APIRouter:
    """Create the wallet router. Every endpoint acts on the caller's own account."""
    router = APIRouter(prefix="/api/wallet", tags=["wallet"])

    def current_account(authorization: str | None = Header(default=None)) -> str:
        token = None
        if authorization:
            token = authorization.removeprefix("Bearer ").strip()
        return authenticator.authenticate(token)

    @router.post("/transaction")
    async def place_order(order: OrderRequest, account_id: str = Depends(current_account)) -> dict:
        transaction = await desk.place_order(account_id, order.asset, order.type, order.amount)
        return {
            "transaction": transaction.to_dict(),
            "balance": str(transaction.balance_after),
        }

    @router.get("/transactions")
    async def get_transactions(account_id: str = Depends(current_account)) -> dict:
        return {"transactions": [t.to_dict() for t in ledger.get_history(account_id)]}

    @router.get("/balance")
    async def get_balance(account_id: str = Depends(current_account)) -> dict:
        return {"balance": str(ledger.get_balance(account_id))}

    return router
