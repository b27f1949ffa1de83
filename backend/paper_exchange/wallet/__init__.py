"""Wallet subsystem.

Public API:
    BalanceLedger        - Atomic order application and transaction history
    OrderDesk            - Market orders priced from the quote cache
    Account, Transaction - Immutable ledger records
    Side                 - Buy / sell
    AccountStore         - Persistence protocol (InMemoryAccountStore provided)
    Authenticator        - Credential -> account id protocol (TokenRegistry provided)
"""

from .auth import Authenticator, TokenRegistry
from .ledger import BalanceLedger
from .models import Account, Side, Transaction
from .order_desk import OrderDesk
from .store import AccountStore, InMemoryAccountStore

__all__ = [
    "BalanceLedger",
    "OrderDesk",
    "Account",
    "Transaction",
    "Side",
    "AccountStore",
    "InMemoryAccountStore",
    "Authenticator",
    "TokenRegistry",
]
