"""Market orders: price from the quote cache, execution by the ledger."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from ..market.models import Quote
from .ledger import BalanceLedger, parse_asset, parse_positive_decimal, parse_side
from .models import Side, Transaction

logger = logging.getLogger(__name__)


class QuoteSource(Protocol):
    """The one capability the order desk needs from market data."""

    async def get_quote(self, symbol: str) -> Quote: ...


class OrderDesk:
    """Executes market orders at the current quoted price.

    The order is validated before any quote is requested, so a malformed
    request fails with InvalidOrder even while market data is down.
    QuoteUnavailable propagates untouched and nothing is executed.
    """

    def __init__(self, quotes: QuoteSource, ledger: BalanceLedger) -> None:
        self._quotes = quotes
        self._ledger = ledger

    async def place_order(
        self,
        account_id: str,
        asset: str,
        side: Side | str,
        amount: Any,
    ) -> Transaction:
        side = parse_side(side)
        asset = parse_asset(asset)
        amount = parse_positive_decimal("amount", amount)

        quote = await self._quotes.get_quote(asset)
        logger.debug("Pricing %s order for %s at %s", side.value, quote.symbol, quote.price)
        return await self._ledger.apply_order(account_id, quote.symbol, side, amount, quote.price)
