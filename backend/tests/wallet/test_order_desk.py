"""Tests for OrderDesk."""

from decimal import Decimal

import pytest

from paper_exchange.exceptions import InsufficientBalance, InvalidOrder, QuoteUnavailable
from paper_exchange.market.cache import QuoteCache
from paper_exchange.wallet.ledger import BalanceLedger
from paper_exchange.wallet.models import Side
from paper_exchange.wallet.order_desk import OrderDesk
from paper_exchange.wallet.store import InMemoryAccountStore


@pytest.fixture
def ledger(clock) -> BalanceLedger:
    ledger = BalanceLedger(InMemoryAccountStore(), clock=clock)
    ledger.open_account("alice")
    return ledger


@pytest.fixture
def desk(fake_client, clock, ledger) -> OrderDesk:
    return OrderDesk(QuoteCache(fake_client, clock=clock), ledger)


@pytest.mark.asyncio
class TestOrderDesk:
    """Market orders priced from the quote cache."""

    async def test_executes_at_quoted_price(self, desk, ledger):
        txn = await desk.place_order("alice", "eth-usd", "sell", Decimal("0.5"))

        assert txn.asset == "ETH-USD"
        assert txn.side is Side.SELL
        assert txn.price == Decimal("3000")
        assert txn.total == Decimal("1500.0")
        assert ledger.get_balance("alice") == Decimal("2500.0")

    async def test_insufficient_balance_at_market(self, desk, ledger):
        with pytest.raises(InsufficientBalance):
            await desk.place_order("alice", "BTC-USD", Side.BUY, 1)
        assert ledger.get_history("alice") == ()

    async def test_quote_unavailable_propagates(self, desk, fake_client, ledger):
        """Test that a cold cache with upstream down executes nothing."""
        fake_client.fail = True
        with pytest.raises(QuoteUnavailable):
            await desk.place_order("alice", "BTC-USD", Side.BUY, Decimal("0.001"))
        assert ledger.get_balance("alice") == Decimal("1000")
        assert ledger.get_history("alice") == ()

    async def test_zero_upstream_price_never_trades(self, desk, fake_client, ledger):
        """Test that an anomalous zero price cannot reach the ledger."""
        fake_client.prices["BTC-USD"] = Decimal("0")
        with pytest.raises(QuoteUnavailable):
            await desk.place_order("alice", "BTC-USD", Side.BUY, 1)
        assert ledger.get_history("alice") == ()

    async def test_invalid_order_skips_quote(self, desk, fake_client):
        """Test that malformed orders are rejected before any upstream call."""
        with pytest.raises(InvalidOrder):
            await desk.place_order("alice", "BTC-USD", "hold", 1)
        with pytest.raises(InvalidOrder):
            await desk.place_order("alice", "BTC-USD", Side.BUY, 0)
        with pytest.raises(InvalidOrder):
            await desk.place_order("alice", "", Side.BUY, 1)
        assert fake_client.calls == 0

    async def test_uses_cached_quote(self, desk, fake_client):
        await desk.place_order("alice", "ETH-USD", Side.SELL, 1)
        await desk.place_order("alice", "ETH-USD", Side.SELL, 1)
        assert fake_client.calls == 1
