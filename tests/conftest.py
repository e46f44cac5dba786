"""Shared pytest fixtures for simperfi tests."""

import os
import tempfile
from datetime import datetime

import pytest

from simperfi.database.factories import create_sqlite_database
from simperfi.domain.account import AccountService
from simperfi.domain.allocation import AllocationService
from simperfi.domain.entities import LedgerEntry, Trade, TradeKind
from simperfi.domain.price_override import PriceOverrideService
from simperfi.domain.trade import TradeService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def trade_service(temp_db):
    """Create a TradeService with a temporary database."""
    return TradeService(temp_db)


@pytest.fixture
def allocation_service(temp_db):
    """Create an AllocationService with a temporary database."""
    return AllocationService(temp_db)


@pytest.fixture
def price_override_service(temp_db):
    """Create a PriceOverrideService with a temporary database."""
    return PriceOverrideService(temp_db)


@pytest.fixture
def sample_account(account_service):
    """Create a sample account for testing."""
    account_id = account_service.create_account(name="Test Wallet")
    return account_service.get_account(account_id)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


class LedgerBuilder:
    """Builds in-memory trades and ledger entries for pure calculation tests."""

    def __init__(self):
        self.trades: list[Trade] = []
        self.entries: list[LedgerEntry] = []

    def add(self, kind: TradeKind, when: datetime, *legs, account_id: int = 1) -> int:
        """Add a trade with ``(asset, amount, usd_price)`` legs and return its ID."""
        trade_id = len(self.trades) + 1
        self.trades.append(Trade(id=trade_id, timestamp=when, kind=kind))
        for asset, amount, usd_price in legs:
            self.entries.append(
                LedgerEntry(
                    id=len(self.entries) + 1,
                    trade_id=trade_id,
                    account_id=account_id,
                    asset=asset,
                    amount=amount,
                    usd_price=usd_price,
                )
            )
        return trade_id


@pytest.fixture
def ledger():
    """Create an empty in-memory ledger builder."""
    return LedgerBuilder()
