"""Domain model entities for simperfi.

These are pure data classes representing business concepts, independent of
database schema. Derived values (holdings, valuations, snapshots) live here
too so that every layer hands around the same immutable types.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from enum import Enum
from typing import Optional


class TradeKind(str, Enum):
    """Kind of financial event recorded by a trade."""

    TRADE = "trade"
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    TRANSFER = "transfer"
    BUY = "buy"
    SELL = "sell"
    GAIN = "gain"
    LOSS = "loss"


class AccountType(str, Enum):
    """Kind of bucket an account represents."""

    CRYPTO_WALLET = "crypto_wallet"
    BANK_ACCOUNT = "bank_account"
    PLATFORM = "platform"
    CUSTODY = "custody"
    OTHER = "other"


LEGACY_ACCOUNT_TYPES = {
    "hot": AccountType.CRYPTO_WALLET,
    "cold": AccountType.CRYPTO_WALLET,
    "exchange": AccountType.PLATFORM,
    "staked": AccountType.CUSTODY,
}


def normalize_account_type(value: Optional[str]) -> AccountType:
    """Map a stored or user-supplied account type to an AccountType.

    Legacy wallet types are translated, unknown values become OTHER and a
    missing value defaults to CRYPTO_WALLET.
    """
    if not value:
        return AccountType.CRYPTO_WALLET
    value = value.strip().lower()
    if value in LEGACY_ACCOUNT_TYPES:
        return LEGACY_ACCOUNT_TYPES[value]
    try:
        return AccountType(value)
    except ValueError:
        return AccountType.OTHER


@dataclass(frozen=True)
class Account:
    """Account domain entity (wallet, bank, exchange, custody...)."""

    id: int
    name: str
    account_type: AccountType
    created_at: datetime


@dataclass(frozen=True)
class Trade:
    """Parent record of one financial event."""

    id: int
    timestamp: datetime
    kind: TradeKind
    notes: Optional[str] = None
    pair: Optional[str] = None
    pair_price: Optional[float] = None


@dataclass(frozen=True)
class LedgerEntry:
    """One signed asset movement belonging to a trade.

    Positive amounts are inflows, negative amounts outflows. ``usd_price`` is
    the USD price snapshot taken when the event was recorded.
    """

    id: int
    trade_id: int
    account_id: Optional[int]
    asset: str
    amount: float
    usd_price: Optional[float] = None


@dataclass(frozen=True)
class LedgerLeg:
    """Unsaved ledger entry, written together with its parent trade."""

    account_id: int
    asset: str
    amount: float
    usd_price: Optional[float] = None


@dataclass(frozen=True)
class TargetAllocation:
    """Desired share of the portfolio for one asset, in percent."""

    asset: str
    percentage: float


@dataclass(frozen=True)
class Holding:
    """Derived per-asset position."""

    asset: str
    amount: float
    avg_buy_price: float
    total_cost_basis: float
    last_buy_price: float


@dataclass(frozen=True)
class HistoryPoint:
    """Total portfolio value at the end of one calendar day."""

    date: date
    value: float


@dataclass(frozen=True)
class HoldingValuation:
    """Holding marked to a resolved price."""

    holding: Holding
    price: float
    value: float
    unrealized_pnl: float
    unrealized_pnl_percent: float
    allocation_percent: float
    target_percent: float
    drift_percent: float
    last_buy_change_percent: float
    is_manual_price: bool = False


@dataclass(frozen=True)
class PortfolioSnapshot:
    """Read-only result of one engine run."""

    generation: int
    as_of: date
    holdings: tuple[Holding, ...]
    valuations: tuple[HoldingValuation, ...]
    total_value: float
    total_cost_basis: float
    unrealized_pnl: float
    unrealized_pnl_percent: float
    realized_pnl: float
    history: tuple[HistoryPoint, ...] = field(default_factory=tuple)
