"""SQLAlchemy models for simperfi database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Float,
    create_engine,
    event,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Account(Base):
    """Account model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    account_type = Column(String, nullable=False, default="crypto_wallet")
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    ledger_entries = relationship("LedgerEntry", back_populates="account")


class Trade(Base):
    """Trade model (parent record of one financial event)."""

    __tablename__ = "trades"

    id = Column(Integer, primary_key=True)
    timestamp = Column(DateTime, nullable=False, index=True)
    kind = Column(String, nullable=False, index=True)
    notes = Column(String, nullable=True)
    pair = Column(String, nullable=True)
    pair_price = Column(Float, nullable=True)

    # Relationships
    ledger_entries = relationship(
        "LedgerEntry", back_populates="trade", cascade="all, delete-orphan"
    )


class LedgerEntry(Base):
    """Ledger entry model (one signed asset movement)."""

    __tablename__ = "ledger_entries"

    id = Column(Integer, primary_key=True)
    trade_id = Column(Integer, ForeignKey("trades.id", ondelete="CASCADE"), nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True, index=True)
    asset = Column(String, nullable=False, index=True)
    amount = Column(Float, nullable=False)
    usd_price = Column(Float, nullable=True)

    # Relationships
    trade = relationship("Trade", back_populates="ledger_entries")
    account = relationship("Account", back_populates="ledger_entries")


class TargetAllocation(Base):
    """Target allocation model."""

    __tablename__ = "target_allocations"

    asset = Column(String, primary_key=True)
    percentage = Column(Float, nullable=False)


class PriceOverride(Base):
    """Manual price override model."""

    __tablename__ = "price_overrides"

    asset = Column(String, primary_key=True)
    price = Column(Float, nullable=False)
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
