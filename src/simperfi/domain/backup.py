"""Backup export and import."""

import json
import logging
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from simperfi.database.base import Database
from simperfi.domain.account import normalize_account_type
from simperfi.domain.entities import Account, LedgerEntry, TargetAllocation, Trade, TradeKind
from simperfi.domain.errors import ValidationError

logger = logging.getLogger(__name__)

BACKUP_VERSION = 2


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def _field(raw: dict[str, Any], *names: str) -> Any:
    """Return the first of ``names`` present in ``raw``."""
    for name in names:
        if raw.get(name) is not None:
            return raw[name]
    return None


def _parse_timestamp(value: Optional[str]) -> datetime:
    """Parse an ISO timestamp into a naive local datetime."""
    if not value:
        return datetime.now()
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


class BackupService:
    """Service for dumping the whole store to JSON and restoring it."""

    def __init__(self, db: Database):
        """Initialize backup service.

        Args:
            db: Database instance
        """
        self.db = db

    def export_data(self) -> dict[str, Any]:
        """Return the full store as a JSON-serializable dictionary."""
        return {
            "accounts": [
                {
                    "id": account.id,
                    "name": account.name,
                    "type": account.account_type.value,
                    "created_at": account.created_at.isoformat(),
                }
                for account in self.db.list_accounts()
            ],
            "trades": [
                {
                    "id": trade.id,
                    "date": trade.timestamp.isoformat(),
                    "type": trade.kind.value,
                    "notes": trade.notes,
                    "pair": trade.pair,
                    "pair_price": trade.pair_price,
                }
                for trade in self.db.list_trades()
            ],
            "ledger": [
                {
                    "id": entry.id,
                    "trade_id": entry.trade_id,
                    "account_id": entry.account_id,
                    "asset": entry.asset,
                    "amount": entry.amount,
                    "usd_price": entry.usd_price,
                }
                for entry in self.db.list_ledger_entries()
            ],
            "targets": [
                {"asset": target.asset, "percentage": target.percentage}
                for target in self.db.list_target_allocations()
            ],
            "custom_prices": self.db.list_price_overrides(),
            "meta": {
                "timestamp": datetime.now().isoformat(),
                "version": BACKUP_VERSION,
            },
        }

    def export_to_file(self, path: Path) -> None:
        """Write the backup document to ``path``."""
        payload = self.export_data()
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        logger.info(
            "Exported %d trades and %d ledger entries to %s",
            len(payload["trades"]),
            len(payload["ledger"]),
            path,
        )

    def import_data(self, payload: dict[str, Any]) -> None:
        """Replace the whole store with the contents of a backup document.

        Documents written by the browser version (camelCase keys, ``wallets``
        instead of ``accounts``, prices under ``settings``) are accepted too.

        Raises:
            ValidationError: If required tables are missing or a record is malformed
        """
        raw_accounts = payload.get("accounts", payload.get("wallets"))
        if not all(
            isinstance(table, list)
            for table in (raw_accounts, payload.get("trades"), payload.get("ledger"))
        ):
            raise ValidationError("Invalid backup file structure: Missing required tables.")

        try:
            accounts = [
                Account(
                    id=int(raw["id"]),
                    name=raw["name"],
                    account_type=normalize_account_type(raw.get("type")),
                    created_at=_parse_timestamp(_field(raw, "created_at", "createdAt")),
                )
                for raw in raw_accounts
            ]
            trades = [
                Trade(
                    id=int(raw["id"]),
                    timestamp=_parse_timestamp(raw["date"]),
                    kind=TradeKind(raw["type"]),
                    notes=raw.get("notes") or None,
                    pair=raw.get("pair"),
                    pair_price=_optional_float(_field(raw, "pair_price", "pairPrice")),
                )
                for raw in payload["trades"]
            ]
            entries = []
            for raw in payload["ledger"]:
                account_id = _field(raw, "account_id", "accountId", "walletId")
                entries.append(
                    LedgerEntry(
                        id=int(raw["id"]),
                        trade_id=int(_field(raw, "trade_id", "tradeId")),
                        account_id=int(account_id) if account_id is not None else None,
                        asset=str(_field(raw, "asset", "assetTicker")).strip().upper(),
                        amount=float(raw["amount"]),
                        usd_price=_optional_float(_field(raw, "usd_price", "usdPriceAtTime")),
                    )
                )
            targets = [
                TargetAllocation(
                    asset=str(_field(raw, "asset", "ticker")).strip().upper(),
                    percentage=float(raw["percentage"]),
                )
                for raw in payload.get("targets") or []
            ]
            raw_prices = payload.get("custom_prices")
            if raw_prices is None:
                settings = payload.get("settings") or [{}]
                raw_prices = settings[0].get("customPrices") or {}
            overrides = {
                str(symbol).strip().upper(): float(price) for symbol, price in raw_prices.items()
            }
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ValidationError(f"Invalid backup record: {e}") from e

        account_ids = {account.id for account in accounts}
        trade_ids = {trade.id for trade in trades}
        orphans = [entry for entry in entries if entry.trade_id not in trade_ids]
        if orphans:
            logger.warning("Skipping %d ledger entries without a trade", len(orphans))
        entries = [
            entry
            if entry.account_id in account_ids or entry.account_id is None
            else replace(entry, account_id=None)
            for entry in entries
            if entry.trade_id in trade_ids
        ]

        self.db.replace_all(accounts, trades, entries, targets, overrides)
        logger.info("Imported %d trades and %d ledger entries", len(trades), len(entries))

    def import_from_file(self, path: Path) -> None:
        """Read a backup document from ``path`` and import it."""
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValidationError(f"Backup file is not valid JSON: {e}") from e
        if not isinstance(payload, dict):
            raise ValidationError("Invalid backup file structure: Missing required tables.")
        self.import_data(payload)
