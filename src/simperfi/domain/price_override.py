"""Manual price override service."""

import math
from typing import Optional

from simperfi.database.base import Database
from simperfi.domain.errors import ValidationError
from simperfi.domain.trade import normalize_symbol


class PriceOverrideService:
    """Service for user-set USD prices that win over every feed."""

    def __init__(self, db: Database):
        """Initialize price override service.

        Args:
            db: Database instance
        """
        self.db = db

    def set_override(self, symbol: str, price: float) -> str:
        """Set a manual price for a symbol.

        Returns:
            The normalized symbol

        Raises:
            ValidationError: If the price is not a number greater than zero
        """
        symbol = normalize_symbol(symbol)
        price = float(price)
        if not math.isfinite(price) or price <= 0:
            raise ValidationError("Enter a valid price greater than zero")
        self.db.set_price_override(symbol, price)
        return symbol

    def clear_override(self, symbol: str) -> bool:
        """Remove a manual price. Returns True if one was set."""
        return self.db.delete_price_override(normalize_symbol(symbol))

    def get_override(self, symbol: str) -> Optional[float]:
        """Return the manual price for a symbol, if any."""
        return self.db.list_price_overrides().get(normalize_symbol(symbol))

    def list_overrides(self) -> dict[str, float]:
        """Return all manual prices keyed by symbol."""
        return self.db.list_price_overrides()
