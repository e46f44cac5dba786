"""Target allocation service."""

import math

from simperfi.database.base import Database
from simperfi.domain.entities import TargetAllocation
from simperfi.domain.errors import ValidationError
from simperfi.domain.trade import normalize_symbol

MAX_TOTAL_PERCENTAGE = 100.0


class AllocationService:
    """Service for managing target allocations."""

    def __init__(self, db: Database):
        """Initialize allocation service.

        Args:
            db: Database instance
        """
        self.db = db

    def set_target(self, symbol: str, percentage: float) -> str:
        """Set the target percentage for a symbol.

        Args:
            symbol: Asset symbol
            percentage: Target share of the portfolio, 0 to 100

        Returns:
            The normalized symbol

        Raises:
            ValidationError: If the percentage is out of range or the total of
                all targets would exceed 100
        """
        symbol = normalize_symbol(symbol)
        percentage = float(percentage)
        if not math.isfinite(percentage) or not 0 <= percentage <= 100:
            raise ValidationError(f"Percentage must be between 0 and 100, got {percentage}")

        others = sum(t.percentage for t in self.db.list_target_allocations() if t.asset != symbol)
        if others + percentage > MAX_TOTAL_PERCENTAGE + 1e-9:
            raise ValidationError(
                f"Total allocation would be {others + percentage:.2f}%, above 100%"
            )

        self.db.set_target_allocation(symbol, percentage)
        return symbol

    def clear_target(self, symbol: str) -> bool:
        """Remove the target for a symbol. Returns True if one existed."""
        return self.db.delete_target_allocation(normalize_symbol(symbol))

    def list_targets(self) -> list[TargetAllocation]:
        """List all targets ordered by symbol."""
        return self.db.list_target_allocations()

    def total_percentage(self) -> float:
        """Sum of all target percentages."""
        return sum(t.percentage for t in self.db.list_target_allocations())
