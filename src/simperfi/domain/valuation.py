"""Mark holdings to market and compare them with target allocations."""

from typing import Iterable, Optional

from simperfi.domain.entities import Holding, HoldingValuation, TargetAllocation
from simperfi.domain.pricing import PriceResolver


def percent_change(value: float, base: float) -> float:
    """Return the change from ``base`` to ``value`` in percent, 0 if no base."""
    if base <= 0:
        return 0.0
    return (value - base) / base * 100


def value_holdings(
    holdings: Iterable[Holding],
    resolver: PriceResolver,
    targets: Optional[Iterable[TargetAllocation]] = None,
) -> list[HoldingValuation]:
    """Value holdings at today's resolved prices.

    Args:
        holdings: Holdings to value
        resolver: Price resolver for today
        targets: Optional target allocations used for drift

    Returns:
        One valuation per holding, in the order given
    """
    holdings = list(holdings)
    target_map = {target.asset: target.percentage for target in targets or ()}
    priced = [(holding, resolver.resolve(holding.asset)) for holding in holdings]
    total_value = sum(holding.amount * price for holding, price in priced)

    valuations = []
    for holding, price in priced:
        value = holding.amount * price
        pnl = value - holding.total_cost_basis
        allocation = value / total_value * 100 if total_value > 0 else 0.0
        target = target_map.get(holding.asset, 0.0)
        valuations.append(
            HoldingValuation(
                holding=holding,
                price=price,
                value=value,
                unrealized_pnl=pnl,
                unrealized_pnl_percent=(
                    pnl / holding.total_cost_basis * 100 if holding.total_cost_basis > 0 else 0.0
                ),
                allocation_percent=allocation,
                target_percent=target,
                drift_percent=allocation - target,
                last_buy_change_percent=percent_change(price, holding.last_buy_price),
                is_manual_price=resolver.is_manual(holding.asset),
            )
        )
    return valuations
