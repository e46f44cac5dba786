"""USD-pegged stable assets."""

from typing import Optional

STABLECOINS = frozenset(
    {
        "USDT",  # Tether
        "USDC",  # USD Coin
        "BUSD",  # Binance USD
        "DAI",
        "TUSD",  # TrueUSD
        "USDD",
        "USDP",  # Pax Dollar
        "GUSD",  # Gemini Dollar
        "FRAX",
        "LUSD",  # Liquity USD
        "USDN",  # Neutrino USD
        "UST",  # TerraUSD
        "FDUSD",  # First Digital USD
        "PYUSD",  # PayPal USD
    }
)


def is_stablecoin(symbol: str) -> bool:
    """Check if a symbol is a known stablecoin."""
    return symbol.strip().upper() in STABLECOINS



def stablecoin_price(symbol: str) -> Optional[float]:
    """Return 1.0 for stablecoins, None for anything else."""
    return 1.0 if is_stablecoin(symbol) else None
