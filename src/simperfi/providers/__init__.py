"""External price providers for simperfi."""

from simperfi.providers.binance import BinanceClient

__all__ = ["BinanceClient"]
