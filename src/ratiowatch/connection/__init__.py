"""Connection layer module."""

from .binance import (
    BinanceFuturesData,
    InterestRecord,
    LongShortRecord,
    fetch_series,
    latest,
)

__all__ = [
    "BinanceFuturesData",
    "InterestRecord",
    "LongShortRecord",
    "fetch_series",
    "latest",
]
