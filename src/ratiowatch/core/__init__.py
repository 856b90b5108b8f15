"""Core configuration and exceptions."""

from .config import (
    Config,
    BinanceConfig,
    ReportConfig,
    TelegramConfig,
    MetricsConfig,
    load_config,
)
from .exceptions import (
    RatioWatchError,
    FetchError,
    NetworkError,
    DecodeError,
    ParseError,
    NoDataError,
    ConfigError,
)

__all__ = [
    "Config",
    "BinanceConfig",
    "ReportConfig",
    "TelegramConfig",
    "MetricsConfig",
    "load_config",
    "RatioWatchError",
    "FetchError",
    "NetworkError",
    "DecodeError",
    "ParseError",
    "NoDataError",
    "ConfigError",
]
