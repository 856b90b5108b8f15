"""
RatioWatch

Binance 合约持仓量 / 多空比周期报告，按 5 分钟边界生成并推送到 Telegram。
"""

__version__ = "1.0.0"

# Lazy imports to avoid circular dependencies
def __getattr__(name):
    if name == "analytics":
        from . import analytics
        return analytics
    elif name == "connection":
        from . import connection
        return connection
    elif name == "tracker":
        from . import tracker
        return tracker
    elif name == "bot":
        from . import bot
        return bot
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = [
    "__version__",
    "analytics",
    "connection",
    "tracker",
    "bot",
]
