"""
RatioWatch 配置管理

支持 YAML 配置文件和环境变量覆盖。
"""

import os
from dataclasses import dataclass, field, fields as dataclass_fields
from pathlib import Path
from typing import Dict, Optional

import yaml

from .exceptions import ConfigError


@dataclass
class BinanceConfig:
    """Binance 合约数据端点配置"""
    base_url: str = "https://fapi.binance.com"
    symbol: str = "BTCUSDT"
    period: str = "5m"
    limit: int = 30

    # 请求超时 (秒), 0 表示使用 aiohttp 默认值
    request_timeout: float = 0.0

    open_interest_path: str = "/futures/data/openInterestHist"
    global_ratio_path: str = "/futures/data/globalLongShortAccountRatio"
    top_position_path: str = "/futures/data/topLongShortPositionRatio"
    top_account_path: str = "/futures/data/topLongShortAccountRatio"

    @property
    def quote_asset(self) -> str:
        for quote in ("USDT", "USDC", "BUSD"):
            if self.symbol.endswith(quote) and len(self.symbol) > len(quote):
                return quote
        return ""

    @property
    def base_asset(self) -> str:
        quote = self.quote_asset
        return self.symbol[: -len(quote)] if quote else self.symbol


@dataclass
class ReportConfig:
    """报告生成配置"""
    # 轮询周期 (分钟), 必须整除 60
    interval_minutes: int = 5

    # 持仓量变化的小数位
    base_delta_precision: int = 2
    quote_delta_precision: int = 0

    # 多空比百分比变化的小数位
    ratio_delta_precision: int = 2


@dataclass
class TelegramConfig:
    """Telegram 配置"""
    bot_token: str = ""
    chat_id: str = ""
    enabled: bool = True
    parse_mode: Optional[str] = None
    disable_web_page_preview: bool = True

    def __post_init__(self):
        self.bot_token = str(self.bot_token or "")
        self.chat_id = str(self.chat_id or "")

    @property
    def configured(self) -> bool:
        return bool(self.bot_token and self.chat_id)


@dataclass
class MetricsConfig:
    """Prometheus 指标服务配置"""
    enabled: bool = False
    host: str = "0.0.0.0"
    port: int = 8000


@dataclass
class Config:
    """RatioWatch 主配置"""
    binance: BinanceConfig = field(default_factory=BinanceConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    telegram: TelegramConfig = field(default_factory=TelegramConfig)
    metrics: MetricsConfig = field(default_factory=MetricsConfig)

    # 日志配置
    log_level: str = "INFO"
    log_file: str = "log.txt"

    def __post_init__(self):
        interval = self.report.interval_minutes
        if not isinstance(interval, int) or interval <= 0 or 60 % interval != 0:
            raise ConfigError(
                f"interval_minutes must divide 60, got {interval!r}",
                field="report.interval_minutes",
            )

        for name in ("base_delta_precision", "quote_delta_precision", "ratio_delta_precision"):
            precision = getattr(self.report, name)
            if isinstance(precision, bool) or not isinstance(precision, int) or precision < 0:
                raise ConfigError(
                    f"{name} must be a non-negative integer, got {precision!r}",
                    field=f"report.{name}",
                )

    @classmethod
    def from_yaml(cls, path: str) -> "Config":
        """从 YAML 文件加载配置"""
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        return cls._from_dict(data if isinstance(data, dict) else {})

    @classmethod
    def _from_dict(cls, data: Dict) -> "Config":
        """从字典创建配置"""

        def _filter_kwargs(dc_cls, raw) -> dict:
            if not isinstance(raw, dict):
                return {}
            allowed = {f.name for f in dataclass_fields(dc_cls) if f.init}
            return {k: v for k, v in raw.items() if k in allowed}

        return cls(
            binance=BinanceConfig(**_filter_kwargs(BinanceConfig, data.get("binance"))),
            report=ReportConfig(**_filter_kwargs(ReportConfig, data.get("report"))),
            telegram=TelegramConfig(**_filter_kwargs(TelegramConfig, data.get("telegram"))),
            metrics=MetricsConfig(**_filter_kwargs(MetricsConfig, data.get("metrics"))),
            log_level=str(data.get("log_level", "INFO")),
            log_file=str(data.get("log_file", "log.txt") or ""),
        )

    def apply_env(self) -> "Config":
        """环境变量覆盖 (原地修改并返回自身)"""
        if token := os.getenv("TELEGRAM_BOT_TOKEN", os.getenv("API_TOKEN")):
            self.telegram.bot_token = token.strip()

        if chat_id := os.getenv("TELEGRAM_CHAT_ID", os.getenv("CHAT_ID")):
            self.telegram.chat_id = chat_id.strip()

        if use_telegram := os.getenv("RATIOWATCH_USE_TELEGRAM"):
            self.telegram.enabled = use_telegram.strip().lower() not in {"0", "false", "no", "off"}

        if symbol := os.getenv("RATIOWATCH_SYMBOL"):
            self.binance.symbol = symbol.strip().upper()

        if log_level := os.getenv("LOG_LEVEL"):
            self.log_level = log_level

        if port := os.getenv("RATIOWATCH_METRICS_PORT"):
            try:
                self.metrics.port = int(port)
            except ValueError:
                raise ConfigError(f"Invalid RATIOWATCH_METRICS_PORT={port!r}", field="metrics.port")
            self.metrics.enabled = self.metrics.port > 0

        return self


def load_config(config_path: Optional[str] = None) -> Config:
    """
    加载配置

    优先级: 环境变量 > 配置文件 > 默认值
    """
    resolved_path = resolve_config_path(config_path)
    if resolved_path is not None:
        config = Config.from_yaml(str(resolved_path))
    else:
        config = Config()

    return config.apply_env()


def resolve_config_path(config_path: Optional[str] = None) -> Optional[Path]:
    """
    Resolve config file path.

    Priority:
      1) env RATIOWATCH_CONFIG
      2) given config_path (absolute/relative)
      3) cwd config/default.yaml
    """
    candidates: list[Path] = []

    env_path = os.getenv("RATIOWATCH_CONFIG")
    if env_path:
        candidates.append(Path(env_path))

    if config_path:
        candidates.append(Path(config_path))

    candidates.append(Path("config/default.yaml"))

    for p in candidates:
        if p.is_file():
            return p

    return None
