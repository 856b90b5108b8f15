"""
Binance 合约统计数据 REST 适配器

Endpoints (均返回 JSON 数组，按 timestamp 升序):
- GET /futures/data/openInterestHist
    [{"symbol": "BTCUSDT", "sumOpenInterest": "88637.569",
      "sumOpenInterestValue": "8688981341.4458", "timestamp": 1732442700000}]
- GET /futures/data/globalLongShortAccountRatio
- GET /futures/data/topLongShortPositionRatio
- GET /futures/data/topLongShortAccountRatio
    [{"symbol": "BTCUSDT", "longShortRatio": "1.1370",
      "longAccount": "0.5321", "shortAccount": "0.4679", "timestamp": 1732442700000}]

注意:
- 单次 GET，不重试；失败直接抛出 FetchError 子类交给调用方
- 超时未配置时沿用 aiohttp 默认值
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

import aiohttp

from ratiowatch.core.config import BinanceConfig
from ratiowatch.core.exceptions import DecodeError, NetworkError, ParseError

logger = logging.getLogger(__name__)


def _str_field(raw: Dict[str, Any], key: str) -> str:
    if key not in raw:
        raise ParseError(f"missing field '{key}'", field=key)
    value = raw[key]
    if not isinstance(value, str):
        raise ParseError(f"field '{key}' must be a string, got {type(value).__name__}", field=key)
    return value


def _timestamp_field(raw: Dict[str, Any], key: str = "timestamp") -> int:
    if key not in raw:
        raise ParseError(f"missing field '{key}'", field=key)
    value = raw[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ParseError(f"field '{key}' must be an integer, got {type(value).__name__}", field=key)
    return value


def _require_object(raw: Any) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        raise ParseError(f"expected JSON object, got {type(raw).__name__}")
    return raw


@dataclass(frozen=True)
class InterestRecord:
    """持仓量记录 (openInterestHist)"""
    symbol: str
    sum_open_interest: str        # 基础资产数量 (BTC)
    sum_open_interest_value: str  # 名义价值 (USDT)
    timestamp: int

    @classmethod
    def from_dict(cls, raw: Any) -> "InterestRecord":
        raw = _require_object(raw)
        return cls(
            symbol=_str_field(raw, "symbol"),
            sum_open_interest=_str_field(raw, "sumOpenInterest"),
            sum_open_interest_value=_str_field(raw, "sumOpenInterestValue"),
            timestamp=_timestamp_field(raw),
        )


@dataclass(frozen=True)
class LongShortRecord:
    """多空比记录 (longAccount / shortAccount 为 [0,1] 小数字符串)"""
    symbol: str
    long_short_ratio: str
    long_account: str
    short_account: str
    timestamp: int

    @classmethod
    def from_dict(cls, raw: Any) -> "LongShortRecord":
        raw = _require_object(raw)
        return cls(
            symbol=_str_field(raw, "symbol"),
            long_short_ratio=_str_field(raw, "longShortRatio"),
            long_account=_str_field(raw, "longAccount"),
            short_account=_str_field(raw, "shortAccount"),
            timestamp=_timestamp_field(raw),
        )


R = TypeVar("R", InterestRecord, LongShortRecord)


async def fetch_series(
    session: aiohttp.ClientSession,
    url: str,
    record_type: Type[R],
    params: Optional[Dict[str, Any]] = None,
    timeout: Optional[float] = None,
) -> List[R]:
    """
    GET 一个端点并解码为记录列表

    Raises:
        NetworkError: 连接/传输失败、超时或非 200 响应
        DecodeError: 响应体不是 UTF-8 或 JSON 格式错误
        ParseError: JSON 合法但不是期望结构的数组
    """
    kwargs: Dict[str, Any] = {}
    if params:
        kwargs["params"] = params
    if timeout:
        kwargs["timeout"] = aiohttp.ClientTimeout(total=timeout)

    try:
        async with session.get(url, **kwargs) as resp:
            status = resp.status
            body = await resp.read()
    except asyncio.TimeoutError as e:
        raise NetworkError(f"Timeout fetching {url}: {e}", url=url) from e
    except aiohttp.ClientError as e:
        raise NetworkError(f"Error fetching data: {e}", url=url) from e

    if status != 200:
        raise NetworkError(f"HTTP {status} from {url}", url=url, status=status)

    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"Error reading response text: {e}", url=url) from e

    logger.debug(f"Response text: {text}")

    try:
        data = json.loads(text)
    except ValueError as e:
        raise DecodeError(f"Error parsing JSON: {e}", url=url) from e

    if not isinstance(data, list):
        raise ParseError(f"expected JSON array, got {type(data).__name__}", url=url)

    try:
        return [record_type.from_dict(item) for item in data]
    except ParseError as e:
        e.url = url
        raise


def latest(records: Sequence[R]) -> Optional[R]:
    """
    timestamp 最大的一条记录

    空输入返回 None；多条并列最大时取第一个遇到的。
    """
    best: Optional[R] = None
    for record in records:
        if best is None or record.timestamp > best.timestamp:
            best = record
    return best


class BinanceFuturesData:
    """
    四个统计端点的目录

    每个方法发起一次 GET，不做重试和缓存。
    """

    def __init__(self, config: BinanceConfig, session: aiohttp.ClientSession):
        self.config = config
        self._session = session

    def url(self, path: str) -> str:
        return f"{self.config.base_url.rstrip('/')}{path}"

    @property
    def params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "symbol": self.config.symbol,
            "period": self.config.period,
        }
        if self.config.limit:
            params["limit"] = self.config.limit
        return params

    async def _fetch(self, path: str, record_type: Type[R]) -> List[R]:
        timeout = self.config.request_timeout or None
        return await fetch_series(self._session, self.url(path), record_type, self.params, timeout)

    async def open_interest(self) -> List[InterestRecord]:
        return await self._fetch(self.config.open_interest_path, InterestRecord)

    async def global_ratio(self) -> List[LongShortRecord]:
        return await self._fetch(self.config.global_ratio_path, LongShortRecord)

    async def top_position_ratio(self) -> List[LongShortRecord]:
        return await self._fetch(self.config.top_position_path, LongShortRecord)

    async def top_account_ratio(self) -> List[LongShortRecord]:
        return await self._fetch(self.config.top_account_path, LongShortRecord)
