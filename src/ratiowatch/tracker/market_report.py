"""
周期报告生成器

每个周期按固定顺序生成四段文本:
    Open Interest -> Global -> Top Trader Position -> Top Trader Account

先依次获取全部四个端点，任一失败或为空则放弃本周期 (返回空字符串)，
此时不触碰任何基线；全部成功后才计算变化并格式化。
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

import aiohttp

from ratiowatch.analytics.change_tracker import ChangeResult, ChangeTracker
from ratiowatch.analytics.numeric import (
    format_amount_with_delta,
    format_percent_with_delta,
    parse_decimal,
)
from ratiowatch.connection.binance import (
    BinanceFuturesData,
    InterestRecord,
    LongShortRecord,
    latest,
)
from ratiowatch.core.config import Config
from ratiowatch.core.exceptions import FetchError, NoDataError
from ratiowatch.core.time import format_ts
from ratiowatch.metrics import BuildTimer, record_fetch_error, record_report, update_tracked_value

logger = logging.getLogger(__name__)

SECTION_SEPARATOR = "\n\n"

OPEN_INTEREST_TITLE = "Open Interest"
NOTIONAL_TITLE = "Notional Value of Open Interest"


@dataclass(frozen=True)
class RatioSection:
    """一个多空比分段: 追踪序列前缀 + 标题"""
    key: str
    title: str


RATIO_SECTIONS: Tuple[RatioSection, ...] = (
    RatioSection("global", "Global Long-Short Ratio"),
    RatioSection("top_position", "Top Trader Long-Short Position Ratio"),
    RatioSection("top_account", "Top Trader Long-Short Account Ratio"),
)

TRACKED_SERIES: Tuple[str, ...] = (
    "open_interest.base",
    "open_interest.quote",
) + tuple(
    f"{section.key}.{side}" for section in RATIO_SECTIONS for side in ("long", "short")
)


@dataclass(frozen=True)
class CycleData:
    """一个周期内四个端点各自的最新记录"""
    open_interest: InterestRecord
    ratios: Dict[str, LongShortRecord]


class ReportBuilder:
    """
    报告生成器

    ChangeTracker 由调用方在进程启动时创建并传入，
    同一进程内所有周期共享同一个实例。
    """

    def __init__(self, config: Config, tracker: ChangeTracker, session: aiohttp.ClientSession):
        self.config = config
        self.tracker = tracker
        self.source = BinanceFuturesData(config.binance, session)

    def _ratio_fetchers(self) -> Dict[str, Callable[[], Awaitable[List[LongShortRecord]]]]:
        return {
            "global": self.source.global_ratio,
            "top_position": self.source.top_position_ratio,
            "top_account": self.source.top_account_ratio,
        }

    async def build(self) -> str:
        """生成一次报告；获取失败时返回空字符串"""
        with BuildTimer():
            data = await self.collect()

        if data is None:
            record_report("empty")
            return ""

        sections = [self.format_open_interest(data.open_interest)]
        for section in RATIO_SECTIONS:
            sections.append(self.format_ratio(section, data.ratios[section.key]))

        record_report("ok")
        report = SECTION_SEPARATOR.join(sections)
        logger.debug(f"report : {report}")
        return report

    async def collect(self) -> Optional[CycleData]:
        """按固定顺序获取四个端点的最新记录，任一失败返回 None"""
        open_interest = await self._latest("open_interest", self.source.open_interest)
        if open_interest is None:
            return None

        ratios: Dict[str, LongShortRecord] = {}
        fetchers = self._ratio_fetchers()
        for section in RATIO_SECTIONS:
            record = await self._latest(section.key, fetchers[section.key])
            if record is None:
                return None
            ratios[section.key] = record

        return CycleData(open_interest=open_interest, ratios=ratios)

    async def _latest(self, endpoint: str, fetch: Callable[[], Awaitable[Sequence]]):
        try:
            records = await fetch()
            record = latest(records)
            if record is None:
                raise NoDataError(f"{endpoint} returned no records")
        except FetchError as e:
            logger.error(f"Fetch {endpoint} failed, report abandoned: {e}")
            record_fetch_error(endpoint, e.code or type(e).__name__)
            return None

        logger.debug(f"{endpoint}: latest {record.symbol} record at {format_ts(record.timestamp)}")
        return record

    def _observe(self, series_id: str, value: float) -> ChangeResult:
        change = self.tracker.observe(series_id, value)
        update_tracked_value(series_id, value)
        return change

    def format_open_interest(self, record: InterestRecord) -> str:
        """Open Interest + Notional Value 两个小节"""
        binance = self.config.binance
        report = self.config.report

        base = parse_decimal(record.sum_open_interest)
        quote = parse_decimal(record.sum_open_interest_value)

        base_change = self._observe("open_interest.base", base)
        quote_change = self._observe("open_interest.quote", quote)

        base_text = format_amount_with_delta(
            base_change.current, base_change.diff, binance.base_asset, report.base_delta_precision
        )
        quote_text = format_amount_with_delta(
            quote_change.current, quote_change.diff, binance.quote_asset or "USDT", report.quote_delta_precision
        )

        return f"{OPEN_INTEREST_TITLE}\n{base_text}{SECTION_SEPARATOR}{NOTIONAL_TITLE}\n{quote_text}"

    def format_ratio(self, section: RatioSection, record: LongShortRecord) -> str:
        """多空账户占比 (x100 转为百分比)"""
        precision = self.config.report.ratio_delta_precision

        long_pct = parse_decimal(record.long_account) * 100
        short_pct = parse_decimal(record.short_account) * 100

        long_change = self._observe(f"{section.key}.long", long_pct)
        short_change = self._observe(f"{section.key}.short", short_pct)

        return "\n".join([
            section.title,
            f"Long: {format_percent_with_delta(long_change.current, long_change.diff, precision)}",
            f"Short: {format_percent_with_delta(short_change.current, short_change.diff, precision)}",
        ])
