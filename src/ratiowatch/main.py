"""
RatioWatch 主入口

每 5 分钟生成一次 BTCUSDT 持仓量 / 多空比报告并推送到 Telegram。
"""

import asyncio
import logging
from typing import Optional

import aiohttp

from .analytics.change_tracker import ChangeTracker
from .bot.telegram_bot import TelegramNotifier
from .core.config import Config, load_config
from .tracker.market_report import TRACKED_SERIES, ReportBuilder
from .tracker.scheduler import ReportScheduler

logger = logging.getLogger(__name__)


async def run(config: Config) -> None:
    """
    启动常驻服务

    ChangeTracker 在这里创建一次，整个进程生命周期内复用。
    """
    tracker = ChangeTracker(TRACKED_SERIES)

    async with aiohttp.ClientSession() as session:
        builder = ReportBuilder(config, tracker, session)
        notifier = TelegramNotifier(config.telegram, session) if config.telegram.enabled else None
        scheduler = ReportScheduler(config, builder, notifier)

        try:
            await scheduler.run_forever()
        finally:
            scheduler.stop()


async def run_once(config: Config, send: bool = False, tracker: Optional[ChangeTracker] = None) -> str:
    """生成一次报告 (可选推送)"""
    if tracker is None:
        tracker = ChangeTracker(TRACKED_SERIES)

    async with aiohttp.ClientSession() as session:
        builder = ReportBuilder(config, tracker, session)
        report = await builder.build()

        if send and report:
            notifier = TelegramNotifier(config.telegram, session)
            await notifier.send_message(report)

    return report


async def main() -> None:
    config = load_config()
    await run(config)


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    asyncio.run(main())
