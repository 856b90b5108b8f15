"""
报告调度

对齐整点 5 分钟 (00, 05, ..., 55) 唤醒，生成报告并推送。
"""

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional

from ratiowatch.bot.telegram_bot import TelegramNotifier
from ratiowatch.core.config import Config
from ratiowatch.core.time import next_run_time, seconds_until_next_run
from ratiowatch.metrics import start_metrics_server
from ratiowatch.tracker.market_report import ReportBuilder

logger = logging.getLogger(__name__)


class ReportScheduler:
    """
    周期调度器

    一个周期结束后才会等待下一个边界，因此周期之间不会重叠。
    """

    def __init__(
        self,
        config: Config,
        builder: ReportBuilder,
        notifier: Optional[TelegramNotifier] = None,
        clock: Callable[[], datetime] = datetime.now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config
        self.builder = builder
        self.notifier = notifier
        self._clock = clock
        self._sleep = sleep
        self._running = False

    @property
    def use_telegram(self) -> bool:
        return self.notifier is not None and self.config.telegram.enabled

    async def wait_until_next_run(self) -> datetime:
        """睡眠到下一个对齐边界，返回该边界时间"""
        interval = self.config.report.interval_minutes
        while True:
            now = self._clock()
            next_run = next_run_time(now, interval)
            wait_seconds = seconds_until_next_run(now, interval)
            if wait_seconds <= 0:
                await self._sleep(0.1)
                continue

            logger.info(
                f"Waiting {wait_seconds:.0f} seconds until next run at "
                f"{next_run.strftime('%Y-%m-%d %H:%M:%S')}"
            )
            await self._sleep(wait_seconds)
            return next_run

    async def run_cycle(self) -> str:
        """生成一次报告；非空且启用 Telegram 时推送"""
        message = await self.builder.build()
        logger.info(f"Generated message: {message}")

        if not message:
            logger.warning("Empty report, nothing to send this cycle")
            return message

        if self.use_telegram:
            if not await self.notifier.send_message(message):
                logger.warning("Report delivery failed, continuing with next cycle")

        return message

    async def start_metrics(self):
        """启用时启动 /metrics 服务；端口占用只告警，不影响报告"""
        metrics = self.config.metrics
        if not metrics.enabled or metrics.port <= 0:
            return None

        try:
            return await start_metrics_server(metrics.host, metrics.port)
        except OSError as e:
            logger.warning(f"Failed to start metrics server on {metrics.host}:{metrics.port}: {e}")
            return None

    async def run_forever(self) -> None:
        """持续运行 (wait -> cycle)"""
        self._running = True
        logger.info("Main loop started")
        logger.info(f"USE_TELEGRAM: {self.use_telegram}")

        metrics_runner = await self.start_metrics()
        try:
            while self._running:
                try:
                    await self.wait_until_next_run()
                    await self.run_cycle()
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    logger.error(f"Error in main loop: {e}", exc_info=True)
        finally:
            if metrics_runner:
                await metrics_runner.cleanup()

    def stop(self) -> None:
        self._running = False
