"""
Telegram 推送

把生成好的报告文本原样发送到一个 chat。
发送失败只记录日志并返回 False，不重试。
"""

import asyncio
import logging
from typing import Optional

import aiohttp

from ratiowatch.core.config import TelegramConfig
from ratiowatch.metrics import TELEGRAM_MESSAGES_SENT

logger = logging.getLogger(__name__)


class TelegramNotifier:
    """
    Telegram 报告推送器

    session 可由外部注入 (与数据获取共用)；未注入时 start() 自建并在 stop() 关闭。
    """

    API_BASE = "https://api.telegram.org/bot"

    def __init__(self, config: TelegramConfig, session: Optional[aiohttp.ClientSession] = None):
        self.config = config
        self._session = session
        self._owns_session = False

    @property
    def api_url(self) -> str:
        return f"{self.API_BASE}{self.config.bot_token}"

    async def start(self) -> None:
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._owns_session = True

    async def stop(self) -> None:
        if self._owns_session and self._session:
            await self._session.close()
        self._session = None
        self._owns_session = False

    async def send_message(self, text: str) -> bool:
        """发送消息

        Args:
            text: 消息内容 (URL 编码由 aiohttp 的 JSON body 处理)

        Returns:
            发送是否成功
        """
        if not self.config.configured:
            logger.error("Telegram bot token or chat_id not configured")
            TELEGRAM_MESSAGES_SENT.labels(result="unconfigured").inc()
            return False

        if self._session is None:
            await self.start()

        url = f"{self.api_url}/sendMessage"
        data = {
            "chat_id": self.config.chat_id,
            "text": text,
            "disable_web_page_preview": self.config.disable_web_page_preview,
        }
        if self.config.parse_mode:
            data["parse_mode"] = self.config.parse_mode

        try:
            async with self._session.post(url, json=data) as resp:
                if resp.status == 200:
                    logger.info(f"Sent message: {text}")
                    TELEGRAM_MESSAGES_SENT.labels(result="ok").inc()
                    return True
                error = await resp.text()
                logger.error(f"Telegram send error: {error}")
                TELEGRAM_MESSAGES_SENT.labels(result="error").inc()
                return False

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Error sending message: {e}")
            TELEGRAM_MESSAGES_SENT.labels(result="exception").inc()
            return False
