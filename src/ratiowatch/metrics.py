"""
Prometheus 指标模块

提供报告周期监控指标:
- 报告生成结果 / 耗时
- 端点获取失败计数
- 各追踪序列的最新值
- Telegram 推送结果
"""

import logging
import time

from aiohttp import web
from prometheus_client import Counter, Gauge, Histogram, generate_latest, CONTENT_TYPE_LATEST

logger = logging.getLogger(__name__)


# ============ 报告指标 ============
REPORTS_BUILT = Counter(
    'ratiowatch_reports_total',
    'Report build cycles by result (ok/empty)',
    ['result']
)

REPORT_BUILD_DURATION = Histogram(
    'ratiowatch_report_build_seconds',
    'Time spent building one report (fetch + format)',
    buckets=(0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30)
)

FETCH_ERRORS = Counter(
    'ratiowatch_fetch_errors_total',
    'Upstream fetch failures by endpoint and error kind',
    ['endpoint', 'kind']
)

TRACKED_VALUE = Gauge(
    'ratiowatch_tracked_value',
    'Latest observed value per tracked series',
    ['series']
)

# ============ Telegram 指标 ============
TELEGRAM_MESSAGES_SENT = Counter(
    'ratiowatch_telegram_messages_sent_total',
    'Total Telegram messages sent',
    ['result']
)


def record_fetch_error(endpoint: str, kind: str) -> None:
    """记录端点失败"""
    FETCH_ERRORS.labels(endpoint=endpoint, kind=kind).inc()


def record_report(result: str) -> None:
    REPORTS_BUILT.labels(result=result).inc()


def update_tracked_value(series: str, value: float) -> None:
    TRACKED_VALUE.labels(series=series).set(value)


class BuildTimer:
    """报告生成计时器"""

    def __init__(self):
        self.start_time = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args):
        REPORT_BUILD_DURATION.observe(time.perf_counter() - self.start_time)


# ============ HTTP 端点 ============

async def metrics_handler(request: web.Request) -> web.Response:
    """Prometheus metrics endpoint"""
    return web.Response(
        body=generate_latest(),
        headers={"Content-Type": CONTENT_TYPE_LATEST},
    )


async def health_handler(request: web.Request) -> web.Response:
    """Health check endpoint"""
    return web.Response(text="OK", status=200)


def create_metrics_app() -> web.Application:
    """创建 metrics HTTP 应用"""
    app = web.Application()
    app.router.add_get('/metrics', metrics_handler)
    app.router.add_get('/health', health_handler)
    app.router.add_get('/healthz', health_handler)
    return app


async def start_metrics_server(host: str = "0.0.0.0", port: int = 8000) -> web.AppRunner:
    """启动 metrics 服务器"""
    app = create_metrics_app()
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    logger.info(f"Metrics server running at http://{host}:{port}/metrics")
    return runner
