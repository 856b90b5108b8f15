"""
RatioWatch CLI 入口

用法:
    ratiowatch run          # 每 5 分钟生成报告并推送 (常驻)
    ratiowatch once         # 立即生成一次报告并打印
    ratiowatch once --send  # 生成一次并推送到 Telegram
    ratiowatch next-run     # 显示下一次对齐的运行时间
"""

import argparse
import asyncio
import logging
from datetime import datetime
from typing import Optional

from ratiowatch.core.config import Config, load_config
from ratiowatch.core.exceptions import ConfigError
from ratiowatch.core.time import next_run_time, seconds_until_next_run

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(debug: bool = False, log_file: Optional[str] = None, level: str = "INFO"):
    """控制台输出；配置了 log_file 时同时写文件"""
    if debug:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, str(level).upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


async def cmd_run(config: Config, args):
    """常驻运行"""
    from ratiowatch.main import run

    if args.no_telegram:
        config.telegram.enabled = False

    await run(config)


async def cmd_once(config: Config, args):
    """生成一次报告"""
    from ratiowatch.main import run_once

    report = await run_once(config, send=args.send)
    if report:
        print(report)
    else:
        print("(empty report: at least one endpoint failed or returned no data)")


def cmd_next_run(config: Config, args):
    now = datetime.now()
    next_run = next_run_time(now, config.report.interval_minutes)
    print(f"Next run at {next_run.strftime('%Y-%m-%d %H:%M:%S')} "
          f"(in {seconds_until_next_run(now, config.report.interval_minutes):.0f}s)")


def main():
    parser = argparse.ArgumentParser(
        prog="ratiowatch",
        description="Binance open interest / long-short ratio reporter"
    )
    parser.add_argument("--debug", action="store_true", help="Debug mode (console only)")
    parser.add_argument("-c", "--config", default=None, help="Config file (default config/default.yaml)")
    parser.add_argument("-s", "--symbol", default=None, help="Symbol override (e.g. BTCUSDT)")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    run_parser = subparsers.add_parser("run", help="Report every interval and send to Telegram")
    run_parser.add_argument("--no-telegram", action="store_true", help="Log reports only")

    once_parser = subparsers.add_parser("once", help="Build a single report now")
    once_parser.add_argument("--send", action="store_true", help="Also send it to Telegram")

    subparsers.add_parser("next-run", help="Show the next aligned run time")

    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except ConfigError as e:
        parser.error(e.message)

    if args.symbol:
        config.binance.symbol = args.symbol.strip().upper()

    # 调试模式和 next-run 查询只输出到控制台
    log_file = None if args.debug or args.command == "next-run" else config.log_file
    setup_logging(args.debug, log_file, config.log_level)

    if args.command == "run":
        try:
            asyncio.run(cmd_run(config, args))
        except KeyboardInterrupt:
            pass
    elif args.command == "once":
        asyncio.run(cmd_once(config, args))
    elif args.command == "next-run":
        cmd_next_run(config, args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
