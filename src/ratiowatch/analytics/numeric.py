"""
数值解析与格式化

上游字段均为十进制字符串 (例如 "88637.56900000")。
解析失败时一律回退为 0.0，不抛异常，保证格式化阶段总能拿到 float。
"""

import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

NO_DELTA = "( - )"


def parse_decimal(text) -> float:
    """Parse a decimal string, returning 0.0 on any failure."""
    try:
        value = float(text)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return value


def format_grouped_integer(value: float) -> str:
    """
    四舍五入到整数并加千位分隔符

    8688981341.4458 -> "8,688,981,341"
    """
    if value is None or not math.isfinite(value):
        return "0"
    try:
        rounded = Decimal(repr(float(value))).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return "0"
    return f"{int(rounded):,}"


def format_signed_delta(value: float, precision: int = 2) -> str:
    """Explicit sign and fixed precision; anything that rounds to zero is "+0"."""
    rounded = round(value, precision)
    if rounded == 0:
        rounded = 0.0
    return f"{rounded:+.{precision}f}"


def format_percent_with_delta(current: float, delta: Optional[float], precision: int = 2) -> str:
    """
    百分比 + 变化

    53.21, 1.11 -> "53.21% (+1.11)"
    53.21, None -> "53.21% ( - )"
    """
    if delta is None:
        return f"{current:.2f}% {NO_DELTA}"
    return f"{current:.2f}% ({format_signed_delta(delta, precision)})"


def format_amount_with_delta(
    current: float,
    delta: Optional[float],
    unit: str = "",
    precision: int = 2,
) -> str:
    """Grouped amount plus signed delta, e.g. 88,638 BTC (+12.35)."""
    amount = format_grouped_integer(current)
    if unit:
        amount = f"{amount} {unit}"
    if delta is None:
        return f"{amount} {NO_DELTA}"
    return f"{amount} ({format_signed_delta(delta, precision)})"
