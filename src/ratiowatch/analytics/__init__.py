"""Analytics module: numeric helpers and change tracking."""

from .change_tracker import (
    ChangeTracker,
    ChangeState,
    ChangeResult,
    NoBaseline,
    Delta,
)
from .numeric import (
    parse_decimal,
    format_grouped_integer,
    format_signed_delta,
    format_percent_with_delta,
    format_amount_with_delta,
)

__all__ = [
    "ChangeTracker",
    "ChangeState",
    "ChangeResult",
    "NoBaseline",
    "Delta",
    "parse_decimal",
    "format_grouped_integer",
    "format_signed_delta",
    "format_percent_with_delta",
    "format_amount_with_delta",
]
