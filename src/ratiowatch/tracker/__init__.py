"""Tracker module: per-cycle report building and scheduling."""

from .market_report import (
    ReportBuilder,
    RatioSection,
    CycleData,
    RATIO_SECTIONS,
    TRACKED_SERIES,
)
from .scheduler import ReportScheduler

__all__ = [
    "ReportBuilder",
    "RatioSection",
    "CycleData",
    "RATIO_SECTIONS",
    "TRACKED_SERIES",
    "ReportScheduler",
]
