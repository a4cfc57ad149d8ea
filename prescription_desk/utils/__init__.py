"""
Utilities package for the prescription desk.

Exports shared helpers for logging and periodic refresh.
Keep this package lightweight and free of domain-specific logic.
"""

from prescription_desk.utils.logging import configure_logging, get_logger
from prescription_desk.utils.ticker import Ticker

__all__ = [
    "configure_logging",
    "get_logger",
    "Ticker",
]
