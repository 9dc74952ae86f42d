"""
Cross-cutting helpers: logging setup and resource probes for measured phases.
"""

from billion_challenge.utils.logging import configure_logging, get_logger
from billion_challenge.utils.profiler import ProfileStats, profile_block

__all__ = ["ProfileStats", "configure_logging", "get_logger", "profile_block"]
