"""
Utility modules for the MoKee setup wizard.

This module provides logging setup and the per-OS directory helpers used by
the configuration layer.
"""

from .logger import get_logger, setup_logging, LogLevel

__all__ = ["get_logger", "setup_logging", "LogLevel"]
