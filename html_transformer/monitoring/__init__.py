"""
Monitoring - Logging setup and structured run logging.

Usage:
    from html_transformer.monitoring import configure_logging
    configure_logging("DEBUG")
"""

from .logger import PACKAGE_LOGGER, TransformLogger, configure_logging

__all__ = ["PACKAGE_LOGGER", "TransformLogger", "configure_logging"]
