"""
Common utilities shared across tools
"""

from .base_output_formatter import BaseOutputFormatter, OutputFormat, TableFormatter
from .logging_config import configure_logging, get_logger, get_logging_manager

__all__ = [
    "configure_logging",
    "get_logger",
    "get_logging_manager",
    "BaseOutputFormatter",
    "OutputFormat",
    "TableFormatter",
]
