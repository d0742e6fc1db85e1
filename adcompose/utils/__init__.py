"""Utility functions for Ad Compose."""

from adcompose.utils.error_handler import format_error_message, get_suggestion
from adcompose.utils.parallel_executor import ParallelExecutor

__all__ = [
    "format_error_message",
    "get_suggestion",
    "ParallelExecutor",
]
