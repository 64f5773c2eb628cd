"""Utility functions and helpers."""

from .file_utils import FileHelper
from .logging import TimedOperation, get_logger, setup_logging

__all__ = ["setup_logging", "get_logger", "TimedOperation", "FileHelper"]
