"""Utilities for binreload."""

from ._logging import DEBUG_ENV, LogFormatType, create_logger, open_log_stream

__all__ = ["DEBUG_ENV", "LogFormatType", "create_logger", "open_log_stream"]
