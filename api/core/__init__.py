"""Core utilities for the Quotations API.

This module exports commonly used utilities for easy importing:
    from core import get_logger
"""

from core.logger import bind_request_context, clear_request_context, get_logger

__all__ = [
    "bind_request_context",
    "clear_request_context",
    "get_logger",
]
