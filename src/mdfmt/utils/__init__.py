"""Utility modules for mdfmt.

Provides:
- hashing: hash_str for cache keys
- logger: get_logger and configure_logging
"""

from mdfmt.utils.hashing import hash_str
from mdfmt.utils.logger import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
    "hash_str",
]
