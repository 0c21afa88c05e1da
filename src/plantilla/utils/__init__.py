"""Utility modules for Plantilla.

Provides:
- hashing: hash_str, node_id for path-derived node ids
- logger: get_logger for logging
"""

from plantilla.utils.hashing import hash_str, node_id
from plantilla.utils.logger import get_logger

__all__ = [
    "get_logger",
    "hash_str",
    "node_id",
]
