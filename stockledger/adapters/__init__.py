"""
Stockledger Adapters.

Implementations of protocols for storage backends.
"""

from stockledger.adapters.loader import get_repository, reset_repository

__all__ = [
    "get_repository",
    "reset_repository",
]
