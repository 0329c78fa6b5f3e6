"""
Stockledger Protocols.

Defines interfaces between the stock core and its collaborators.
"""

from stockledger.protocols.repository import CellKey, StockRepository

__all__ = [
    "CellKey",
    "StockRepository",
]
