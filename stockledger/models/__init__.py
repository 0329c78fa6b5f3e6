"""
Stockledger Models.

Core models for multi-location stock:
- Location: Where stock exists
- Product: Thresholds and tracking flags
- Batch: Lot traceability
- StockCell: Quantity at (product, location, batch)
- StockLog: Immutable ledger of changes
- Transfer / TransferItem: Stock moving between locations
- Sale / SaleItem: Stock leaving through the till
- Alert: Low stock, expiry and reorder notifications
"""

from stockledger.models.alert import Alert
from stockledger.models.batch import Batch
from stockledger.models.cell import StockCell
from stockledger.models.enums import (
    AlertSeverity,
    AlertType,
    CellStatus,
    LogType,
    TransferStatus,
)
from stockledger.models.location import Location
from stockledger.models.log import StockLog
from stockledger.models.product import Product
from stockledger.models.sale import Sale, SaleItem
from stockledger.models.transfer import Transfer, TransferItem

__all__ = [
    'AlertSeverity',
    'AlertType',
    'CellStatus',
    'LogType',
    'TransferStatus',
    'Location',
    'Product',
    'Batch',
    'StockCell',
    'StockLog',
    'Transfer',
    'TransferItem',
    'Sale',
    'SaleItem',
    'Alert',
]
