"""
Django Stockledger — multi-location inventory ledger.

Usage:
    from stockledger import ledger, StockError

    ledger.stock_in({'product_id': 1, 'location_id': 2, 'quantity': 20}, actor_id='u1')
    ledger.allocate(1, 2, 5, reference='sale:7', actor_id='u1')
    ledger.total_stock(1)  # 15
"""

# Built on first access; adapters.reset_repository() drops it
_ledger = None


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    global _ledger
    if name == 'ledger':
        if _ledger is None:
            from stockledger.service import Ledger
            _ledger = Ledger()
        return _ledger
    elif name == 'Ledger':
        from stockledger.service import Ledger
        return Ledger
    elif name == 'StockError':
        from stockledger.exceptions import StockError
        return StockError
    elif name == 'CellKey':
        from stockledger.protocols.repository import CellKey
        return CellKey
    elif name == 'StockCell':
        from stockledger.models.cell import StockCell
        return StockCell
    elif name == 'StockLog':
        from stockledger.models.log import StockLog
        return StockLog
    elif name == 'Transfer':
        from stockledger.models.transfer import Transfer
        return Transfer
    elif name == 'Alert':
        from stockledger.models.alert import Alert
        return Alert
    elif name == 'Batch':
        from stockledger.models.batch import Batch
        return Batch
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'ledger',
    'Ledger',
    'StockError',
    'CellKey',
    'StockCell',
    'StockLog',
    'Transfer',
    'Alert',
    'Batch',
]

__version__ = '0.1.0'
