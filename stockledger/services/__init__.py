"""
Stock services — modular organization of stock operations.

    from stockledger.services import StockLedger, AllocationEngine, TransferStateMachine
"""

from stockledger.services.alerts import AlertEvaluator, AlertPolicyConfig
from stockledger.services.allocation import Allocation, AllocationEngine
from stockledger.services.ledger import StockLedger, derive_status
from stockledger.services.queries import StockQueries
from stockledger.services.transfers import TransferStateMachine

__all__ = [
    'AlertEvaluator',
    'AlertPolicyConfig',
    'Allocation',
    'AllocationEngine',
    'StockLedger',
    'StockQueries',
    'TransferStateMachine',
    'derive_status',
]
