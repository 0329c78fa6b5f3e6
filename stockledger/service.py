"""
Ledger — the single public entry point for stock operations.

Usage:
    from stockledger import ledger, StockError
    from stockledger.protocols import CellKey

    ledger.create_cell(CellKey(product.pk, store.pk), 20, actor_id='u1')
    ledger.allocate(product.pk, store.pk, 5, reference='sale:12', actor_id='u1')
    ledger.transfer(transfer.pk, 'complete', actor_id='u1')
    ledger.total_stock(product.pk)  # 15
"""

from __future__ import annotations

from stockledger.protocols.repository import CellKey
from stockledger.requests import (
    BatchPatch,
    BatchRequest,
    LocationRequest,
    SaleRequest,
    StockAdjustRequest,
    StockInRequest,
    TransferRequest,
)
from stockledger.services import batches, locations, sales
from stockledger.services.alerts import AlertEvaluator, AlertPolicyConfig
from stockledger.services.allocation import AllocationEngine
from stockledger.services.ledger import StockLedger
from stockledger.services.queries import StockQueries
from stockledger.services.transfers import TransferStateMachine


class Ledger:
    """
    Wires the stock components over one repository.

    Every component shares the same repository and AlertEvaluator, so
    nested operations join one transaction.
    """

    def __init__(self, repository=None, policy: AlertPolicyConfig | None = None):
        if repository is None:
            from stockledger.adapters import get_repository
            repository = get_repository()
        self.repository = repository
        self.alerts = AlertEvaluator(policy=policy, repository=repository)
        self.stock = StockLedger(repository=repository, evaluator=self.alerts)
        self.allocation = AllocationEngine(ledger=self.stock)
        self.transfers = TransferStateMachine(allocation=self.allocation)
        self.queries = StockQueries

    # ══════════════════════════════════════════════════════════════
    # CORE: CELLS
    # ══════════════════════════════════════════════════════════════

    def create_cell(self, key: CellKey, quantity: int, actor_id: str, **kwargs):
        return self.stock.create_cell(key, quantity, actor_id, **kwargs)

    def apply_delta(self, key: CellKey, quantity: int, type: str, actor_id: str, **kwargs):
        return self.stock.apply_delta(key, quantity, type, actor_id, **kwargs)

    def delete_cell(self, key: CellKey, actor_id: str, **kwargs) -> None:
        self.stock.delete_cell(key, actor_id, **kwargs)

    def stock_in(self, data: StockInRequest | dict, actor_id: str):
        if isinstance(data, dict):
            data = StockInRequest.from_data(data)
        return self.stock.stock_in(data, actor_id)

    def adjust(self, data: StockAdjustRequest | dict, actor_id: str):
        if isinstance(data, dict):
            data = StockAdjustRequest.from_data(data)
        return self.stock.adjust(data, actor_id)

    def allocate(self, product_id: int, location_id: int, quantity: int,
                 reference: str, actor_id: str, **kwargs):
        return self.allocation.allocate(product_id, location_id, quantity,
                                        reference, actor_id, **kwargs)

    # ══════════════════════════════════════════════════════════════
    # CORE: TRANSFERS
    # ══════════════════════════════════════════════════════════════

    def create_transfer(self, data: TransferRequest | dict, actor_id: str):
        if isinstance(data, dict):
            data = TransferRequest.from_data(data)
        return self.transfers.create(data, actor_id)

    def transfer(self, transfer_id: int, action: str, actor_id: str):
        return self.transfers.perform(transfer_id, action, actor_id)

    # ══════════════════════════════════════════════════════════════
    # SALES, BATCHES, LOCATIONS
    # ══════════════════════════════════════════════════════════════

    def record_sale(self, data: SaleRequest | dict, actor_id: str):
        if isinstance(data, dict):
            data = SaleRequest.from_data(data)
        return sales.record_sale(data, actor_id, allocation=self.allocation)

    def create_batch(self, data: BatchRequest | dict):
        if isinstance(data, dict):
            data = BatchRequest.from_data(data)
        return batches.create_batch(data, evaluator=self.alerts)

    def update_batch(self, batch_id: int, data: BatchPatch | dict):
        if isinstance(data, dict):
            data = BatchPatch.from_data(data)
        return batches.update_batch(batch_id, data, evaluator=self.alerts)

    def delete_batch(self, batch_id: int) -> None:
        batches.delete_batch(batch_id)

    def create_location(self, data: LocationRequest | dict):
        if isinstance(data, dict):
            data = LocationRequest.from_data(data)
        return locations.create_location(data)

    def update_location(self, location_id: int, data: LocationRequest | dict):
        if isinstance(data, dict):
            data = LocationRequest.from_data(data)
        return locations.update_location(location_id, data)

    def delete_location(self, location_id: int) -> None:
        locations.delete_location(location_id)

    # ══════════════════════════════════════════════════════════════
    # ALERTS
    # ══════════════════════════════════════════════════════════════

    def resolve_alert(self, alert_id: int):
        return self.alerts.resolve(alert_id)

    def dismiss_alert(self, alert_id: int):
        return self.alerts.dismiss(alert_id)

    def check_expiring_batches(self):
        return self.alerts.check_expiring_batches()

    # ══════════════════════════════════════════════════════════════
    # QUERIES
    # ══════════════════════════════════════════════════════════════

    def total_stock(self, product_id: int, location_id: int | None = None) -> int:
        return self.queries.total_stock(product_id, location_id)

    def cell_history(self, cell_id: int):
        return self.queries.cell_history(cell_id)
