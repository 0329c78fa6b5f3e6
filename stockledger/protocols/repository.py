"""
Stock Repository Protocol — storage interface consumed by the stock core.

The ledger, allocation engine, transfer state machine and alert evaluator
only talk to storage through this protocol. The Django ORM implementation
lives in stockledger.adapters.orm.

Every method must be callable inside run_in_transaction()/atomic() so a
multi-step operation commits or rolls back as one unit.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Any, Callable, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from stockledger.models import Alert, Batch, Location, Product, StockCell, StockLog, Transfer

T = TypeVar("T")


@dataclass(frozen=True, order=True)
class CellKey:
    """Identity of a stock cell."""

    product_id: int
    location_id: int
    batch_id: int | None = None

    def __str__(self) -> str:
        batch = self.batch_id if self.batch_id is not None else '-'
        return f"{self.product_id}/{self.location_id}/{batch}"


@runtime_checkable
class StockRepository(Protocol):
    """
    Transactional access to cells, logs, alerts and their parents.

    lock=True asks for row-level locks (SELECT ... FOR UPDATE) held
    until the surrounding transaction ends.
    """

    # Transactions

    def atomic(self) -> AbstractContextManager[Any]:
        ...

    def run_in_transaction(self, fn: Callable[[], T]) -> T:
        ...

    # Cells

    def get_cell(self, key: CellKey, lock: bool = False) -> StockCell | None:
        ...

    def get_cell_by_id(self, cell_id: int, lock: bool = False) -> StockCell | None:
        ...

    def list_cells(self, product_id: int, location_id: int | None = None,
                   batch_id: int | None = None, lock: bool = False) -> list[StockCell]:
        """Cells ordered by creation time ascending, ties by id."""
        ...

    def upsert_cell(self, cell: StockCell) -> StockCell:
        ...

    def delete_cell(self, key: CellKey) -> None:
        ...

    def total_quantity(self, product_id: int) -> int:
        ...

    # Log

    def append_log(self, entry: StockLog) -> StockLog:
        ...

    # Alerts

    def find_active_alert(self, product_id: int, alert_type: str) -> Alert | None:
        ...

    def create_alert(self, alert: Alert) -> Alert:
        ...

    def get_alert(self, alert_id: int, lock: bool = False) -> Alert | None:
        ...

    def update_alert(self, alert_id: int, **patch: Any) -> Alert:
        ...

    # Parents

    def get_product(self, product_id: int, lock: bool = False) -> Product | None:
        ...

    def get_location(self, location_id: int) -> Location | None:
        ...

    def get_batch(self, batch_id: int) -> Batch | None:
        ...

    def list_expiring_batches(self, until: date) -> list[Batch]:
        """Batches with an expiry date on or before `until`."""
        ...

    def get_transfer(self, transfer_id: int, lock: bool = False) -> Transfer | None:
        ...

    def update_transfer(self, transfer_id: int, **patch: Any) -> Transfer:
        ...
