"""
Django ORM Stock Repository — default StockRepository implementation.

Transactions map to transaction.atomic(); nested calls join the outer
transaction through savepoints. Locks use select_for_update(), which is a
no-op on backends without row locking (SQLite).
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, TypeVar

from django.db import transaction
from django.db.models import Sum
from django.db.models.functions import Coalesce

from stockledger.models import Alert, Batch, Location, Product, StockCell, StockLog, Transfer
from stockledger.protocols.repository import CellKey

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DjangoStockRepository:
    """StockRepository backed by the stockledger models."""

    # ══════════════════════════════════════════════════════════════
    # TRANSACTIONS
    # ══════════════════════════════════════════════════════════════

    def atomic(self):
        return transaction.atomic()

    def run_in_transaction(self, fn: Callable[[], T]) -> T:
        with transaction.atomic():
            return fn()

    # ══════════════════════════════════════════════════════════════
    # CELLS
    # ══════════════════════════════════════════════════════════════

    def _cells(self, lock: bool):
        qs = StockCell.objects.all()
        if lock:
            qs = qs.select_for_update()
        return qs

    def get_cell(self, key: CellKey, lock: bool = False) -> StockCell | None:
        return self._cells(lock).filter(
            product_id=key.product_id,
            location_id=key.location_id,
            batch_id=key.batch_id,
        ).first()

    def get_cell_by_id(self, cell_id: int, lock: bool = False) -> StockCell | None:
        return self._cells(lock).filter(pk=cell_id).first()

    def list_cells(self, product_id: int, location_id: int | None = None,
                   batch_id: int | None = None, lock: bool = False) -> list[StockCell]:
        qs = self._cells(lock).filter(product_id=product_id)
        if location_id is not None:
            qs = qs.filter(location_id=location_id)
        if batch_id is not None:
            qs = qs.filter(batch_id=batch_id)
        return list(qs.order_by('created_at', 'pk'))

    def upsert_cell(self, cell: StockCell) -> StockCell:
        cell.save()
        return cell

    def delete_cell(self, key: CellKey) -> None:
        StockCell.objects.filter(
            product_id=key.product_id,
            location_id=key.location_id,
            batch_id=key.batch_id,
        ).delete()

    def total_quantity(self, product_id: int) -> int:
        return StockCell.objects.filter(product_id=product_id).aggregate(
            t=Coalesce(Sum('quantity'), 0)
        )['t']

    # ══════════════════════════════════════════════════════════════
    # LOG
    # ══════════════════════════════════════════════════════════════

    def append_log(self, entry: StockLog) -> StockLog:
        entry.save()
        return entry

    # ══════════════════════════════════════════════════════════════
    # ALERTS
    # ══════════════════════════════════════════════════════════════

    def find_active_alert(self, product_id: int, alert_type: str) -> Alert | None:
        return Alert.objects.open().filter(
            product_id=product_id,
            type=alert_type,
        ).first()

    def create_alert(self, alert: Alert) -> Alert:
        alert.save()
        return alert

    def get_alert(self, alert_id: int, lock: bool = False) -> Alert | None:
        qs = Alert.objects.all()
        if lock:
            qs = qs.select_for_update()
        return qs.filter(pk=alert_id).first()

    def update_alert(self, alert_id: int, **patch: Any) -> Alert:
        alert = Alert.objects.get(pk=alert_id)
        for field, value in patch.items():
            setattr(alert, field, value)
        alert.save(update_fields=list(patch.keys()))
        return alert

    # ══════════════════════════════════════════════════════════════
    # PARENTS
    # ══════════════════════════════════════════════════════════════

    def get_product(self, product_id: int, lock: bool = False) -> Product | None:
        qs = Product.objects.all()
        if lock:
            qs = qs.select_for_update()
        return qs.filter(pk=product_id).first()

    def get_location(self, location_id: int) -> Location | None:
        return Location.objects.filter(pk=location_id).first()

    def get_batch(self, batch_id: int) -> Batch | None:
        return Batch.objects.filter(pk=batch_id).first()

    def list_expiring_batches(self, until: date) -> list[Batch]:
        return list(Batch.objects.expiring_before(until).order_by('expiry_date', 'pk'))

    def get_transfer(self, transfer_id: int, lock: bool = False) -> Transfer | None:
        qs = Transfer.objects.all()
        if lock:
            qs = qs.select_for_update()
        return qs.filter(pk=transfer_id).first()

    def update_transfer(self, transfer_id: int, **patch: Any) -> Transfer:
        transfer = Transfer.objects.get(pk=transfer_id)
        for field, value in patch.items():
            setattr(transfer, field, value)
        transfer.save(update_fields=[*patch.keys(), 'updated_at'])
        return transfer
