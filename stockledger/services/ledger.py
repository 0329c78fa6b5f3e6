"""
Stock ledger — the only writer of StockCell quantities.

Every call writes exactly one StockLog entry in the same transaction as
the cell update, so a cell's quantity always equals the sum of its log.

Usage:
    from stockledger.services.ledger import StockLedger
    from stockledger.protocols import CellKey

    ledger = StockLedger()
    key = CellKey(product.pk, store.pk)
    ledger.create_cell(key, 20, actor_id='u1')
    ledger.apply_delta(key, -5, 'out', reference='sale:12', actor_id='u1')
"""

from __future__ import annotations

import logging

from django.db import IntegrityError
from django.db.models import Sum
from django.db.models.functions import Coalesce

from stockledger.exceptions import (
    InsufficientStockError,
    InvalidActionError,
    NotFoundError,
    ValidationError,
)
from stockledger.models.cell import StockCell
from stockledger.models.enums import CellStatus, LogType
from stockledger.models.log import StockLog
from stockledger.protocols.repository import CellKey
from stockledger.requests import ADJUST_ACTIONS, StockAdjustRequest, StockInRequest

logger = logging.getLogger('stockledger')


def derive_status(quantity: int, min_stock: int) -> str:
    """Status from scratch, never patched incrementally."""
    if quantity == 0:
        return CellStatus.OUT_OF_STOCK
    if quantity <= min_stock:
        return CellStatus.LOW_STOCK
    return CellStatus.IN_STOCK


def _check_entry(quantity, log_type: str, actor_id: str) -> None:
    if not actor_id:
        raise ValidationError(message="actor_id is required", field='actor_id')
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError(message="quantity must be an integer", field='quantity')
    if log_type not in LogType.values:
        raise ValidationError(message=f"Unknown log type '{log_type}'", field='type')
    if log_type == LogType.IN and quantity < 0:
        raise ValidationError(message="'in' entries cannot be negative", field='quantity')
    if log_type == LogType.OUT and quantity > 0:
        raise ValidationError(message="'out' entries cannot be positive", field='quantity')


class StockLedger:
    """
    Applies quantity deltas to cells and records them.

    IMPORTANT: All state-changing methods run inside repository.atomic()
    with the touched cell locked. Alert evaluation runs inside the same
    transaction, after the write.
    """

    def __init__(self, repository=None, evaluator=None):
        if repository is None:
            from stockledger.adapters import get_repository
            repository = get_repository()
        self.repository = repository
        self._evaluator = evaluator

    @property
    def evaluator(self):
        if self._evaluator is None:
            from stockledger.services.alerts import AlertEvaluator
            self._evaluator = AlertEvaluator(repository=self.repository)
        return self._evaluator

    # ══════════════════════════════════════════════════════════════
    # CORE
    # ══════════════════════════════════════════════════════════════

    def apply_delta(self, key: CellKey, quantity: int, type: str, actor_id: str,
                    reference: str = '', notes: str = '', evaluate: bool = True) -> StockCell:
        """
        Apply a signed quantity change to an existing cell.

        Raises:
            NotFoundError: No cell for the key
            InsufficientStockError: quantity or available would go below zero;
                nothing is written
        """
        _check_entry(quantity, type, actor_id)

        with self.repository.atomic():
            cell = self.repository.get_cell(key, lock=True)
            if cell is None:
                raise NotFoundError(message="Stock cell not found", cell=str(key))

            product = self.repository.get_product(key.product_id)
            new_quantity = cell.quantity + quantity
            new_available = new_quantity - cell.reserved

            if new_quantity < 0 or new_available < 0:
                raise InsufficientStockError(
                    message=f"Insufficient stock for product: {product.name}",
                    product_id=key.product_id,
                    location_id=key.location_id,
                    batch_id=key.batch_id,
                    available=cell.available,
                    requested=-quantity,
                )

            cell.quantity = new_quantity
            cell.available = new_available
            cell.status = derive_status(new_quantity, product.min_stock)
            self.repository.upsert_cell(cell)
            self._log(cell, quantity, type, actor_id, reference, notes)

            if evaluate:
                self.evaluator.evaluate(key.product_id)

        logger.info(
            "stock.delta",
            extra={
                "cell": str(key),
                "delta": quantity,
                "type": type,
                "reference": reference,
                "quantity": cell.quantity,
                "actor_id": actor_id,
            },
        )
        return cell

    def create_cell(self, key: CellKey, quantity: int, actor_id: str,
                    reference: str = '', notes: str = '', evaluate: bool = True) -> StockCell:
        """
        Stock entry into a cell, creating it on first use.

        Idempotent upsert: an existing cell gets apply_delta(+quantity).
        A new cell starts with available = quantity and reserved = 0.
        """
        _check_entry(quantity, LogType.IN, actor_id)
        if quantity <= 0:
            raise ValidationError(message="quantity must be positive", field='quantity')

        with self.repository.atomic():
            if self.repository.get_cell(key, lock=True) is not None:
                return self.apply_delta(key, quantity, LogType.IN, actor_id,
                                        reference=reference, notes=notes, evaluate=evaluate)

            product = self._resolve_parents(key)
            try:
                with self.repository.atomic():
                    cell = self.repository.upsert_cell(StockCell(
                        product_id=key.product_id,
                        location_id=key.location_id,
                        batch_id=key.batch_id,
                        quantity=quantity,
                        reserved=0,
                        available=quantity,
                        status=derive_status(quantity, product.min_stock),
                    ))
            except IntegrityError:
                # Created concurrently since our read
                return self.apply_delta(key, quantity, LogType.IN, actor_id,
                                        reference=reference, notes=notes, evaluate=evaluate)

            self._log(cell, quantity, LogType.IN, actor_id, reference, notes)

            if evaluate:
                self.evaluator.evaluate(key.product_id)

        logger.info(
            "stock.cell.created",
            extra={"cell": str(key), "quantity": quantity, "actor_id": actor_id},
        )
        return cell

    def delete_cell(self, key: CellKey, actor_id: str, notes: str = 'Stock cell deleted') -> None:
        """
        Remove a cell.

        Logs a synthetic full-quantity 'out' entry first so the log
        still replays to zero for the removed cell.

        Raises:
            NotFoundError: No cell for the key
            InsufficientStockError: The cell has reserved units
        """
        _check_entry(0, LogType.OUT, actor_id)

        with self.repository.atomic():
            cell = self.repository.get_cell(key, lock=True)
            if cell is None:
                raise NotFoundError(message="Stock cell not found", cell=str(key))
            if cell.reserved > 0:
                raise InsufficientStockError(
                    message="Cannot delete a stock cell with reserved units",
                    cell=str(key),
                    reserved=cell.reserved,
                )

            removed = cell.quantity
            self._log(cell, -removed, LogType.OUT, actor_id, '', notes)
            self.repository.delete_cell(key)
            self.evaluator.evaluate(key.product_id)

        logger.info(
            "stock.cell.deleted",
            extra={"cell": str(key), "removed": removed, "actor_id": actor_id},
        )

    # ══════════════════════════════════════════════════════════════
    # OPERATIONS
    # ══════════════════════════════════════════════════════════════

    def stock_in(self, request: StockInRequest, actor_id: str) -> StockCell:
        """Receive stock; parents must exist."""
        key = CellKey(request.product_id, request.location_id, request.batch_id)
        return self.create_cell(key, request.quantity, actor_id,
                                notes=request.notes or 'Stock added')

    def adjust(self, request: StockAdjustRequest, actor_id: str) -> StockCell:
        """
        Manual stock change on a cell.

        - add: +quantity ('in')
        - remove: -quantity ('out'); fails rather than clamping at zero
        - set: delta = quantity - current ('adjustment')
        """
        if request.action not in ADJUST_ACTIONS:
            raise InvalidActionError(action=request.action, allowed=list(ADJUST_ACTIONS))

        notes = request.notes or f"Stock {request.action}: {request.quantity}"

        with self.repository.atomic():
            cell = self.repository.get_cell_by_id(request.cell_id, lock=True)
            if cell is None:
                raise NotFoundError(message="Stock cell not found", cell_id=request.cell_id)

            if request.action == 'add':
                delta, log_type = request.quantity, LogType.IN
            elif request.action == 'remove':
                delta, log_type = -request.quantity, LogType.OUT
            else:
                delta, log_type = request.quantity - cell.quantity, LogType.ADJUSTMENT

            return self.apply_delta(cell.key, delta, log_type, actor_id, notes=notes)

    def audit(self, fix: bool = False) -> list[tuple[StockCell, int, int]]:
        """
        Compare every cell with the sum of its log.

        Args:
            fix: Rewrite drifted cells from their log (StockCell.recalculate)

        Returns:
            (cell, recorded_quantity, replayed_quantity) for each cell that drifted
        """
        drifted = []
        cells = StockCell.objects.annotate(
            replayed=Coalesce(Sum('logs__quantity'), 0)
        ).order_by('pk')

        for cell in cells:
            if cell.replayed != cell.quantity:
                drifted.append((cell, cell.quantity, cell.replayed))
                if fix:
                    cell.recalculate()

        if drifted:
            logger.warning(
                "stock.audit.drift",
                extra={"cells": [c.pk for c, _, _ in drifted], "fixed": fix},
            )
        return drifted

    # ══════════════════════════════════════════════════════════════
    # INTERNALS
    # ══════════════════════════════════════════════════════════════

    def _resolve_parents(self, key: CellKey):
        product = self.repository.get_product(key.product_id)
        if product is None:
            raise NotFoundError(message="Product not found", product_id=key.product_id)
        if self.repository.get_location(key.location_id) is None:
            raise NotFoundError(message="Location not found", location_id=key.location_id)
        if key.batch_id is not None:
            batch = self.repository.get_batch(key.batch_id)
            if batch is None:
                raise NotFoundError(message="Batch not found", batch_id=key.batch_id)
            if batch.product_id != key.product_id:
                raise ValidationError(
                    message="Batch belongs to another product",
                    field='batch_id',
                    batch_id=key.batch_id,
                )
        return product

    def _log(self, cell: StockCell, quantity: int, log_type: str, actor_id: str,
             reference: str, notes: str) -> StockLog:
        return self.repository.append_log(StockLog(
            cell_id=cell.pk,
            product_id=cell.product_id,
            location_id=cell.location_id,
            batch_id=cell.batch_id,
            quantity=quantity,
            type=log_type,
            reference=reference,
            notes=notes,
            actor_id=actor_id,
        ))
