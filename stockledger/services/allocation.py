"""
Stock allocation — turn "take N units of P at L" into per-cell deductions.

FIFO by cell creation: the oldest stock is depleted first. The whole plan
is computed on locked cells before any deduction is applied, and all
deductions run in one transaction, so an allocation either fully applies
or leaves every cell untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from stockledger.exceptions import InsufficientStockError, NotFoundError, ValidationError
from stockledger.models.enums import LogType
from stockledger.protocols.repository import CellKey

logger = logging.getLogger('stockledger')


@dataclass(frozen=True)
class Allocation:
    """Units taken from one cell."""

    key: CellKey
    quantity: int


def lock_order(item) -> tuple[int, int]:
    """Sort key for request or transfer items: cell rows get locked in one order."""
    return (item.product_id, item.batch_id or 0)


class AllocationEngine:
    """FIFO allocation on top of StockLedger."""

    def __init__(self, ledger=None, repository=None):
        if ledger is None:
            from stockledger.services.ledger import StockLedger
            ledger = StockLedger(repository=repository)
        self.ledger = ledger
        self.repository = repository or ledger.repository

    def plan(self, product_id: int, location_id: int, quantity: int,
             batch_id: int | None = None, lock: bool = False) -> list[Allocation]:
        """
        Compute the deductions without applying them.

        Candidates are the product's cells at the location, restricted to
        batch_id when the product tracks batches and one is given, ordered
        oldest first (ties by id).

        Raises:
            NotFoundError: Unknown product
            InsufficientStockError: Candidates hold less than `quantity` available
        """
        product = self.repository.get_product(product_id)
        if product is None:
            raise NotFoundError(message="Product not found", product_id=product_id)

        batch_filter = batch_id if product.track_batch else None
        cells = self.repository.list_cells(
            product_id, location_id, batch_id=batch_filter, lock=lock,
        )
        candidates = [cell for cell in cells if cell.available > 0]
        total_available = sum(cell.available for cell in candidates)

        if total_available < quantity:
            raise InsufficientStockError(
                message=f"Insufficient stock for product: {product.name}",
                product_id=product_id,
                location_id=location_id,
                batch_id=batch_filter,
                available=total_available,
                requested=quantity,
            )

        allocations = []
        remaining = quantity
        for cell in candidates:
            if remaining == 0:
                break
            take = min(remaining, cell.available)
            allocations.append(Allocation(key=cell.key, quantity=take))
            remaining -= take

        return allocations

    def allocate(self, product_id: int, location_id: int, quantity: int,
                 reference: str, actor_id: str, batch_id: int | None = None,
                 notes: str = '', evaluate: bool = True) -> list[Allocation]:
        """
        Deduct `quantity` units FIFO and log each deduction as 'out'.

        Returns:
            The applied allocations, oldest cell first

        Concurrency:
            - Runs under repository.atomic()
            - Candidate cells are locked before planning
            - Alerts are evaluated once, after all deductions
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError(message="quantity must be a positive integer", field='quantity')

        with self.repository.atomic():
            allocations = self.plan(product_id, location_id, quantity,
                                    batch_id=batch_id, lock=True)

            for allocation in allocations:
                self.ledger.apply_delta(
                    allocation.key,
                    -allocation.quantity,
                    LogType.OUT,
                    actor_id,
                    reference=reference,
                    notes=notes,
                    evaluate=False,
                )

            if evaluate:
                self.ledger.evaluator.evaluate(product_id)

        logger.info(
            "stock.allocate",
            extra={
                "product_id": product_id,
                "location_id": location_id,
                "qty": quantity,
                "cells": [str(a.key) for a in allocations],
                "reference": reference,
            },
        )
        return allocations
