"""
Batch maintenance.

Batches carry lot data only; stock for a batch lives in its cells and
enters through StockLedger.create_cell.
"""

from __future__ import annotations

import logging

from django.db import transaction

from stockledger.exceptions import DuplicateError, NotFoundError, ReferencedError
from stockledger.models.batch import Batch
from stockledger.models.product import Product
from stockledger.requests import BatchPatch, BatchRequest

logger = logging.getLogger('stockledger')


def _check_expiry(batch: Batch, evaluator=None) -> None:
    if batch.expiry_date is None:
        return
    if evaluator is None:
        from stockledger.services.alerts import AlertEvaluator
        evaluator = AlertEvaluator()
    evaluator.evaluate_expiry(batch)


def create_batch(request: BatchRequest, evaluator=None) -> Batch:
    """
    Create a batch and raise an EXPIRY alert when it already falls
    inside the warning window.

    Raises:
        NotFoundError: Unknown product
        DuplicateError: batch_number already used for this product
    """
    if not Product.objects.filter(pk=request.product_id).exists():
        raise NotFoundError(message="Product not found", product_id=request.product_id)

    with transaction.atomic():
        if Batch.objects.filter(product_id=request.product_id,
                                batch_number=request.batch_number).exists():
            raise DuplicateError(
                message="Batch number already exists for this product",
                product_id=request.product_id,
                batch_number=request.batch_number,
            )

        batch = Batch.objects.create(
            product_id=request.product_id,
            batch_number=request.batch_number,
            quantity=request.quantity,
            cost=request.cost,
            expiry_date=request.expiry_date,
            manufacturing_date=request.manufacturing_date,
            notes=request.notes,
        )
        _check_expiry(batch, evaluator)

    logger.info(
        "batch.created",
        extra={"batch_id": batch.pk, "product_id": batch.product_id,
               "batch_number": batch.batch_number},
    )
    return batch


def update_batch(batch_id: int, patch: BatchPatch, evaluator=None) -> Batch:
    """Apply a partial update. Re-checks expiry when expiry_date is in the patch."""
    with transaction.atomic():
        batch = Batch.objects.select_for_update().filter(pk=batch_id).first()
        if batch is None:
            raise NotFoundError(message="Batch not found", batch_id=batch_id)

        number = patch.changes.get('batch_number')
        if number and number != batch.batch_number:
            duplicate = Batch.objects.filter(
                product_id=batch.product_id, batch_number=number,
            ).exclude(pk=batch_id).exists()
            if duplicate:
                raise DuplicateError(
                    message="Batch number already exists for this product",
                    product_id=batch.product_id,
                    batch_number=number,
                )

        for name, value in patch.changes.items():
            setattr(batch, name, value)
        batch.save()

        if patch.changes.get('expiry_date'):
            _check_expiry(batch, evaluator)

    logger.info("batch.updated", extra={"batch_id": batch_id, "fields": sorted(patch.changes)})
    return batch


def delete_batch(batch_id: int) -> None:
    """
    Raises:
        NotFoundError: Unknown batch
        ReferencedError: Stock cells, sale items or transfer items point at it
    """
    with transaction.atomic():
        batch = Batch.objects.select_for_update().filter(pk=batch_id).first()
        if batch is None:
            raise NotFoundError(message="Batch not found", batch_id=batch_id)

        if (batch.cells.exists() or batch.sale_items.exists()
                or batch.transfer_items.exists()):
            raise ReferencedError(
                message="Cannot delete batch with associated stock cells, sales, or transfers",
                batch_id=batch_id,
            )
        batch.delete()

    logger.info("batch.deleted", extra={"batch_id": batch_id})
