"""
Sales — record a sale and consume its stock.
"""

from __future__ import annotations

import logging

from stockledger.conf import stockledger_settings
from stockledger.exceptions import NotFoundError, ValidationError
from stockledger.models.sale import Sale, SaleItem
from stockledger.requests import SaleRequest
from stockledger.services.allocation import lock_order

logger = logging.getLogger('stockledger')


def record_sale(request: SaleRequest, actor_id: str, allocation=None) -> Sale:
    """
    Create a Sale with its items and deduct every item FIFO at the sale
    location, referenced as "sale:<id>".

    One transaction: if any item lacks stock, InsufficientStockError
    propagates and neither the sale nor any deduction persists. Alerts
    are evaluated once per product after all deductions.

    Raises:
        ValidationError: Missing actor
        NotFoundError: Unknown location or product
        InsufficientStockError: An item cannot be covered
    """
    if not actor_id:
        raise ValidationError(message="actor_id is required", field='actor_id')

    if allocation is None:
        from stockledger.services.allocation import AllocationEngine
        allocation = AllocationEngine()
    repository = allocation.repository

    if repository.get_location(request.location_id) is None:
        raise NotFoundError(message="Location not found", location_id=request.location_id)

    with repository.atomic():
        sale = Sale.objects.create(
            location_id=request.location_id,
            customer_name=request.customer_name,
            notes=request.notes,
            total_amount=request.total_amount,
            discount=request.discount,
            tax=request.tax,
            final_amount=request.final_amount,
            actor_id=actor_id,
        )
        sale.invoice_no = f"{stockledger_settings.INVOICE_NUMBER_PREFIX}-{sale.pk:06d}"
        sale.save(update_fields=['invoice_no'])

        SaleItem.objects.bulk_create([
            SaleItem(
                sale=sale,
                product_id=item.product_id,
                batch_id=item.batch_id,
                quantity=item.quantity,
                price=item.price,
                discount=item.discount,
                total=item.total,
            )
            for item in request.items
        ])

        # Stable lock order across concurrent sales
        touched = []
        for item in sorted(request.items, key=lock_order):
            allocation.allocate(
                item.product_id,
                request.location_id,
                item.quantity,
                reference=sale.reference,
                actor_id=actor_id,
                batch_id=item.batch_id,
                notes=f"Sale {sale.invoice_no}",
                evaluate=False,
            )
            if item.product_id not in touched:
                touched.append(item.product_id)

        for product_id in touched:
            allocation.ledger.evaluator.evaluate(product_id)

    logger.info(
        "sale.recorded",
        extra={
            "sale_id": sale.pk,
            "invoice_no": sale.invoice_no,
            "location_id": request.location_id,
            "final_amount": str(sale.final_amount),
            "actor_id": actor_id,
        },
    )
    return sale
