"""
Stock transfers — lifecycle of stock moving between locations.

Transitions:
    approve:  PENDING -> IN_TRANSIT
    complete: IN_TRANSIT -> COMPLETED (moves the stock)
    cancel:   PENDING|IN_TRANSIT -> CANCELLED

All methods use repository.atomic() with the transfer row locked.
"""

from __future__ import annotations

import logging

from django.utils import timezone

from stockledger.conf import stockledger_settings
from stockledger.exceptions import (
    InvalidActionError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from stockledger.models.enums import TransferStatus
from stockledger.models.transfer import Transfer, TransferItem
from stockledger.protocols.repository import CellKey
from stockledger.requests import TransferRequest
from stockledger.services.allocation import lock_order

logger = logging.getLogger('stockledger')


class TransferStateMachine:
    """Transfer lifecycle methods."""

    ACTIONS = ('approve', 'complete', 'cancel')

    def __init__(self, allocation=None, repository=None):
        if allocation is None:
            from stockledger.services.allocation import AllocationEngine
            allocation = AllocationEngine(repository=repository)
        self.allocation = allocation
        self.ledger = allocation.ledger
        self.repository = repository or allocation.repository

    # ══════════════════════════════════════════════════════════════
    # CREATION
    # ══════════════════════════════════════════════════════════════

    def create(self, request: TransferRequest, actor_id: str) -> Transfer:
        """
        Create a PENDING transfer with its items.

        Raises:
            NotFoundError: Unknown location, product or batch
            ValidationError: Missing actor, or batch of another product
        """
        if not actor_id:
            raise ValidationError(message="actor_id is required", field='actor_id')

        for location_id in (request.from_location_id, request.to_location_id):
            if self.repository.get_location(location_id) is None:
                raise NotFoundError(message="Location not found", location_id=location_id)

        for item in request.items:
            if self.repository.get_product(item.product_id) is None:
                raise NotFoundError(message="Product not found", product_id=item.product_id)
            if item.batch_id is not None:
                batch = self.repository.get_batch(item.batch_id)
                if batch is None:
                    raise NotFoundError(message="Batch not found", batch_id=item.batch_id)
                if batch.product_id != item.product_id:
                    raise ValidationError(
                        message="Batch belongs to another product",
                        field='batch_id',
                        batch_id=item.batch_id,
                    )

        with self.repository.atomic():
            transfer = Transfer.objects.create(
                from_location_id=request.from_location_id,
                to_location_id=request.to_location_id,
                notes=request.notes,
                actor_id=actor_id,
                status=TransferStatus.PENDING,
            )
            TransferItem.objects.bulk_create([
                TransferItem(
                    transfer=transfer,
                    product_id=item.product_id,
                    batch_id=item.batch_id,
                    quantity=item.quantity,
                    cost=item.cost,
                )
                for item in request.items
            ])
            prefix = stockledger_settings.TRANSFER_NUMBER_PREFIX
            transfer = self.repository.update_transfer(
                transfer.pk, transfer_no=f"{prefix}-{transfer.pk:06d}",
            )

        logger.info(
            "transfer.created",
            extra={
                "transfer_id": transfer.pk,
                "transfer_no": transfer.transfer_no,
                "items": len(request.items),
                "actor_id": actor_id,
            },
        )
        return transfer

    # ══════════════════════════════════════════════════════════════
    # TRANSITIONS
    # ══════════════════════════════════════════════════════════════

    def perform(self, transfer_id: int, action: str, actor_id: str) -> Transfer:
        """
        Dispatch an action string.

        Raises:
            InvalidActionError: action not in approve/complete/cancel
        """
        if action not in self.ACTIONS:
            raise InvalidActionError(action=action, allowed=list(self.ACTIONS))
        return getattr(self, action)(transfer_id, actor_id)

    def approve(self, transfer_id: int, actor_id: str) -> Transfer:
        """
        Transition: PENDING -> IN_TRANSIT

        No stock is touched or reserved.
        """
        with self.repository.atomic():
            transfer = self._get_locked(transfer_id)
            self._expect(transfer, [TransferStatus.PENDING], 'approve')
            transfer = self.repository.update_transfer(
                transfer_id, status=TransferStatus.IN_TRANSIT,
            )

        logger.info(
            "transfer.approved",
            extra={"transfer_id": transfer_id, "actor_id": actor_id},
        )
        return transfer

    def complete(self, transfer_id: int, actor_id: str) -> Transfer:
        """
        Transition: IN_TRANSIT -> COMPLETED

        1. For each item, deducts FIFO at the source location
        2. Credits the destination, one cell per debited source batch
        3. Sets completed_at

        Debit and credit share one transaction. If any item lacks stock,
        InsufficientStockError propagates, nothing is moved and the
        transfer stays IN_TRANSIT.
        """
        with self.repository.atomic():
            transfer = self._get_locked(transfer_id)
            self._expect(transfer, [TransferStatus.IN_TRANSIT], 'complete')

            reference = transfer.reference
            notes = f"Transfer {transfer.transfer_no or transfer.pk}"
            touched = []

            for item in sorted(transfer.items.all(), key=lock_order):
                allocations = self.allocation.allocate(
                    item.product_id,
                    transfer.from_location_id,
                    item.quantity,
                    reference=reference,
                    actor_id=actor_id,
                    batch_id=item.batch_id,
                    notes=notes,
                    evaluate=False,
                )
                for allocation in allocations:
                    self.ledger.create_cell(
                        CellKey(item.product_id, transfer.to_location_id, allocation.key.batch_id),
                        allocation.quantity,
                        actor_id,
                        reference=reference,
                        notes=notes,
                        evaluate=False,
                    )
                if item.product_id not in touched:
                    touched.append(item.product_id)

            for product_id in touched:
                self.ledger.evaluator.evaluate(product_id)

            transfer = self.repository.update_transfer(
                transfer_id,
                status=TransferStatus.COMPLETED,
                completed_at=timezone.now(),
            )

        logger.info(
            "transfer.completed",
            extra={
                "transfer_id": transfer_id,
                "from": transfer.from_location_id,
                "to": transfer.to_location_id,
                "actor_id": actor_id,
            },
        )
        return transfer

    def cancel(self, transfer_id: int, actor_id: str) -> Transfer:
        """
        Transition: PENDING|IN_TRANSIT -> CANCELLED

        Nothing to reverse: only complete() moves stock.
        """
        with self.repository.atomic():
            transfer = self._get_locked(transfer_id)
            self._expect(transfer, [TransferStatus.PENDING, TransferStatus.IN_TRANSIT], 'cancel')
            transfer = self.repository.update_transfer(
                transfer_id, status=TransferStatus.CANCELLED,
            )

        logger.info(
            "transfer.cancelled",
            extra={"transfer_id": transfer_id, "actor_id": actor_id},
        )
        return transfer

    # ══════════════════════════════════════════════════════════════
    # INTERNALS
    # ══════════════════════════════════════════════════════════════

    def _get_locked(self, transfer_id: int) -> Transfer:
        transfer = self.repository.get_transfer(transfer_id, lock=True)
        if transfer is None:
            raise NotFoundError(message="Transfer not found", transfer_id=transfer_id)
        return transfer

    def _expect(self, transfer: Transfer, allowed: list[str], action: str) -> None:
        if transfer.status not in allowed:
            raise InvalidTransitionError(
                message=f"Cannot {action} a {transfer.status} transfer",
                transfer_id=transfer.pk,
                current=transfer.status,
                expected=[str(s) for s in allowed],
            )
