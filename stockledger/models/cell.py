"""
StockCell model — on-hand quantity of a product at a location/batch.
"""

import logging

from django.db import models
from django.db.models import Q, Sum
from django.db.models.functions import Coalesce
from django.utils.translation import gettext_lazy as _

from stockledger.models.enums import CellStatus

logger = logging.getLogger('stockledger')


class StockCellManager(models.Manager):
    """Manager with helper methods for StockCell queries."""

    def for_product(self, product):
        return self.filter(product=product)

    def at_location(self, location):
        return self.filter(location=location)

    def with_stock(self):
        """Only cells holding something."""
        return self.filter(quantity__gt=0)

    def fifo(self):
        """Oldest stock first, ties broken by id."""
        return self.order_by('created_at', 'pk')


class StockCell(models.Model):
    """
    Quantity bucket keyed by (product, location, batch).

    Coordinates:
    - location: WHERE
    - batch: WHICH LOT, null means "not batch tracked"

    Invariants:
    - quantity >= 0, reserved >= 0, available = quantity - reserved >= 0
    - status is derived from quantity and product.min_stock on every write
    - quantity equals the sum of this cell's StockLog deltas

    Only StockLedger writes to this model. Use recalculate() for audit.
    """

    product = models.ForeignKey(
        'stockledger.Product',
        on_delete=models.PROTECT,
        related_name='cells',
        verbose_name=_('Product'),
    )
    location = models.ForeignKey(
        'stockledger.Location',
        on_delete=models.PROTECT,
        related_name='cells',
        verbose_name=_('Location'),
    )
    batch = models.ForeignKey(
        'stockledger.Batch',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='cells',
        verbose_name=_('Batch'),
    )

    quantity = models.IntegerField(
        default=0,
        verbose_name=_('Quantity'),
    )
    reserved = models.IntegerField(
        default=0,
        verbose_name=_('Reserved'),
        help_text=_('Committed to open orders'),
    )
    available = models.IntegerField(
        default=0,
        verbose_name=_('Available'),
        help_text=_('quantity - reserved'),
    )
    status = models.CharField(
        max_length=20,
        choices=CellStatus.choices,
        default=CellStatus.OUT_OF_STOCK,
        db_index=True,
        verbose_name=_('Status'),
    )

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    last_updated = models.DateTimeField(auto_now=True)

    objects = StockCellManager()

    class Meta:
        verbose_name = _('Stock cell')
        verbose_name_plural = _('Stock cells')
        constraints = [
            models.UniqueConstraint(
                fields=['product', 'location', 'batch'],
                name='unique_stock_cell',
            ),
            # NULLs are distinct in unique constraints
            models.UniqueConstraint(
                fields=['product', 'location'],
                condition=Q(batch__isnull=True),
                name='unique_stock_cell_no_batch',
            ),
            models.CheckConstraint(
                condition=Q(quantity__gte=0) & Q(reserved__gte=0) & Q(available__gte=0),
                name='stock_cell_non_negative',
            ),
        ]
        indexes = [
            models.Index(fields=['product', 'location'], name='cell_product_location_idx'),
            models.Index(fields=['location', 'status'], name='cell_location_status_idx'),
        ]

    @property
    def key(self):
        from stockledger.protocols.repository import CellKey
        return CellKey(self.product_id, self.location_id, self.batch_id)

    def recalculate(self) -> int:
        """
        Recalculate quantity by replaying this cell's log.

        Use for:
        - Integrity audit
        - Correction after detected inconsistency

        Returns:
            Replayed quantity
        """
        total = self.logs.aggregate(
            t=Coalesce(Sum('quantity'), 0)
        )['t']

        if total != self.quantity:
            old = self.quantity
            self.quantity = total
            self.available = total - self.reserved
            self.save(update_fields=['quantity', 'available', 'last_updated'])

            logger.warning(
                "StockCell %s recalculated: %s -> %s (diff: %s)",
                self.pk, old, total, total - old,
            )

        return total

    def __str__(self) -> str:
        batch = f" #{self.batch.batch_number}" if self.batch_id else ""
        return f"{self.product.name} [{self.location.name}{batch}]: {self.quantity}"
