"""
StockLog model — Immutable ledger of quantity changes.
"""

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from stockledger.models.enums import LogType


class StockLog(models.Model):
    """
    Immutable record of a quantity change on one cell.

    Rules:
    - NEVER update() or delete()
    - Corrections are new entries with inverse delta
    - Written by StockLedger in the same transaction as the cell update

    Cell, location and batch are kept as unconstrained references so the
    entry survives deletion of the cell it describes.
    """

    cell = models.ForeignKey(
        'stockledger.StockCell',
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        null=True,
        blank=True,
        related_name='logs',
        verbose_name=_('Stock cell'),
    )
    product = models.ForeignKey(
        'stockledger.Product',
        on_delete=models.PROTECT,
        related_name='stock_logs',
        verbose_name=_('Product'),
    )
    location = models.ForeignKey(
        'stockledger.Location',
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name='+',
        verbose_name=_('Location'),
    )
    batch = models.ForeignKey(
        'stockledger.Batch',
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Batch'),
    )

    quantity = models.IntegerField(
        verbose_name=_('Delta'),
        help_text=_('Positive = in, negative = out'),
    )
    type = models.CharField(
        max_length=20,
        choices=LogType.choices,
        verbose_name=_('Type'),
    )
    reference = models.CharField(
        max_length=100,
        blank=True,
        default='',
        db_index=True,
        verbose_name=_('Reference'),
        help_text=_('Sale/transfer id or free text'),
    )
    notes = models.CharField(
        max_length=255,
        blank=True,
        default='',
        verbose_name=_('Notes'),
    )
    actor_id = models.CharField(
        max_length=100,
        verbose_name=_('Actor'),
    )
    timestamp = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Timestamp'))

    class Meta:
        verbose_name = _('Stock log entry')
        verbose_name_plural = _('Stock log')
        ordering = ['timestamp', 'pk']
        indexes = [
            models.Index(fields=['cell', 'timestamp'], name='log_cell_timestamp_idx'),
            models.Index(fields=['product', 'location'], name='log_product_location_idx'),
        ]

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValueError(
                "Stock log entries are immutable. "
                "To correct, append a new entry with the inverse delta."
            )
        if not self.actor_id:
            raise ValueError("actor_id is required")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError(
            "Stock log entries are immutable. "
            "To reverse, append a new entry with the inverse delta."
        )

    def __str__(self) -> str:
        signal = '+' if self.quantity > 0 else ''
        return f"{signal}{self.quantity} {self.type} | {self.reference or self.notes}"
