"""
Transfer model — Moving stock between two locations.
"""

from decimal import Decimal

from django.db import models
from django.db.models import F, Q
from django.utils.translation import gettext_lazy as _

from stockledger.models.enums import TransferStatus


class Transfer(models.Model):
    """
    Cross-location stock transfer.

    LIFECYCLE:

    ┌──────────────────────────────────────────────────────────────┐
    │                                                              │
    │   ┌─────────┐   approve()   ┌────────────┐   complete()      │
    │   │ PENDING │ ────────────► │ IN_TRANSIT │ ─────────────►    │
    │   └─────────┘               └────────────┘   ┌───────────┐   │
    │        │                          │          │ COMPLETED │   │
    │        │ cancel()                 │ cancel() └───────────┘   │
    │        ▼                          ▼                          │
    │   ┌──────────────────────────────────┐                       │
    │   │            CANCELLED             │                       │
    │   └──────────────────────────────────┘                       │
    │                                                              │
    └──────────────────────────────────────────────────────────────┘

    Only complete() moves stock. Approval reserves nothing: two transfers
    approved against the same stock race at completion, first one wins.
    """

    transfer_no = models.CharField(
        max_length=30,
        unique=True,
        null=True,
        blank=True,
        verbose_name=_('Transfer number'),
    )
    from_location = models.ForeignKey(
        'stockledger.Location',
        on_delete=models.PROTECT,
        related_name='transfers_from',
        verbose_name=_('From'),
    )
    to_location = models.ForeignKey(
        'stockledger.Location',
        on_delete=models.PROTECT,
        related_name='transfers_to',
        verbose_name=_('To'),
    )
    status = models.CharField(
        max_length=20,
        choices=TransferStatus.choices,
        default=TransferStatus.PENDING,
        db_index=True,
        verbose_name=_('Status'),
    )
    notes = models.TextField(blank=True, default='', verbose_name=_('Notes'))
    actor_id = models.CharField(
        max_length=100,
        verbose_name=_('Requested by'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    completed_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Completed at'),
    )

    class Meta:
        verbose_name = _('Transfer')
        verbose_name_plural = _('Transfers')
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(
                condition=~Q(from_location=F('to_location')),
                name='transfer_distinct_locations',
            ),
        ]

    @property
    def reference(self) -> str:
        """Ledger reference for the moves this transfer produces."""
        return f"transfer:{self.pk}"

    @property
    def is_terminal(self) -> bool:
        return self.status in (TransferStatus.COMPLETED, TransferStatus.CANCELLED)

    def __str__(self) -> str:
        return f"{self.transfer_no or self.pk}: {self.from_location} -> {self.to_location} ({self.status})"


class TransferItem(models.Model):
    """One product line of a transfer."""

    transfer = models.ForeignKey(
        Transfer,
        on_delete=models.CASCADE,
        related_name='items',
    )
    product = models.ForeignKey(
        'stockledger.Product',
        on_delete=models.PROTECT,
        related_name='transfer_items',
        verbose_name=_('Product'),
    )
    batch = models.ForeignKey(
        'stockledger.Batch',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='transfer_items',
        verbose_name=_('Batch'),
    )
    quantity = models.PositiveIntegerField(verbose_name=_('Quantity'))
    cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0'),
        verbose_name=_('Unit cost'),
    )

    class Meta:
        verbose_name = _('Transfer item')
        verbose_name_plural = _('Transfer items')

    def __str__(self) -> str:
        return f"{self.quantity}x {self.product}"
