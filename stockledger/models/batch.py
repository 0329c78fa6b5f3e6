"""
Batch model — lot traceability for products with expiry.

Batch-level tracking is needed for:
- Products with shelf life (food, pharmaceuticals, cosmetics)
- Cost per lot
- Recall management (find all stock from a specific batch)
- FIFO depletion across lots

Usage:
    batch = Batch.objects.create(
        product=product,
        batch_number="LOT-2026-0223-A",
        quantity=50,
        cost=Decimal('3.20'),
        expiry_date=date.today() + timedelta(days=90),
    )

    ledger.create_cell(CellKey(product.pk, store.pk, batch.pk), 50, ...)
"""

from datetime import date, timedelta
from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _


class BatchQuerySet(models.QuerySet):
    """Custom QuerySet for Batch with convenience filters."""

    def active(self):
        """Batches with remaining stock (at least one non-empty cell)."""
        return self.filter(cells__quantity__gt=0).distinct()

    def expiring_before(self, day: date):
        """Batches expiring on or before the given date."""
        return self.filter(expiry_date__lte=day, expiry_date__isnull=False)

    def expiring_within(self, days: int):
        """Batches expiring within the next `days` days (expired included)."""
        return self.expiring_before(date.today() + timedelta(days=days))

    def expired(self):
        """Batches past their expiry date."""
        return self.filter(expiry_date__lt=date.today())

    def for_product(self, product):
        return self.filter(product=product)


class Batch(models.Model):
    """
    Production or purchase lot of a product.

    batch_number is unique per product. A batch can only be deleted
    when no stock cell, sale item or transfer item references it.
    """

    product = models.ForeignKey(
        'stockledger.Product',
        on_delete=models.PROTECT,
        related_name='batches',
        verbose_name=_('Product'),
    )
    batch_number = models.CharField(
        max_length=50,
        verbose_name=_('Batch number'),
    )

    # Quantity received at creation (informative, stock lives in cells)
    quantity = models.PositiveIntegerField(
        default=0,
        verbose_name=_('Initial quantity'),
    )
    cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0'),
        verbose_name=_('Unit cost'),
    )

    manufacturing_date = models.DateField(
        null=True,
        blank=True,
        verbose_name=_('Manufacturing date'),
    )
    expiry_date = models.DateField(
        null=True,
        blank=True,
        db_index=True,
        verbose_name=_('Expiry date'),
        help_text=_('Last day the batch can be sold or used'),
    )

    notes = models.TextField(
        blank=True,
        default='',
        verbose_name=_('Notes'),
    )

    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_('Created at'))
    updated_at = models.DateTimeField(auto_now=True)

    objects = BatchQuerySet.as_manager()

    class Meta:
        verbose_name = _('Batch')
        verbose_name_plural = _('Batches')
        ordering = ['expiry_date', 'created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['product', 'batch_number'],
                name='unique_batch_number_per_product',
            ),
        ]

    @property
    def is_expired(self) -> bool:
        """Is this batch past its expiry date?"""
        if self.expiry_date is None:
            return False
        return date.today() > self.expiry_date

    def __str__(self) -> str:
        expiry = f" (exp:{self.expiry_date})" if self.expiry_date else ""
        return f"Batch {self.batch_number}{expiry}"
