"""
Product model — thresholds and tracking flags consumed by the ledger.
"""

from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _


class Product(models.Model):
    """
    Sellable item.

    Only the fields the stock core needs live here:
    - min_stock: at or below this total, the product is LOW_STOCK
    - max_stock: optional ceiling, used for the reorder point
    - track_batch: allocation honours an explicit batch
    - track_expiry: batches of this product raise EXPIRY alerts
    """

    sku = models.CharField(
        max_length=64,
        unique=True,
        verbose_name=_('SKU'),
    )
    name = models.CharField(
        max_length=200,
        verbose_name=_('Name'),
    )
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0'),
        verbose_name=_('Price'),
    )
    cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0'),
        verbose_name=_('Cost'),
    )
    min_stock = models.PositiveIntegerField(
        default=0,
        verbose_name=_('Minimum stock'),
    )
    max_stock = models.PositiveIntegerField(
        null=True,
        blank=True,
        verbose_name=_('Maximum stock'),
    )
    track_batch = models.BooleanField(default=False, verbose_name=_('Track batches'))
    track_expiry = models.BooleanField(default=False, verbose_name=_('Track expiry'))
    is_active = models.BooleanField(default=True, verbose_name=_('Active'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Product')
        verbose_name_plural = _('Products')
        ordering = ['name']

    def __str__(self) -> str:
        return f"{self.name} ({self.sku})"
