"""
Sale model — point-of-sale transactions that consume stock.
"""

from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _


class Sale(models.Model):
    """
    A sale at one location.

    Creating a sale allocates every item FIFO at the sale location
    (see stockledger.services.sales.record_sale).
    """

    invoice_no = models.CharField(
        max_length=30,
        unique=True,
        null=True,
        blank=True,
        verbose_name=_('Invoice number'),
    )
    location = models.ForeignKey(
        'stockledger.Location',
        on_delete=models.PROTECT,
        related_name='sales',
        verbose_name=_('Location'),
    )
    customer_name = models.CharField(max_length=200, blank=True, default='', verbose_name=_('Customer'))
    notes = models.TextField(blank=True, default='', verbose_name=_('Notes'))

    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    tax = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    final_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))

    actor_id = models.CharField(max_length=100, verbose_name=_('Cashier'))
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _('Sale')
        verbose_name_plural = _('Sales')
        ordering = ['-created_at']

    @property
    def reference(self) -> str:
        return f"sale:{self.pk}"

    def __str__(self) -> str:
        return self.invoice_no or f"Sale {self.pk}"


class SaleItem(models.Model):
    """One product line of a sale."""

    sale = models.ForeignKey(
        Sale,
        on_delete=models.CASCADE,
        related_name='items',
    )
    product = models.ForeignKey(
        'stockledger.Product',
        on_delete=models.PROTECT,
        related_name='sale_items',
    )
    batch = models.ForeignKey(
        'stockledger.Batch',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='sale_items',
    )
    quantity = models.PositiveIntegerField(verbose_name=_('Quantity'))
    price = models.DecimalField(max_digits=12, decimal_places=2, verbose_name=_('Unit price'))
    discount = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0'),
        verbose_name=_('Discount (%)'),
    )
    total = models.DecimalField(max_digits=12, decimal_places=2, verbose_name=_('Total'))

    class Meta:
        verbose_name = _('Sale item')
        verbose_name_plural = _('Sale items')

    def __str__(self) -> str:
        return f"{self.quantity}x {self.product} @ {self.price}"
