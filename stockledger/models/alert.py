"""
Alert model — threshold and expiry notifications per product.

Alerts are derived by AlertEvaluator after stock changes:

    from stockledger.services.alerts import AlertEvaluator

    AlertEvaluator().evaluate(product.pk)

At most one active, unresolved alert exists per (product, type). The
evaluator checks before inserting; the conditional unique constraint
below is the storage-level backstop.
"""

from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from stockledger.models.enums import AlertSeverity, AlertType


class AlertQuerySet(models.QuerySet):

    def open(self):
        """Active and not yet resolved."""
        return self.filter(is_active=True, is_resolved=False)

    def for_product(self, product):
        return self.filter(product=product)


class Alert(models.Model):
    """
    Stock alert for a product.

    - resolve(): the condition was handled (is_resolved, no longer active)
    - dismiss(): hidden without being handled (no longer active)

    The evaluator never resolves alerts on its own.
    """

    product = models.ForeignKey(
        'stockledger.Product',
        on_delete=models.CASCADE,
        related_name='alerts',
        verbose_name=_('Product'),
    )
    type = models.CharField(
        max_length=20,
        choices=AlertType.choices,
        verbose_name=_('Type'),
    )
    severity = models.CharField(
        max_length=10,
        choices=AlertSeverity.choices,
        default=AlertSeverity.MEDIUM,
        verbose_name=_('Severity'),
    )
    message = models.CharField(max_length=500, verbose_name=_('Message'))

    is_active = models.BooleanField(default=True, verbose_name=_('Active'))
    is_resolved = models.BooleanField(default=False, verbose_name=_('Resolved'))

    created_at = models.DateTimeField(default=timezone.now, verbose_name=_('Created at'))
    resolved_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Resolved at'))

    objects = AlertQuerySet.as_manager()

    class Meta:
        verbose_name = _('Alert')
        verbose_name_plural = _('Alerts')
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['product', 'type'],
                condition=Q(is_active=True, is_resolved=False),
                name='unique_open_alert_per_product_type',
            ),
        ]
        indexes = [
            models.Index(
                fields=['product', 'type', 'is_active', 'is_resolved'],
                name='alert_open_lookup_idx',
            ),
        ]

    @property
    def is_open(self) -> bool:
        return self.is_active and not self.is_resolved

    def __str__(self) -> str:
        return f"[{self.severity}] {self.type}: {self.message}"
