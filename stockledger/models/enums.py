"""
Enums for Stockledger models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class CellStatus(models.TextChoices):
    """
    Derived status of a stock cell.

    Recomputed from quantity and Product.min_stock on every write,
    never authoritative.
    """
    IN_STOCK = 'IN_STOCK', _('In stock')
    LOW_STOCK = 'LOW_STOCK', _('Low stock')
    OUT_OF_STOCK = 'OUT_OF_STOCK', _('Out of stock')


class LogType(models.TextChoices):
    """Kind of ledger entry."""
    IN = 'in', _('In')
    OUT = 'out', _('Out')
    ADJUSTMENT = 'adjustment', _('Adjustment')


class TransferStatus(models.TextChoices):
    """Transfer lifecycle status."""
    PENDING = 'PENDING', _('Pending')           # Created, awaiting approval
    IN_TRANSIT = 'IN_TRANSIT', _('In transit')  # Approved, stock not moved yet
    COMPLETED = 'COMPLETED', _('Completed')     # Stock moved (terminal)
    CANCELLED = 'CANCELLED', _('Cancelled')     # Terminal


class AlertType(models.TextChoices):
    LOW_STOCK = 'LOW_STOCK', _('Low stock')
    EXPIRY = 'EXPIRY', _('Expiry')
    REORDER = 'REORDER', _('Reorder')


class AlertSeverity(models.TextChoices):
    LOW = 'low', _('Low')
    MEDIUM = 'medium', _('Medium')
    HIGH = 'high', _('High')
