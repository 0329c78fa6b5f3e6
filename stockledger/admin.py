"""
Stockledger Admin.

Provides views for operations and debugging:
- Location, Product, Batch: list + edit
- StockCell: read-only (stock only changes via the ledger)
- StockLog: read-only audit trail
- Transfer: read-only with approve/complete/cancel actions
- Sale: read-only
- Alert: read-only with resolve/dismiss actions
"""

import logging

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from stockledger.exceptions import StockError
from stockledger.models import (
    Alert,
    Batch,
    Location,
    Product,
    Sale,
    SaleItem,
    StockCell,
    StockLog,
    Transfer,
    TransferItem,
)

logger = logging.getLogger(__name__)


class ReadOnlyAdminMixin:
    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# =========================================================================
# MASTER DATA
# =========================================================================

@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ['name', 'address', 'is_active']
    list_filter = ['is_active']
    search_fields = ['name', 'address']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['sku', 'name', 'price', 'min_stock', 'max_stock',
                    'track_batch', 'track_expiry', 'is_active']
    list_filter = ['track_batch', 'track_expiry', 'is_active']
    search_fields = ['sku', 'name']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(Batch)
class BatchAdmin(admin.ModelAdmin):
    list_display = ['batch_number', 'product', 'quantity', 'expiry_date', 'expired_display']
    list_filter = ['expiry_date']
    search_fields = ['batch_number', 'product__name', 'product__sku']
    readonly_fields = ['created_at', 'updated_at']
    date_hierarchy = 'expiry_date'

    @admin.display(description=_('Expired?'), boolean=True)
    def expired_display(self, obj):
        return obj.is_expired


# =========================================================================
# STOCK (read-only)
# =========================================================================

@admin.register(StockCell)
class StockCellAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    """Read-only. Stock only changes through the ledger."""

    list_display = ['product', 'location', 'batch', 'quantity', 'reserved',
                    'available', 'status', 'last_updated']
    list_filter = ['status', 'location']
    search_fields = ['product__name', 'product__sku']
    ordering = ['product', 'location', 'created_at']


@admin.register(StockLog)
class StockLogAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    """Log admin — read-only. Immutable audit trail."""

    list_display = ['timestamp', 'product', 'location_id', 'batch_id',
                    'quantity', 'type', 'reference', 'actor_id']
    list_filter = ['type', 'timestamp']
    search_fields = ['reference', 'notes', 'actor_id']
    date_hierarchy = 'timestamp'


# =========================================================================
# TRANSFERS
# =========================================================================

class TransferItemInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = TransferItem
    extra = 0


@admin.register(Transfer)
class TransferAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ['transfer_no', 'from_location', 'to_location', 'status',
                    'created_at', 'completed_at']
    list_filter = ['status', 'from_location', 'to_location']
    search_fields = ['transfer_no', 'notes']
    inlines = [TransferItemInline]
    actions = ['approve_transfers', 'complete_transfers', 'cancel_transfers']

    def _perform(self, request, queryset, action):
        from stockledger import ledger

        actor_id = str(request.user.pk)
        count = 0
        for transfer in queryset:
            try:
                ledger.transfer(transfer.pk, action, actor_id)
                count += 1
            except StockError as exc:
                logger.warning("transfer %s: %s failed: %s", transfer.pk, action, exc)
        self.message_user(request, _('{count} transfer(s) updated.').format(count=count))

    @admin.action(description=_('Approve selected transfers'))
    def approve_transfers(self, request, queryset):
        self._perform(request, queryset, 'approve')

    @admin.action(description=_('Complete selected transfers'))
    def complete_transfers(self, request, queryset):
        self._perform(request, queryset, 'complete')

    @admin.action(description=_('Cancel selected transfers'))
    def cancel_transfers(self, request, queryset):
        self._perform(request, queryset, 'cancel')


# =========================================================================
# SALES
# =========================================================================

class SaleItemInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = SaleItem
    extra = 0


@admin.register(Sale)
class SaleAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ['invoice_no', 'location', 'customer_name', 'final_amount',
                    'actor_id', 'created_at']
    list_filter = ['location']
    search_fields = ['invoice_no', 'customer_name']
    date_hierarchy = 'created_at'
    inlines = [SaleItemInline]


# =========================================================================
# ALERTS
# =========================================================================

@admin.register(Alert)
class AlertAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ['product', 'type', 'severity', 'message', 'is_active',
                    'is_resolved', 'created_at']
    list_filter = ['type', 'severity', 'is_active', 'is_resolved']
    search_fields = ['product__name', 'message']
    actions = ['resolve_alerts', 'dismiss_alerts']

    @admin.action(description=_('Resolve selected alerts'))
    def resolve_alerts(self, request, queryset):
        from stockledger import ledger

        count = 0
        for alert in queryset.open():
            ledger.resolve_alert(alert.pk)
            count += 1
        self.message_user(request, _('{count} alert(s) resolved.').format(count=count))

    @admin.action(description=_('Dismiss selected alerts'))
    def dismiss_alerts(self, request, queryset):
        from stockledger import ledger

        count = 0
        for alert in queryset.filter(is_active=True):
            ledger.dismiss_alert(alert.pk)
            count += 1
        self.message_user(request, _('{count} alert(s) dismissed.').format(count=count))
