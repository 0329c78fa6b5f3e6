"""
Tests for AlertEvaluator.
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.core.management import call_command
from django.db import IntegrityError, transaction

from stockledger.exceptions import NotFoundError
from stockledger.models import Alert, AlertSeverity, AlertType, Batch
from stockledger.protocols import CellKey
from stockledger.services.alerts import AlertEvaluator, AlertPolicyConfig


pytestmark = pytest.mark.django_db


def open_alerts(product, alert_type):
    return Alert.objects.open().filter(product=product, type=alert_type)


class TestLowStock:
    """LOW_STOCK from the product-wide total."""

    def test_out_of_stock_is_high(self, ledger, stocked, product, actor):
        ledger.apply_delta(stocked, -20, 'out', actor)

        alert = open_alerts(product, AlertType.LOW_STOCK).get()
        assert alert.severity == AlertSeverity.HIGH
        assert alert.message == 'Out of stock alert: Widget is out of stock'

    def test_low_stock_is_medium(self, ledger, stocked, product, actor):
        ledger.apply_delta(stocked, -16, 'out', actor)

        alert = open_alerts(product, AlertType.LOW_STOCK).get()
        assert alert.severity == AlertSeverity.MEDIUM
        assert alert.message == 'Low stock alert: Widget (4 remaining, min: 5)'

    def test_total_spans_locations(self, ledger, stocked, product, warehouse, actor):
        """Low at one location but fine overall: no alert."""
        ledger.create_cell(CellKey(product.pk, warehouse.pk), 30, actor)
        ledger.apply_delta(stocked, -18, 'out', actor)

        assert not open_alerts(product, AlertType.LOW_STOCK).exists()

    def test_never_duplicated(self, ledger, stocked, product, actor):
        for _ in range(3):
            ledger.apply_delta(stocked, -5, 'out', actor)
        ledger.alerts.evaluate(product.pk)

        assert open_alerts(product, AlertType.LOW_STOCK).count() == 1

    def test_never_auto_resolved(self, ledger, stocked, product, actor):
        ledger.apply_delta(stocked, -20, 'out', actor)
        ledger.apply_delta(stocked, 50, 'in', actor)

        assert open_alerts(product, AlertType.LOW_STOCK).count() == 1

    def test_new_alert_after_resolve(self, ledger, stocked, product, actor):
        ledger.apply_delta(stocked, -20, 'out', actor)
        ledger.resolve_alert(open_alerts(product, AlertType.LOW_STOCK).get().pk)

        ledger.alerts.evaluate(product.pk)

        assert Alert.objects.filter(product=product, type=AlertType.LOW_STOCK).count() == 2
        assert open_alerts(product, AlertType.LOW_STOCK).count() == 1

    def test_disabled_by_policy(self, stocked, product):
        evaluator = AlertEvaluator(policy=AlertPolicyConfig(low_stock_enabled=False))
        product.min_stock = 100
        product.save()

        assert evaluator.evaluate(product.pk) == []

    def test_unknown_product(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.alerts.evaluate(9999)

    def test_storage_guard(self, product):
        """The database refuses a second open alert of the same type."""
        Alert.objects.create(product=product, type=AlertType.LOW_STOCK, message='a')

        with pytest.raises(IntegrityError), transaction.atomic():
            Alert.objects.create(product=product, type=AlertType.LOW_STOCK, message='b')


class TestReorder:
    """REORDER when total <= max_stock * ratio."""

    def test_reorder_medium(self, ledger, tracked_product, store, actor):
        ledger.create_cell(CellKey(tracked_product.pk, store.pk), 20, actor)

        alert = open_alerts(tracked_product, AlertType.REORDER).get()
        assert alert.severity == AlertSeverity.MEDIUM
        assert '(20 remaining, reorder at 20)' in alert.message

    def test_reorder_high_at_min(self, ledger, tracked_product, store, actor):
        ledger.create_cell(CellKey(tracked_product.pk, store.pk), 2, actor)

        assert open_alerts(tracked_product, AlertType.REORDER).get().severity == AlertSeverity.HIGH

    def test_no_reorder_above_point(self, ledger, tracked_product, store, actor):
        ledger.create_cell(CellKey(tracked_product.pk, store.pk), 21, actor)

        assert not open_alerts(tracked_product, AlertType.REORDER).exists()

    def test_no_reorder_without_max(self, ledger, stocked, product, actor):
        ledger.apply_delta(stocked, -20, 'out', actor)

        assert not open_alerts(product, AlertType.REORDER).exists()


class TestExpiry:
    """EXPIRY per batch inside the warning window."""

    def make_batch(self, product, days, number='LOT-X'):
        return Batch.objects.create(
            product=product,
            batch_number=number,
            quantity=1,
            cost=Decimal('1'),
            expiry_date=date.today() + timedelta(days=days),
        )

    def test_inside_window_is_medium(self, ledger, tracked_product):
        batch = self.make_batch(tracked_product, 10)

        alert = ledger.alerts.evaluate_expiry(batch)

        assert alert.severity == AlertSeverity.MEDIUM
        assert alert.message.startswith('Expiry alert: Milk will expire on ')

    def test_past_is_high(self, ledger, tracked_product):
        batch = self.make_batch(tracked_product, -1)

        alert = ledger.alerts.evaluate_expiry(batch)

        assert alert.severity == AlertSeverity.HIGH
        assert alert.message.startswith('Expired batch alert: Milk has expired on ')

    def test_outside_window(self, ledger, tracked_product):
        batch = self.make_batch(tracked_product, 31)

        assert ledger.alerts.evaluate_expiry(batch) is None

    def test_window_is_configurable(self, tracked_product):
        batch = self.make_batch(tracked_product, 45)
        evaluator = AlertEvaluator(policy=AlertPolicyConfig(expiry_warning_days=60))

        assert evaluator.evaluate_expiry(batch) is not None

    def test_untracked_product_skipped(self, ledger, product):
        batch = self.make_batch(product, 5)

        assert ledger.alerts.evaluate_expiry(batch) is None

    def test_deduplicated_across_batches(self, ledger, tracked_product):
        ledger.alerts.evaluate_expiry(self.make_batch(tracked_product, 5, 'LOT-1'))
        ledger.alerts.evaluate_expiry(self.make_batch(tracked_product, 3, 'LOT-2'))

        assert open_alerts(tracked_product, AlertType.EXPIRY).count() == 1

    def test_scan(self, ledger, tracked_product, batch_a):
        self.make_batch(tracked_product, 7)

        created = ledger.check_expiring_batches()

        assert len(created) == 1
        assert created[0].type == AlertType.EXPIRY

    def test_command_dry_run(self, tracked_product, capsys):
        self.make_batch(tracked_product, 7)

        call_command('check_expiring_batches', '--dry-run')

        assert '1 batch(es) would be checked' in capsys.readouterr().out
        assert not Alert.objects.exists()

    def test_command(self, tracked_product, capsys):
        self.make_batch(tracked_product, 7)

        call_command('check_expiring_batches')

        assert '1 expiry alert(s) created' in capsys.readouterr().out
        assert open_alerts(tracked_product, AlertType.EXPIRY).count() == 1


class TestResolveDismiss:
    """Explicit alert handling."""

    @pytest.fixture
    def alert(self, product):
        return Alert.objects.create(product=product, type=AlertType.LOW_STOCK, message='low')

    def test_resolve(self, ledger, alert):
        alert = ledger.resolve_alert(alert.pk)

        assert alert.is_resolved
        assert not alert.is_active
        assert alert.resolved_at is not None

    def test_dismiss(self, ledger, alert):
        alert = ledger.dismiss_alert(alert.pk)

        assert not alert.is_active
        assert not alert.is_resolved
        assert alert.resolved_at is None

    def test_missing(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.resolve_alert(9999)
