"""
Tests for record_sale().
"""

from decimal import Decimal

import pytest

from stockledger.exceptions import InsufficientStockError, NotFoundError, ValidationError
from stockledger.models import Alert, AlertType, Sale, StockCell, StockLog
from stockledger.protocols import CellKey


pytestmark = pytest.mark.django_db


def sale_data(location, *items, **extra):
    return {'location_id': location.pk, 'items': list(items), **extra}


class TestRecordSale:

    def test_deducts_and_records(self, ledger, stocked, product, store, actor):
        sale = ledger.record_sale(sale_data(
            store,
            {'product_id': product.pk, 'quantity': 3, 'price': '10.00', 'discount': '10'},
            tax='1.50',
            discount='2.00',
            customer_name='Ada',
        ), actor)

        assert sale.invoice_no == f'INV-{sale.pk:06d}'
        assert sale.total_amount == Decimal('27.00')
        assert sale.final_amount == Decimal('26.50')
        assert sale.items.get().total == Decimal('27.00')
        assert StockCell.objects.get().quantity == 17

        entry = StockLog.objects.get(reference=f'sale:{sale.pk}')
        assert (entry.type, entry.quantity, entry.actor_id) == ('out', -3, actor)

    def test_fifo_across_batches(self, ledger, tracked_product, store, batch_a, batch_b, actor):
        ledger.create_cell(CellKey(tracked_product.pk, store.pk, batch_a.pk), 2, actor)
        ledger.create_cell(CellKey(tracked_product.pk, store.pk, batch_b.pk), 5, actor)

        ledger.record_sale(sale_data(
            store, {'product_id': tracked_product.pk, 'quantity': 4, 'price': '2.50'},
        ), actor)

        remaining = dict(StockCell.objects.values_list('batch_id', 'quantity'))
        assert remaining == {batch_a.pk: 0, batch_b.pk: 3}

    def test_insufficient_leaves_nothing(self, ledger, stocked, product, tracked_product, store, actor):
        with pytest.raises(InsufficientStockError):
            ledger.record_sale(sale_data(
                store,
                {'product_id': product.pk, 'quantity': 5, 'price': '10'},
                {'product_id': tracked_product.pk, 'quantity': 1, 'price': '2.50'},
            ), actor)

        assert not Sale.objects.exists()
        assert StockCell.objects.get().quantity == 20
        assert StockLog.objects.count() == 1

    def test_deducts_in_product_order(self, ledger, stocked, product, tracked_product, store, actor):
        """Cells are locked by product, whatever the item order."""
        ledger.create_cell(CellKey(tracked_product.pk, store.pk), 10, actor)
        first, second = sorted([product, tracked_product], key=lambda p: p.pk)

        sale = ledger.record_sale(sale_data(
            store,
            {'product_id': second.pk, 'quantity': 1, 'price': '1'},
            {'product_id': first.pk, 'quantity': 1, 'price': '1'},
        ), actor)

        entries = StockLog.objects.filter(reference=sale.reference).order_by('pk')
        assert [e.product_id for e in entries] == [first.pk, second.pk]
        assert [i.product_id for i in sale.items.order_by('pk')] == [second.pk, first.pk]

    def test_oversized_price_rejected(self, ledger, stocked, product, store, actor):
        with pytest.raises(ValidationError) as exc:
            ledger.record_sale(sale_data(
                store, {'product_id': product.pk, 'quantity': 1, 'price': '1e30'},
            ), actor)

        assert exc.value.field == 'price'
        assert not Sale.objects.exists()

    def test_triggers_alerts(self, ledger, stocked, product, store, actor):
        ledger.record_sale(sale_data(
            store, {'product_id': product.pk, 'quantity': 20, 'price': '10'},
        ), actor)

        assert Alert.objects.open().filter(product=product, type=AlertType.LOW_STOCK).count() == 1

    def test_unknown_location(self, ledger, product, actor):
        with pytest.raises(NotFoundError):
            ledger.record_sale({'location_id': 9999, 'items': [
                {'product_id': product.pk, 'quantity': 1, 'price': '1'},
            ]}, actor)

    def test_requires_items(self, ledger, store, actor):
        with pytest.raises(ValidationError) as exc:
            ledger.record_sale(sale_data(store), actor)

        assert exc.value.field == 'items'

    def test_requires_actor(self, ledger, stocked, product, store):
        with pytest.raises(ValidationError):
            ledger.record_sale(sale_data(
                store, {'product_id': product.pk, 'quantity': 1, 'price': '1'},
            ), '')
