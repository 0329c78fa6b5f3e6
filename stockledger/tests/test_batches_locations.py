"""
Tests for batch and location maintenance.
"""

from datetime import date, timedelta

import pytest

from stockledger.exceptions import DuplicateError, NotFoundError, ReferencedError
from stockledger.models import Alert, AlertType, Batch, Location
from stockledger.protocols import CellKey


pytestmark = pytest.mark.django_db


class TestBatches:

    def test_create(self, ledger, tracked_product):
        batch = ledger.create_batch({
            'product_id': tracked_product.pk,
            'batch_number': 'LOT-9',
            'quantity': '24',
            'cost': '1.15',
            'expiry_date': (date.today() + timedelta(days=200)).isoformat(),
        })

        assert batch.batch_number == 'LOT-9'
        assert batch.quantity == 24
        assert not Alert.objects.exists()

    def test_create_near_expiry_raises_alert(self, ledger, tracked_product):
        ledger.create_batch({
            'product_id': tracked_product.pk,
            'batch_number': 'LOT-10',
            'quantity': 5,
            'cost': '1',
            'expiry_date': (date.today() + timedelta(days=3)).isoformat(),
        })

        assert Alert.objects.open().filter(type=AlertType.EXPIRY).count() == 1

    def test_duplicate_number(self, ledger, batch_a, tracked_product):
        with pytest.raises(DuplicateError):
            ledger.create_batch({
                'product_id': tracked_product.pk,
                'batch_number': 'LOT-A',
                'quantity': 1,
                'cost': '1',
            })

    def test_same_number_other_product(self, ledger, batch_a, product):
        batch = ledger.create_batch({
            'product_id': product.pk,
            'batch_number': 'LOT-A',
            'quantity': 1,
            'cost': '1',
        })

        assert batch.product_id == product.pk

    def test_unknown_product(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.create_batch({'product_id': 9999, 'batch_number': 'X', 'quantity': 1, 'cost': '1'})

    def test_update_partial(self, ledger, batch_a):
        batch = ledger.update_batch(batch_a.pk, {'notes': 'recount', 'quantity': 0})

        assert batch.notes == 'recount'
        assert batch.quantity == 0
        assert batch.batch_number == 'LOT-A'

    def test_update_duplicate_number(self, ledger, batch_a, batch_b):
        with pytest.raises(DuplicateError):
            ledger.update_batch(batch_b.pk, {'batch_number': 'LOT-A'})

    def test_update_expiry_checks_alert(self, ledger, batch_a):
        ledger.update_batch(batch_a.pk, {'expiry_date': date.today().isoformat()})

        assert Alert.objects.open().filter(type=AlertType.EXPIRY).count() == 1

    def test_update_missing(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.update_batch(9999, {'notes': 'x'})

    def test_delete_unreferenced(self, ledger, batch_a):
        ledger.delete_batch(batch_a.pk)

        assert not Batch.objects.filter(pk=batch_a.pk).exists()

    def test_delete_with_cell_refused(self, ledger, tracked_product, store, batch_a, actor):
        ledger.create_cell(CellKey(tracked_product.pk, store.pk, batch_a.pk), 1, actor)

        with pytest.raises(ReferencedError) as exc:
            ledger.delete_batch(batch_a.pk)

        assert exc.value.code == 'IN_USE'

    def test_delete_with_transfer_item_refused(self, ledger, tracked_product, store, warehouse,
                                               batch_a, actor):
        ledger.create_transfer({
            'from_location_id': store.pk,
            'to_location_id': warehouse.pk,
            'items': [{'product_id': tracked_product.pk, 'quantity': 1, 'batch_id': batch_a.pk}],
        }, actor)

        with pytest.raises(ReferencedError):
            ledger.delete_batch(batch_a.pk)


class TestLocations:

    def test_create(self, ledger):
        location = ledger.create_location({'name': ' Backroom ', 'address': 'Rear'})

        assert location.name == 'Backroom'

    def test_duplicate_name(self, ledger, store):
        with pytest.raises(DuplicateError):
            ledger.create_location({'name': 'Main Store'})

    def test_update(self, ledger, store):
        location = ledger.update_location(store.pk, {'name': 'Flagship', 'description': 'HQ'})

        assert location.name == 'Flagship'
        assert Location.objects.get(pk=store.pk).description == 'HQ'

    def test_update_keeps_own_name(self, ledger, store):
        ledger.update_location(store.pk, {'name': 'Main Store', 'address': 'New'})

        assert Location.objects.get(pk=store.pk).address == 'New'

    def test_update_to_taken_name(self, ledger, store, warehouse):
        with pytest.raises(DuplicateError):
            ledger.update_location(warehouse.pk, {'name': 'Main Store'})

    def test_delete(self, ledger, warehouse):
        ledger.delete_location(warehouse.pk)

        assert not Location.objects.filter(pk=warehouse.pk).exists()

    def test_delete_with_stock_refused(self, ledger, stocked, store):
        with pytest.raises(ReferencedError):
            ledger.delete_location(store.pk)

    def test_delete_with_transfer_refused(self, ledger, store, warehouse, product, actor):
        ledger.create_transfer({
            'from_location_id': store.pk,
            'to_location_id': warehouse.pk,
            'items': [{'product_id': product.pk, 'quantity': 1}],
        }, actor)

        with pytest.raises(ReferencedError):
            ledger.delete_location(warehouse.pk)

    def test_delete_missing(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.delete_location(9999)
