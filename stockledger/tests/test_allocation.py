"""
Tests for AllocationEngine (FIFO, all-or-nothing).
"""

import pytest

from stockledger.exceptions import InsufficientStockError, NotFoundError, ValidationError
from stockledger.models import StockCell, StockLog
from stockledger.protocols import CellKey


pytestmark = pytest.mark.django_db


@pytest.fixture
def two_batches(ledger, tracked_product, store, batch_a, batch_b, actor):
    """LOT-A (older, 8 units) and LOT-B (newer, 6 units) at store."""
    key_a = CellKey(tracked_product.pk, store.pk, batch_a.pk)
    key_b = CellKey(tracked_product.pk, store.pk, batch_b.pk)
    ledger.create_cell(key_a, 8, actor)
    ledger.create_cell(key_b, 6, actor)
    return key_a, key_b


def quantity(key):
    return StockCell.objects.get(
        product_id=key.product_id, location_id=key.location_id, batch_id=key.batch_id,
    ).quantity


class TestFifo:
    """Oldest cell is depleted first."""

    def test_within_first_batch(self, ledger, tracked_product, store, two_batches, actor):
        key_a, key_b = two_batches

        result = ledger.allocate(tracked_product.pk, store.pk, 5, 'sale:1', actor)

        assert [(a.key, a.quantity) for a in result] == [(key_a, 5)]
        assert quantity(key_a) == 3
        assert quantity(key_b) == 6

    def test_spills_into_next_batch(self, ledger, tracked_product, store, two_batches, actor):
        key_a, key_b = two_batches

        result = ledger.allocate(tracked_product.pk, store.pk, 11, 'sale:2', actor)

        assert [(a.key, a.quantity) for a in result] == [(key_a, 8), (key_b, 3)]
        assert quantity(key_a) == 0
        assert quantity(key_b) == 3

    def test_never_deducts_more_than_requested(self, ledger, tracked_product, store, two_batches, actor):
        result = ledger.allocate(tracked_product.pk, store.pk, 9, 'sale:3', actor)

        assert sum(a.quantity for a in result) == 9
        assert sum(StockCell.objects.filter(product=tracked_product).values_list('quantity', flat=True)) == 5

    def test_each_deduction_is_logged_as_out(self, ledger, tracked_product, store, two_batches, actor):
        ledger.allocate(tracked_product.pk, store.pk, 11, 'transfer:7', actor)

        outs = StockLog.objects.filter(type='out', reference='transfer:7').order_by('pk')
        assert [e.quantity for e in outs] == [-8, -3]

    def test_explicit_batch_for_tracked_product(self, ledger, tracked_product, store, two_batches, actor):
        key_a, key_b = two_batches

        ledger.allocate(tracked_product.pk, store.pk, 4, 'sale:4', actor, batch_id=key_b.batch_id)

        assert quantity(key_a) == 8
        assert quantity(key_b) == 2

    def test_batch_ignored_for_untracked_product(self, ledger, product, store, batch_a, actor):
        """Without track_batch the batch hint does not filter candidates."""
        key = CellKey(product.pk, store.pk)
        ledger.create_cell(key, 10, actor)

        ledger.allocate(product.pk, store.pk, 3, 'sale:5', actor, batch_id=batch_a.pk)

        assert quantity(key) == 7

    def test_other_location_untouched(self, ledger, product, store, warehouse, actor):
        ledger.create_cell(CellKey(product.pk, warehouse.pk), 50, actor)
        ledger.create_cell(CellKey(product.pk, store.pk), 10, actor)

        ledger.allocate(product.pk, store.pk, 10, 'sale:6', actor)

        assert quantity(CellKey(product.pk, warehouse.pk)) == 50

    def test_reserved_units_are_skipped(self, ledger, tracked_product, store, two_batches, actor):
        key_a, key_b = two_batches
        StockCell.objects.filter(batch_id=key_a.batch_id).update(reserved=8, available=0)

        result = ledger.allocate(tracked_product.pk, store.pk, 2, 'sale:8', actor)

        assert [(a.key, a.quantity) for a in result] == [(key_b, 2)]


class TestAllOrNothing:
    """Insufficient stock mutates nothing."""

    def test_insufficient(self, ledger, tracked_product, store, two_batches, actor):
        key_a, key_b = two_batches
        logs_before = StockLog.objects.count()

        with pytest.raises(InsufficientStockError) as exc:
            ledger.allocate(tracked_product.pk, store.pk, 15, 'sale:9', actor)

        assert 'Milk' in exc.value.message
        assert exc.value.available == 14
        assert exc.value.requested == 15
        assert quantity(key_a) == 8
        assert quantity(key_b) == 6
        assert StockLog.objects.count() == logs_before

    def test_no_cells(self, ledger, product, store, actor):
        with pytest.raises(InsufficientStockError):
            ledger.allocate(product.pk, store.pk, 1, 'sale:10', actor)

    def test_unknown_product(self, ledger, store, actor):
        with pytest.raises(NotFoundError):
            ledger.allocate(9999, store.pk, 1, 'sale:11', actor)

    @pytest.mark.parametrize('qty', [0, -2, True])
    def test_invalid_quantity(self, ledger, product, store, actor, qty):
        with pytest.raises(ValidationError):
            ledger.allocate(product.pk, store.pk, qty, 'sale:12', actor)


class TestPlan:
    """plan() computes without writing."""

    def test_plan_is_read_only(self, ledger, tracked_product, store, two_batches, actor):
        key_a, key_b = two_batches

        plan = ledger.allocation.plan(tracked_product.pk, store.pk, 10)

        assert [(a.key, a.quantity) for a in plan] == [(key_a, 8), (key_b, 2)]
        assert quantity(key_a) == 8
