"""
Tests for the repository loader, the ORM repository and read queries.
"""

import pytest
from django.core.exceptions import ImproperlyConfigured
from django.test import override_settings

from stockledger.adapters import get_repository, reset_repository
from stockledger.adapters.orm import DjangoStockRepository
from stockledger.exceptions import NotFoundError
from stockledger.models import Transfer, TransferStatus
from stockledger.protocols import CellKey, StockRepository
from stockledger.services.queries import StockQueries


pytestmark = pytest.mark.django_db


class TestLoader:

    def test_default_repository(self):
        repository = get_repository()

        assert isinstance(repository, DjangoStockRepository)
        assert isinstance(repository, StockRepository)
        assert get_repository() is repository

    @override_settings(STOCKLEDGER={'REPOSITORY': 'stockledger.nowhere.Repository'})
    def test_bad_path(self):
        reset_repository()

        with pytest.raises(ImproperlyConfigured):
            get_repository()

    def test_reset_rebuilds_module_ledger(self):
        """Settings changed after first use reach the module-level ledger."""
        import stockledger

        first = stockledger.ledger
        assert first.alerts.policy.expiry_warning_days == 30

        with override_settings(STOCKLEDGER={'EXPIRY_WARNING_DAYS': 60}):
            reset_repository()
            rebuilt = stockledger.ledger

        assert rebuilt is not first
        assert rebuilt.alerts.policy.expiry_warning_days == 60

    @override_settings(STOCKLEDGER={'REPOSITORY': ''})
    def test_empty_path(self):
        reset_repository()

        with pytest.raises(ImproperlyConfigured):
            get_repository()


class TestOrmRepository:

    def test_list_cells_oldest_first(self, ledger, product, store, warehouse, actor):
        ledger.create_cell(CellKey(product.pk, warehouse.pk), 1, actor)
        ledger.create_cell(CellKey(product.pk, store.pk), 1, actor)

        cells = DjangoStockRepository().list_cells(product.pk)

        assert [c.location_id for c in cells] == [warehouse.pk, store.pk]

    def test_get_cell_matches_null_batch(self, stocked):
        cell = DjangoStockRepository().get_cell(stocked)

        assert cell.batch_id is None
        assert cell.key == stocked

    def test_run_in_transaction(self, stocked):
        repository = DjangoStockRepository()

        assert repository.run_in_transaction(lambda: repository.total_quantity(stocked.product_id)) == 20

    def test_update_transfer(self, store, warehouse):
        transfer = Transfer.objects.create(from_location=store, to_location=warehouse, actor_id='u')

        updated = DjangoStockRepository().update_transfer(transfer.pk, status=TransferStatus.CANCELLED)

        assert updated.status == TransferStatus.CANCELLED
        assert Transfer.objects.get(pk=transfer.pk).status == TransferStatus.CANCELLED


class TestQueries:

    def test_get_cell(self, stocked):
        assert StockQueries.get_cell(stocked).quantity == 20

    def test_get_cell_missing(self, product, store):
        with pytest.raises(NotFoundError):
            StockQueries.get_cell(CellKey(product.pk, store.pk))

    def test_totals(self, ledger, stocked, product, warehouse, actor):
        ledger.create_cell(CellKey(product.pk, warehouse.pk), 5, actor)

        assert ledger.total_stock(product.pk) == 25
        assert ledger.total_stock(product.pk, warehouse.pk) == 5
        assert StockQueries.available_stock(product.pk) == 25

    def test_list_cells_with_stock(self, ledger, stocked, product, actor):
        ledger.apply_delta(stocked, -20, 'out', actor)

        assert StockQueries.list_cells(product_id=product.pk).count() == 1
        assert StockQueries.list_cells(product_id=product.pk, with_stock=True).count() == 0

    def test_history_by_reference(self, ledger, stocked, product, actor):
        ledger.apply_delta(stocked, -2, 'out', actor, reference='sale:1')
        ledger.apply_delta(stocked, -3, 'out', actor, reference='sale:2')

        assert [e.quantity for e in StockQueries.history(product.pk)] == [-3, -2, 20]
        assert StockQueries.history(product.pk, reference='sale:1').get().quantity == -2

    def test_open_alerts(self, ledger, stocked, product, actor):
        ledger.apply_delta(stocked, -20, 'out', actor)

        assert StockQueries.open_alerts(product.pk).count() == 1
