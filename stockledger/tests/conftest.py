"""
Pytest fixtures for Stockledger tests.
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from stockledger.adapters import reset_repository
from stockledger.models import Batch, Location, Product
from stockledger.protocols import CellKey
from stockledger.service import Ledger
from stockledger.services.alerts import AlertPolicyConfig


@pytest.fixture(autouse=True)
def _fresh_repository():
    """Drop the cached repository so settings overrides take effect."""
    reset_repository()
    yield
    reset_repository()


@pytest.fixture
def actor():
    return 'user-1'


@pytest.fixture
def policy():
    """Default alert policy with reorder alerts enabled."""
    return AlertPolicyConfig(
        low_stock_enabled=True,
        expiry_enabled=True,
        reorder_enabled=True,
        expiry_warning_days=30,
        reorder_point_ratio=0.5,
    )


@pytest.fixture
def ledger(db, policy):
    """Ledger facade over the ORM repository."""
    return Ledger(policy=policy)


@pytest.fixture
def store(db):
    return Location.objects.create(name='Main Store', address='12 High St')


@pytest.fixture
def warehouse(db):
    return Location.objects.create(name='Warehouse')


@pytest.fixture
def product(db):
    """Plain product, min_stock=5, no batch tracking."""
    return Product.objects.create(
        sku='WID-001',
        name='Widget',
        price=Decimal('10.00'),
        cost=Decimal('6.00'),
        min_stock=5,
    )


@pytest.fixture
def tracked_product(db):
    """Batch- and expiry-tracked product, min_stock=2, max_stock=40."""
    return Product.objects.create(
        sku='MLK-001',
        name='Milk',
        price=Decimal('2.50'),
        cost=Decimal('1.20'),
        min_stock=2,
        max_stock=40,
        track_batch=True,
        track_expiry=True,
    )


@pytest.fixture
def batch_a(tracked_product):
    return Batch.objects.create(
        product=tracked_product,
        batch_number='LOT-A',
        quantity=10,
        cost=Decimal('1.20'),
        expiry_date=date.today() + timedelta(days=90),
    )


@pytest.fixture
def batch_b(tracked_product):
    return Batch.objects.create(
        product=tracked_product,
        batch_number='LOT-B',
        quantity=10,
        cost=Decimal('1.10'),
        expiry_date=date.today() + timedelta(days=120),
    )


@pytest.fixture
def stocked(ledger, product, store, actor):
    """20 units of product at store."""
    key = CellKey(product.pk, store.pk)
    ledger.create_cell(key, 20, actor)
    return key
