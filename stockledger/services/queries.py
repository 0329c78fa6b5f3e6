"""
Stock queries — read-only operations.

All methods are classmethods and take no locks.
"""

from django.db.models import QuerySet, Sum
from django.db.models.functions import Coalesce

from stockledger.exceptions import NotFoundError
from stockledger.models.alert import Alert
from stockledger.models.cell import StockCell
from stockledger.models.log import StockLog
from stockledger.protocols.repository import CellKey


class StockQueries:
    """Read-only stock query methods."""

    @classmethod
    def get_cell(cls, key: CellKey) -> StockCell:
        """
        Raises:
            NotFoundError: No cell for the key
        """
        cell = StockCell.objects.filter(
            product_id=key.product_id,
            location_id=key.location_id,
            batch_id=key.batch_id,
        ).first()
        if cell is None:
            raise NotFoundError(message="Stock cell not found", cell=str(key))
        return cell

    @classmethod
    def list_cells(cls, product_id: int | None = None, location_id: int | None = None,
                   with_stock: bool = False) -> QuerySet:
        """Cells in FIFO order, optionally filtered."""
        qs = StockCell.objects.select_related('product', 'location', 'batch')
        if product_id is not None:
            qs = qs.filter(product_id=product_id)
        if location_id is not None:
            qs = qs.filter(location_id=location_id)
        if with_stock:
            qs = qs.filter(quantity__gt=0)
        return qs.order_by('created_at', 'pk')

    @classmethod
    def total_stock(cls, product_id: int, location_id: int | None = None) -> int:
        """Sum of quantity across the product's cells."""
        qs = StockCell.objects.filter(product_id=product_id)
        if location_id is not None:
            qs = qs.filter(location_id=location_id)
        return qs.aggregate(t=Coalesce(Sum('quantity'), 0))['t']

    @classmethod
    def available_stock(cls, product_id: int, location_id: int | None = None) -> int:
        """Sum of available (quantity - reserved) across the product's cells."""
        qs = StockCell.objects.filter(product_id=product_id)
        if location_id is not None:
            qs = qs.filter(location_id=location_id)
        return qs.aggregate(t=Coalesce(Sum('available'), 0))['t']

    @classmethod
    def cell_history(cls, cell_id: int) -> QuerySet:
        """Log entries of a cell, oldest first. Still readable after the cell is deleted."""
        return StockLog.objects.filter(cell_id=cell_id).order_by('timestamp', 'pk')

    @classmethod
    def history(cls, product_id: int, reference: str | None = None) -> QuerySet:
        """Log entries of a product, newest first."""
        qs = StockLog.objects.filter(product_id=product_id)
        if reference is not None:
            qs = qs.filter(reference=reference)
        return qs.order_by('-timestamp', '-pk')

    @classmethod
    def open_alerts(cls, product_id: int | None = None) -> QuerySet:
        qs = Alert.objects.open()
        if product_id is not None:
            qs = qs.filter(product_id=product_id)
        return qs.order_by('-created_at')
