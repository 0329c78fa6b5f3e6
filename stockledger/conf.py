"""
Stockledger configuration.

Usage in settings.py:
    STOCKLEDGER = {
        "REPOSITORY": "stockledger.adapters.orm.DjangoStockRepository",
        "EXPIRY_WARNING_DAYS": 30,
        "REORDER_ALERTS": True,
        "REORDER_POINT_RATIO": 0.5,
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class StockLedgerSettings:
    """Stockledger configuration settings."""

    # Repository backend (dotted path)
    REPOSITORY: str = "stockledger.adapters.orm.DjangoStockRepository"

    # Days before a batch's expiry date that an EXPIRY alert is raised
    EXPIRY_WARNING_DAYS: int = 30

    # Alert kinds evaluated after stock changes
    LOW_STOCK_ALERTS: bool = True
    EXPIRY_ALERTS: bool = True
    REORDER_ALERTS: bool = False

    # Reorder point as a fraction of Product.max_stock
    REORDER_POINT_RATIO: float = 0.5

    # Document number prefixes
    TRANSFER_NUMBER_PREFIX: str = "TRF"
    INVOICE_NUMBER_PREFIX: str = "INV"


def get_stockledger_settings() -> StockLedgerSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "STOCKLEDGER", {})
    return StockLedgerSettings(**{
        k: v for k, v in user_settings.items()
        if k in StockLedgerSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_stockledger_settings(), name)


stockledger_settings = _LazySettings()
