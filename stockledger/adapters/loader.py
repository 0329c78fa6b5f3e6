"""
Repository loader — resolves the configured StockRepository.

Usage:
    from stockledger.adapters import get_repository

    repository = get_repository()
    with repository.atomic():
        cell = repository.get_cell(key, lock=True)

Settings:
    STOCKLEDGER = {
        "REPOSITORY": "stockledger.adapters.orm.DjangoStockRepository",
    }
"""

from __future__ import annotations

import logging
import threading

from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from stockledger.conf import stockledger_settings
from stockledger.protocols.repository import StockRepository

logger = logging.getLogger(__name__)


# Cached repository instance
_lock = threading.Lock()
_repository: StockRepository | None = None


def get_repository() -> StockRepository:
    """
    Return the configured repository.

    Raises:
        ImproperlyConfigured: If REPOSITORY is empty or cannot be imported
    """
    global _repository

    if _repository is None:
        with _lock:
            if _repository is None:  # double-checked
                repository_path = stockledger_settings.REPOSITORY

                if not repository_path:
                    raise ImproperlyConfigured(
                        "STOCKLEDGER['REPOSITORY'] must be configured. "
                        "Example: 'stockledger.adapters.orm.DjangoStockRepository'"
                    )

                try:
                    repository_class = import_string(repository_path)
                except ImportError as e:
                    raise ImproperlyConfigured(
                        f"Failed to import repository '{repository_path}': {e}"
                    ) from e

                _repository = repository_class()
                logger.debug("Loaded stock repository: %s", repository_path)

    return _repository


def reset_repository() -> None:
    """
    Reset the cached repository and the module-level ledger built on it.

    The ledger snapshots the alert policy from settings when first built,
    so call this after changing STOCKLEDGER at runtime. Useful for testing.
    """
    global _repository
    _repository = None

    import stockledger
    stockledger._ledger = None
