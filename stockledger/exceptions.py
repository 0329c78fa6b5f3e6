"""
Exceptions for Stockledger.

All errors are StockError subclasses with a structured code for
programmatic handling. The HTTP layer turns them into user-visible messages.
"""

from decimal import Decimal
from typing import Any


class BaseError(Exception):
    """
    Structured exception: code + message + context data.

    Usage:
        raise StockError('SOME_CODE', product_id=3, requested=5)
    """

    default_code = 'ERROR'
    _default_messages: dict[str, str] = {}

    def __init__(self, code: str | None = None, message: str | None = None, **data):
        self.code = code or self.default_code
        self.message = message or self._default_messages.get(self.code, self.code)
        self.data = data
        super().__init__(self.message)

    def __str__(self) -> str:
        if not self.data:
            return f"[{self.code}] {self.message}"
        context = ', '.join(f"{k}={v}" for k, v in self.data.items())
        return f"[{self.code}] {self.message} ({context})"

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': {
                k: str(v) if isinstance(v, Decimal) else v
                for k, v in self.data.items()
            }
        }


class StockError(BaseError):
    """
    Root of the stock error taxonomy.

    Usage:
        try:
            ledger.allocate(product_id, location_id, 10, reference='sale:4', actor_id='u1')
        except InsufficientStockError as e:
            print(f"Only {e.available} available")
    """

    default_code = 'STOCK_ERROR'
    _default_messages = {
        'STOCK_ERROR': 'Stock operation failed',
        'NOT_FOUND': 'Entity not found',
        'INSUFFICIENT_STOCK': 'Insufficient stock',
        'INVALID_TRANSITION': 'Invalid transition for the current status',
        'INVALID_ACTION': 'Invalid action',
        'DUPLICATE': 'Entity already exists',
        'VALIDATION_ERROR': 'Invalid input',
        'IN_USE': 'Entity is still referenced',
    }

    @property
    def available(self) -> int:
        """Shortcut for data['available']."""
        return self.data.get('available', 0)

    @property
    def requested(self) -> int:
        """Shortcut for data['requested']."""
        return self.data.get('requested', 0)


class NotFoundError(StockError):
    """Entity id could not be resolved."""

    default_code = 'NOT_FOUND'


class InsufficientStockError(StockError):
    """Quantity or available would drop below zero."""

    default_code = 'INSUFFICIENT_STOCK'


class InvalidTransitionError(StockError):
    """Illegal state machine edge."""

    default_code = 'INVALID_TRANSITION'


class InvalidActionError(StockError):
    """Unrecognised action string."""

    default_code = 'INVALID_ACTION'


class DuplicateError(StockError):
    """Unique value (batch number, location name) already present."""

    default_code = 'DUPLICATE'


class ValidationError(StockError):
    """Input failed validation before any repository call."""

    default_code = 'VALIDATION_ERROR'

    @property
    def field(self) -> str | None:
        return self.data.get('field')


class ReferencedError(StockError):
    """Entity cannot be deleted while other rows reference it."""

    default_code = 'IN_USE'
