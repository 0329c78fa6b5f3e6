"""
Validated inputs for stock operations.

Request bodies arrive as loosely typed dicts. Each operation takes one of
these frozen dataclasses instead; from_data() validates and normalises the
dict and raises ValidationError before any repository call.

Usage:
    req = TransferRequest.from_data(request_json)
    transfer = ledger.transfers.create(req, actor_id=user_id)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from stockledger.exceptions import InvalidActionError, ValidationError

ADJUST_ACTIONS = ('add', 'remove', 'set')

# Column limits of the models the requests are written to
MAX_INT = 2 ** 31 - 1
MONEY_DIGITS = 12
MONEY_PLACES = 2
NOTES_LENGTH = 255

_INT_RE = re.compile(r'-?[0-9]+')


# ══════════════════════════════════════════════════════════════
# FIELD PARSERS
# ══════════════════════════════════════════════════════════════


def _require(data: dict[str, Any], name: str) -> Any:
    value = data.get(name)
    if value is None or value == '':
        raise ValidationError(message=f"{name} is required", field=name)
    return value


def _int(value: Any, name: str, minimum: int = 1) -> int:
    """Integer in [minimum, MAX_INT]. ASCII digit strings are accepted."""
    if isinstance(value, bool):
        raise ValidationError(message=f"{name} must be an integer", field=name)
    if isinstance(value, str):
        value = value.strip()
        if not _INT_RE.fullmatch(value):
            raise ValidationError(message=f"{name} must be an integer", field=name)
        value = int(value)
    if not isinstance(value, int):
        raise ValidationError(message=f"{name} must be an integer", field=name)
    if value < minimum:
        raise ValidationError(message=f"{name} must be >= {minimum}", field=name, value=value)
    if value > MAX_INT:
        raise ValidationError(message=f"{name} must be <= {MAX_INT}", field=name)
    return value


def _optional_int(data: dict[str, Any], name: str) -> int | None:
    value = data.get(name)
    if value is None or value == '':
        return None
    return _int(value, name)


def _check_money(value: Decimal, name: str, digits: int = MONEY_DIGITS) -> Decimal:
    if value >= Decimal(10) ** (digits - MONEY_PLACES):
        raise ValidationError(message=f"{name} is too large", field=name)
    return value


def _decimal(value: Any, name: str, default: Decimal | None = None) -> Decimal:
    """Non-negative amount that fits a DecimalField(12, 2)."""
    if value is None or value == '':
        if default is None:
            raise ValidationError(message=f"{name} is required", field=name)
        return default
    if isinstance(value, bool):
        raise ValidationError(message=f"{name} must be a number", field=name)
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(message=f"{name} must be a number", field=name) from None
    if not result.is_finite() or result < 0:
        raise ValidationError(message=f"{name} must be a non-negative number", field=name)
    _check_money(result, name)
    if result != result.quantize(Decimal('0.01')):
        raise ValidationError(
            message=f"{name} must have at most {MONEY_PLACES} decimal places",
            field=name,
        )
    return result


def _date(value: Any, name: str) -> date | None:
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(value.replace('Z', '+00:00')).date()
        except ValueError:
            pass
    raise ValidationError(message=f"{name} must be an ISO date", field=name)


def _text(data: dict[str, Any], name: str, max_length: int | None = None) -> str:
    value = data.get(name)
    if value is None:
        return ''
    if not isinstance(value, str):
        raise ValidationError(message=f"{name} must be a string", field=name)
    value = value.strip()
    if max_length is not None and len(value) > max_length:
        raise ValidationError(
            message=f"{name} must be at most {max_length} characters",
            field=name,
        )
    return value


def _items(data: dict[str, Any]) -> list[dict[str, Any]]:
    items = data.get('items')
    if not items:
        raise ValidationError(message="At least one item is required", field='items')
    if not isinstance(items, (list, tuple)) or not all(isinstance(i, dict) for i in items):
        raise ValidationError(message="items must be a list of objects", field='items')
    return list(items)


# ══════════════════════════════════════════════════════════════
# STOCK
# ══════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class StockInRequest:
    """Receive stock into a (product, location, batch) cell."""

    product_id: int
    location_id: int
    quantity: int
    batch_id: int | None = None
    notes: str = ''

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> StockInRequest:
        return cls(
            product_id=_int(_require(data, 'product_id'), 'product_id'),
            location_id=_int(_require(data, 'location_id'), 'location_id'),
            quantity=_int(_require(data, 'quantity'), 'quantity'),
            batch_id=_optional_int(data, 'batch_id'),
            notes=_text(data, 'notes', NOTES_LENGTH),
        )


@dataclass(frozen=True)
class StockAdjustRequest:
    """
    Manual change on an existing cell.

    - add: quantity units in
    - remove: quantity units out
    - set: quantity becomes the new on-hand figure (0 allowed)
    """

    cell_id: int
    action: str
    quantity: int
    notes: str = ''

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> StockAdjustRequest:
        action = _require(data, 'action')
        if action not in ADJUST_ACTIONS:
            raise InvalidActionError(action=action, allowed=list(ADJUST_ACTIONS))
        minimum = 0 if action == 'set' else 1
        return cls(
            cell_id=_int(_require(data, 'cell_id'), 'cell_id'),
            action=action,
            quantity=_int(_require(data, 'quantity'), 'quantity', minimum),
            notes=_text(data, 'notes', NOTES_LENGTH),
        )


# ══════════════════════════════════════════════════════════════
# TRANSFERS
# ══════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class TransferItemRequest:
    product_id: int
    quantity: int
    batch_id: int | None = None
    cost: Decimal = Decimal('0')

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> TransferItemRequest:
        return cls(
            product_id=_int(_require(data, 'product_id'), 'product_id'),
            quantity=_int(_require(data, 'quantity'), 'quantity'),
            batch_id=_optional_int(data, 'batch_id'),
            cost=_decimal(data.get('cost'), 'cost', default=Decimal('0')),
        )


@dataclass(frozen=True)
class TransferRequest:
    from_location_id: int
    to_location_id: int
    items: tuple[TransferItemRequest, ...]
    notes: str = ''

    def __post_init__(self):
        if self.from_location_id == self.to_location_id:
            raise ValidationError(
                message="From and To locations must be different",
                field='to_location_id',
            )
        if not self.items:
            raise ValidationError(message="At least one item is required", field='items')

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> TransferRequest:
        return cls(
            from_location_id=_int(_require(data, 'from_location_id'), 'from_location_id'),
            to_location_id=_int(_require(data, 'to_location_id'), 'to_location_id'),
            items=tuple(TransferItemRequest.from_data(item) for item in _items(data)),
            notes=_text(data, 'notes'),
        )


# ══════════════════════════════════════════════════════════════
# SALES
# ══════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class SaleItemRequest:
    product_id: int
    quantity: int
    price: Decimal
    discount: Decimal = Decimal('0')  # percent
    batch_id: int | None = None

    def __post_init__(self):
        _check_money(self.total, 'price')

    @property
    def total(self) -> Decimal:
        gross = self.price * self.quantity
        return (gross * (Decimal('100') - self.discount) / Decimal('100')).quantize(Decimal('0.01'))

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> SaleItemRequest:
        discount = _decimal(data.get('discount'), 'discount', default=Decimal('0'))
        if discount > 100:
            raise ValidationError(message="discount must be <= 100", field='discount')
        return cls(
            product_id=_int(_require(data, 'product_id'), 'product_id'),
            quantity=_int(_require(data, 'quantity'), 'quantity'),
            price=_decimal(data.get('price'), 'price'),
            discount=discount,
            batch_id=_optional_int(data, 'batch_id'),
        )


@dataclass(frozen=True)
class SaleRequest:
    location_id: int
    items: tuple[SaleItemRequest, ...]
    customer_name: str = ''
    notes: str = ''
    discount: Decimal = Decimal('0')
    tax: Decimal = Decimal('0')

    def __post_init__(self):
        _check_money(self.total_amount, 'items')
        _check_money(abs(self.final_amount), 'tax')

    @property
    def total_amount(self) -> Decimal:
        return sum((item.total for item in self.items), Decimal('0'))

    @property
    def final_amount(self) -> Decimal:
        return self.total_amount - self.discount + self.tax

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> SaleRequest:
        return cls(
            location_id=_int(_require(data, 'location_id'), 'location_id'),
            items=tuple(SaleItemRequest.from_data(item) for item in _items(data)),
            customer_name=_text(data, 'customer_name', 200),
            notes=_text(data, 'notes'),
            discount=_decimal(data.get('discount'), 'discount', default=Decimal('0')),
            tax=_decimal(data.get('tax'), 'tax', default=Decimal('0')),
        )


# ══════════════════════════════════════════════════════════════
# BATCHES & LOCATIONS
# ══════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class BatchRequest:
    product_id: int
    batch_number: str
    quantity: int
    cost: Decimal
    expiry_date: date | None = None
    manufacturing_date: date | None = None
    notes: str = ''

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> BatchRequest:
        batch_number = _text(data, 'batch_number', 50)
        if not batch_number:
            raise ValidationError(message="batch_number is required", field='batch_number')
        return cls(
            product_id=_int(_require(data, 'product_id'), 'product_id'),
            batch_number=batch_number,
            quantity=_int(_require(data, 'quantity'), 'quantity'),
            cost=_decimal(data.get('cost'), 'cost'),
            expiry_date=_date(data.get('expiry_date'), 'expiry_date'),
            manufacturing_date=_date(data.get('manufacturing_date'), 'manufacturing_date'),
            notes=_text(data, 'notes'),
        )


@dataclass(frozen=True)
class BatchPatch:
    """Partial batch update. Only keys present in the body are applied."""

    changes: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> BatchPatch:
        changes: dict[str, Any] = {}
        if data.get('batch_number'):
            changes['batch_number'] = _text(data, 'batch_number', 50)
        if 'quantity' in data:
            changes['quantity'] = _int(data['quantity'], 'quantity', minimum=0)
        if 'cost' in data:
            changes['cost'] = _decimal(data['cost'], 'cost')
        if 'expiry_date' in data:
            changes['expiry_date'] = _date(data['expiry_date'], 'expiry_date')
        if 'manufacturing_date' in data:
            changes['manufacturing_date'] = _date(data['manufacturing_date'], 'manufacturing_date')
        if 'notes' in data:
            changes['notes'] = _text(data, 'notes')
        return cls(changes=changes)


@dataclass(frozen=True)
class LocationRequest:
    name: str
    description: str = ''
    address: str = ''

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> LocationRequest:
        name = _text(data, 'name', 100)
        if not name:
            raise ValidationError(message="Location name is required", field='name')
        return cls(
            name=name,
            description=_text(data, 'description'),
            address=_text(data, 'address', 255),
        )
