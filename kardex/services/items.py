"""
Item registry — catalog-side operations on stock items.

None of these methods write the balance, except create_item(), which
sets the genesis balance once.
"""

import logging
from decimal import Decimal, InvalidOperation

from django.db.models import DecimalField, ExpressionWrapper, F, Sum
from django.db.models.functions import Coalesce

from kardex.exceptions import LedgerValidationError
from kardex.models.item import MAX_QUANTITY, MAX_UNIT_COST, StockItem

logger = logging.getLogger('kardex')

_UNSET = object()

QUANTITY_PLACES = Decimal('0.001')
COST_PLACES = Decimal('0.01')


def _to_decimal(value, field: str) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise LedgerValidationError('INVALID_FIELD', field=field, value=value)


def _non_negative(value, field: str, maximum: Decimal = MAX_QUANTITY,
                  places: Decimal = QUANTITY_PLACES) -> Decimal:
    """Non-negative, within the column's digits and decimal places."""
    number = _to_decimal(value, field)
    if not number.is_finite() or number < 0 or number > maximum:
        raise LedgerValidationError('INVALID_FIELD', field=field, value=value)
    try:
        exact = number == number.quantize(places)
    except InvalidOperation:
        exact = False
    if not exact:
        raise LedgerValidationError('INVALID_FIELD', field=field, value=value)
    return number


def _unit_cost(value) -> Decimal:
    return _non_negative(value, 'unit_cost', MAX_UNIT_COST, COST_PLACES)


def _clean_name(name) -> str:
    name = (name or '').strip()
    if not name:
        raise LedgerValidationError('INVALID_FIELD', field='name', value=name)
    return name


class ItemRegistry:
    """Stock item registry methods."""

    @classmethod
    def get_item(cls, item) -> StockItem:
        """
        Resolve an item instance or primary key.

        Always reads from the database, so the returned balance is current.

        Raises:
            LedgerValidationError('ITEM_NOT_FOUND')
        """
        pk = item.pk if isinstance(item, StockItem) else item
        try:
            return StockItem.objects.get(pk=pk)
        except (StockItem.DoesNotExist, ValueError, TypeError):
            raise LedgerValidationError('ITEM_NOT_FOUND', item_id=pk)

    @classmethod
    def create_item(cls, name: str, initial_quantity=Decimal('0'),
                    unit_cost=Decimal('0'), min_stock=None,
                    description: str = '') -> StockItem:
        """
        Register a new item with its genesis balance.

        The genesis balance is stored as initial_quantity; no movement is
        written for it, so replaying the ledger starts from there.

        Raises:
            LedgerValidationError('INVALID_FIELD')
        """
        initial = _non_negative(initial_quantity, 'initial_quantity')
        item = StockItem.objects.create(
            name=_clean_name(name),
            description=description or '',
            unit_cost=_unit_cost(unit_cost),
            min_stock=None if min_stock is None else _non_negative(min_stock, 'min_stock'),
            initial_quantity=initial,
            _quantity=initial,
        )
        logger.info(
            "kardex.item.created",
            extra={
                "item_id": item.pk,
                "item_name": item.name,
                "initial_quantity": str(initial),
            },
        )
        return item

    @classmethod
    def update_metadata(cls, item, *, name=_UNSET, description=_UNSET,
                        unit_cost=_UNSET, min_stock=_UNSET) -> StockItem:
        """
        Partial update of descriptive fields.

        Omitted fields are left alone; min_stock=None clears the threshold.
        Never touches quantity, initial_quantity or version.
        """
        item = cls.get_item(item)
        changed = []

        if name is not _UNSET:
            item.name = _clean_name(name)
            changed.append('name')
        if description is not _UNSET:
            item.description = description or ''
            changed.append('description')
        if unit_cost is not _UNSET:
            item.unit_cost = _unit_cost(unit_cost)
            changed.append('unit_cost')
        if min_stock is not _UNSET:
            item.min_stock = None if min_stock is None else _non_negative(min_stock, 'min_stock')
            changed.append('min_stock')

        if changed:
            item.save(update_fields=[*changed, 'updated_at'])
        return item

    @classmethod
    def is_low_stock(cls, item) -> bool:
        """Advisory: threshold set and balance at or below it."""
        return item.is_low_stock

    @classmethod
    def low_stock_items(cls):
        return StockItem.objects.low_stock()

    @classmethod
    def search(cls, term: str = ''):
        return StockItem.objects.search(term)

    @classmethod
    def inventory_value(cls) -> Decimal:
        """Sum of quantity × unit_cost over all items."""
        value = ExpressionWrapper(
            F('_quantity') * F('unit_cost'),
            output_field=DecimalField(max_digits=24, decimal_places=5),
        )
        return StockItem.objects.aggregate(
            t=Coalesce(Sum(value), Decimal('0'), output_field=DecimalField(max_digits=24, decimal_places=5))
        )['t']
