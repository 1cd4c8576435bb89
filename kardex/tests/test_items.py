"""
Tests for the item registry.
"""

from decimal import Decimal

import pytest

from kardex import ledger
from kardex.exceptions import LedgerValidationError
from kardex.models import StockItem


pytestmark = pytest.mark.django_db


class TestCreateItem:

    def test_genesis_balance(self):
        item = ledger.create_item('Correia', initial_quantity=Decimal('7'), unit_cost='15.90')

        item.refresh_from_db()
        assert item.initial_quantity == Decimal('7')
        assert item.quantity == Decimal('7')
        assert item.unit_cost == Decimal('15.90')
        assert item.min_stock is None
        assert item.version == 0

    def test_no_genesis_movement(self):
        """Genesis lives in initial_quantity; the ledger starts empty."""
        item = ledger.create_item('Correia', initial_quantity=Decimal('7'))

        assert item.movements.count() == 0
        assert ledger.check_integrity(item) is None

    @pytest.mark.parametrize('field, kwargs', [
        ('initial_quantity', {'initial_quantity': -1}),
        ('unit_cost', {'unit_cost': '-0.01'}),
        ('min_stock', {'min_stock': -5}),
        ('unit_cost', {'unit_cost': 'caro'}),
    ])
    def test_rejects_negative_values(self, field, kwargs):
        with pytest.raises(LedgerValidationError) as exc:
            ledger.create_item('Correia', **kwargs)

        assert exc.value.code == 'INVALID_FIELD'
        assert exc.value.data['field'] == field
        assert not StockItem.objects.exists()

    @pytest.mark.parametrize('field, kwargs', [
        ('initial_quantity', {'initial_quantity': Decimal('1e12')}),
        ('initial_quantity', {'initial_quantity': Decimal('1e30')}),
        ('initial_quantity', {'initial_quantity': '1.0001'}),
        ('min_stock', {'min_stock': '1000000000'}),
        ('unit_cost', {'unit_cost': '10000000000'}),
        ('unit_cost', {'unit_cost': Decimal('1e30')}),
        ('unit_cost', {'unit_cost': '15.901'}),
    ])
    def test_rejects_values_beyond_columns(self, field, kwargs):
        with pytest.raises(LedgerValidationError) as exc:
            ledger.create_item('Correia', **kwargs)

        assert exc.value.code == 'INVALID_FIELD'
        assert exc.value.data['field'] == field
        assert not StockItem.objects.exists()

    def test_largest_values_accepted(self):
        item = ledger.create_item(
            'Correia',
            initial_quantity='999999999.999',
            unit_cost='9999999999.99',
            min_stock='999999999.999',
        )

        item = ledger.get_item(item)
        assert item.quantity == Decimal('999999999.999')
        assert item.unit_cost == Decimal('9999999999.99')
        assert item.min_stock == Decimal('999999999.999')

    def test_blank_name_rejected(self):
        with pytest.raises(LedgerValidationError) as exc:
            ledger.create_item('   ')

        assert exc.value.data['field'] == 'name'


class TestUpdateMetadata:

    def test_partial_update(self, stocked_item):
        item = ledger.update_metadata(stocked_item, unit_cost=Decimal('95.00'))

        item.refresh_from_db()
        assert item.unit_cost == Decimal('95.00')
        assert item.name == 'Gás R-410A'
        assert item.min_stock == Decimal('2')

    def test_never_touches_balance(self, stocked_item):
        ledger.decrease(stocked_item, 4)

        # stale instance still says 10
        ledger.update_metadata(stocked_item, name='Gás R-410A (botijão)', description='11,3 kg')

        item = ledger.get_item(stocked_item)
        assert item.quantity == Decimal('6')
        assert item.initial_quantity == Decimal('10')
        assert item.version == 1
        assert item.description == '11,3 kg'

    def test_clear_threshold(self, stocked_item):
        item = ledger.update_metadata(stocked_item, min_stock=None)

        assert ledger.get_item(item).min_stock is None

    def test_invalid_cost(self, stocked_item):
        with pytest.raises(LedgerValidationError):
            ledger.update_metadata(stocked_item, unit_cost=-1)

        assert ledger.get_item(stocked_item).unit_cost == Decimal('80.00')

    @pytest.mark.parametrize('kwargs', [
        {'unit_cost': Decimal('1e12')},
        {'min_stock': Decimal('1e12')},
    ])
    def test_values_beyond_columns_rejected(self, stocked_item, kwargs):
        with pytest.raises(LedgerValidationError) as exc:
            ledger.update_metadata(stocked_item, **kwargs)

        assert exc.value.code == 'INVALID_FIELD'
        item = ledger.get_item(stocked_item)
        assert item.unit_cost == Decimal('80.00')
        assert item.min_stock == Decimal('2')

    def test_unknown_item(self, db):
        with pytest.raises(LedgerValidationError) as exc:
            ledger.update_metadata(424242, name='X')

        assert exc.value.code == 'ITEM_NOT_FOUND'


class TestLowStock:

    def test_at_threshold_is_low(self, stocked_item):
        ledger.decrease(stocked_item, 8)

        item = ledger.get_item(stocked_item)
        assert ledger.is_low_stock(item)
        assert list(ledger.low_stock_items()) == [item]

    def test_above_threshold(self, stocked_item):
        assert not ledger.is_low_stock(stocked_item)
        assert not ledger.low_stock_items().exists()

    def test_without_threshold_never_low(self, item):
        assert item.quantity == Decimal('0')
        assert not ledger.is_low_stock(item)

    def test_low_stock_does_not_block(self, stocked_item):
        """Advisory only: decreases below the threshold go through."""
        ledger.decrease(stocked_item, 9)

        assert ledger.get_item(stocked_item).quantity == Decimal('1')


class TestCatalogQueries:

    def test_search_is_case_insensitive(self, item, stocked_item):
        assert list(ledger.search('filtro')) == [item]
        assert ledger.search('').count() == 2

    def test_inventory_value(self, item, stocked_item):
        ledger.increase(item, 2)    # 2 × 12.50

        # 10 × 80.00 + 2 × 12.50
        assert ledger.inventory_value() == Decimal('825')

    def test_stock_value(self, stocked_item):
        assert stocked_item.stock_value == Decimal('800')

    def test_inventory_value_empty(self, db):
        assert ledger.inventory_value() == Decimal('0')
