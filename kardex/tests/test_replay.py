"""
Tests for balance replay (pure functions, no database).
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest

from kardex.models import MovementKind
from kardex.services.replay import (
    IntegrityMismatch,
    LedgerEntry,
    compare,
    final_balance,
    ledger_order,
    reconstruct,
    signed_delta,
)


T0 = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


def mv(pk, kind, quantity, minutes=0):
    return SimpleNamespace(
        pk=pk,
        kind=kind,
        quantity=Decimal(quantity),
        created_at=T0 + timedelta(minutes=minutes),
    )


@pytest.fixture
def movements():
    return [
        mv(1, MovementKind.INCREASE, '10', 0),
        mv(2, MovementKind.DECREASE, '4', 5),
        mv(3, MovementKind.INCREASE, '1.5', 10),
    ]


class TestReconstruct:

    def test_running_balance(self, movements):
        entries = reconstruct(Decimal('0'), movements)

        assert [e.balance for e in entries] == [Decimal('10'), Decimal('6'), Decimal('7.5')]
        assert [e.movement.pk for e in entries] == [1, 2, 3]

    def test_starts_from_initial_quantity(self, movements):
        entries = reconstruct(Decimal('5'), movements)

        assert entries[0].balance == Decimal('15')
        assert entries[-1].balance == Decimal('12.5')

    def test_empty_ledger(self):
        assert reconstruct(Decimal('3'), []) == []
        assert final_balance(Decimal('3'), []) == Decimal('3')

    def test_deterministic(self, movements):
        """Replaying the same snapshot twice gives identical output."""
        assert reconstruct(Decimal('0'), movements) == reconstruct(Decimal('0'), movements)

    def test_final_balance_matches_last_entry(self, movements):
        assert final_balance(Decimal('2'), movements) == reconstruct(Decimal('2'), movements)[-1].balance

    def test_unknown_kind_raises(self):
        with pytest.raises(ValueError):
            signed_delta(mv(1, 'transfer', '1'))

    def test_balance_may_dip_in_replay(self):
        """Replay reports history as written; it never clamps."""
        entries = reconstruct(Decimal('0'), [mv(1, MovementKind.DECREASE, '2')])

        assert entries[0].balance == Decimal('-2')


class TestLedgerOrder:

    def test_sorts_by_timestamp_then_pk(self):
        a = mv(3, MovementKind.INCREASE, '1', 0)
        b = mv(1, MovementKind.INCREASE, '1', 5)
        c = mv(2, MovementKind.INCREASE, '1', 5)

        assert [m.pk for m in ledger_order([b, c, a])] == [3, 1, 2]

    def test_reordered_input_replays_to_same_final_balance(self, movements):
        shuffled = [movements[2], movements[0], movements[1]]

        ordered = ledger_order(shuffled)

        assert reconstruct(Decimal('0'), ordered) == reconstruct(Decimal('0'), movements)

    def test_order_matters_for_intermediate_balances(self, movements):
        reversed_entries = reconstruct(Decimal('0'), list(reversed(movements)))

        assert reversed_entries[-1].balance == Decimal('7.5')
        assert reversed_entries[0].balance == Decimal('1.5')


class TestCompare:

    def item(self, initial, cached):
        return SimpleNamespace(pk=7, initial_quantity=Decimal(initial), quantity=Decimal(cached))

    def test_healthy(self, movements):
        entries = reconstruct(Decimal('0'), movements)

        assert compare(self.item('0', '7.5'), entries) is None

    def test_mismatch(self, movements):
        entries = reconstruct(Decimal('0'), movements)

        mismatch = compare(self.item('0', '9'), entries)

        assert mismatch == IntegrityMismatch(item_id=7, cached=Decimal('9'), replayed=Decimal('7.5'))
        assert mismatch.difference == Decimal('1.5')
        assert mismatch.as_dict() == {
            'item_id': '7', 'cached': '9', 'replayed': '7.5', 'difference': '1.5',
        }

    def test_no_movements_compares_with_genesis(self):
        assert compare(self.item('4', '4'), []) is None
        assert compare(self.item('4', '5'), []).replayed == Decimal('4')

    def test_entry_is_value_object(self):
        m = mv(1, MovementKind.INCREASE, '1')

        assert LedgerEntry(m, Decimal('1')) == LedgerEntry(m, Decimal('1'))
